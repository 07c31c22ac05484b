"""
Exports públicos do módulo fsm/manager.

Máquina de estados (CheckoutStateMachine) das etapas do checkout.
"""

from fsm.manager.machine import CheckoutStateMachine, create_fsm

__all__ = [
    "CheckoutStateMachine",
    "create_fsm",
]
