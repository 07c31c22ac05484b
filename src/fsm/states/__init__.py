"""
Exports públicos do módulo fsm/states.

Etapas canônicas do fluxo de checkout.
"""

from fsm.states.checkout import (
    CHECKOUT_STEP_ORDER,
    DEFAULT_INITIAL_STEP,
    TERMINAL_STEPS,
    CheckoutStep,
    is_terminal,
    is_valid_step,
    step_index,
)

__all__ = [
    "CHECKOUT_STEP_ORDER",
    "DEFAULT_INITIAL_STEP",
    "TERMINAL_STEPS",
    "CheckoutStep",
    "is_terminal",
    "is_valid_step",
    "step_index",
]
