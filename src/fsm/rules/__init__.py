"""
Exports públicos do módulo fsm/rules.

Guards e invariantes para transições de etapa.
"""

from fsm.rules.guards import (
    DEFAULT_GUARDS,
    Guard,
    GuardResult,
    evaluate_guards,
    guard_same_step,
    guard_terminal_step,
    guard_valid_step,
)

__all__ = [
    "DEFAULT_GUARDS",
    "Guard",
    "GuardResult",
    "evaluate_guards",
    "guard_same_step",
    "guard_terminal_step",
    "guard_valid_step",
]
