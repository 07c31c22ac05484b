"""
Exports públicos do módulo fsm/transitions.

Regras de transição válidas entre etapas do checkout.
"""

from fsm.transitions.rules import (
    NEXT_STEP_AFTER_AUTHENTICATION,
    ORDER_PLACEMENT_STEP,
    VALID_TRANSITIONS,
    TransitionMap,
    get_next_step_after_authentication,
    get_valid_targets,
    is_transition_valid,
    progress_percentage,
    validate_transition_map,
)

__all__ = [
    "NEXT_STEP_AFTER_AUTHENTICATION",
    "ORDER_PLACEMENT_STEP",
    "VALID_TRANSITIONS",
    "TransitionMap",
    "get_next_step_after_authentication",
    "get_valid_targets",
    "is_transition_valid",
    "progress_percentage",
    "validate_transition_map",
]
