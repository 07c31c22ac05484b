"""
Módulo FSM: Máquina de Estados das etapas do checkout.

Estrutura:
    - states/: Etapas (CheckoutStep enum) e ordem canônica
    - transitions/: Regras de transição (VALID_TRANSITIONS) e progresso
    - rules/: Guards e invariantes
    - manager/: Máquina de estados (CheckoutStateMachine)
    - types/: Tipos de dados (StepTransition, TransitionResult)
"""

from fsm.manager import CheckoutStateMachine, create_fsm
from fsm.rules import GuardResult, evaluate_guards
from fsm.states import (
    CHECKOUT_STEP_ORDER,
    DEFAULT_INITIAL_STEP,
    TERMINAL_STEPS,
    CheckoutStep,
    is_terminal,
    is_valid_step,
)
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_next_step_after_authentication,
    get_valid_targets,
    is_transition_valid,
    progress_percentage,
    validate_transition_map,
)
from fsm.types import StepTransition, TransitionResult

__all__ = [
    "CHECKOUT_STEP_ORDER",
    "DEFAULT_INITIAL_STEP",
    "TERMINAL_STEPS",
    "VALID_TRANSITIONS",
    "CheckoutStateMachine",
    "CheckoutStep",
    "GuardResult",
    "StepTransition",
    "TransitionResult",
    "create_fsm",
    "evaluate_guards",
    "get_next_step_after_authentication",
    "get_valid_targets",
    "is_terminal",
    "is_transition_valid",
    "is_valid_step",
    "progress_percentage",
    "validate_transition_map",
]
