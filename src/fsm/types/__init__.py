"""
Exports públicos do módulo fsm/types.

Tipos e estruturas de dados para transições de etapa.
"""

from fsm.types.transition import StepTransition, TransitionResult

__all__ = [
    "StepTransition",
    "TransitionResult",
]
