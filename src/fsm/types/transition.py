"""
Registros de transição de etapa.

StepTransition descreve uma mudança aplicada; TransitionResult é o que
a CheckoutStateMachine devolve para cada tentativa, aceita ou negada.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fsm.states.checkout import CHECKOUT_STEP_ORDER, CheckoutStep


def _position(step: CheckoutStep) -> int:
    # tracking fica depois de todas as etapas navegáveis
    if step in CHECKOUT_STEP_ORDER:
        return CHECKOUT_STEP_ORDER.index(step)
    return len(CHECKOUT_STEP_ORDER)


@dataclass(frozen=True, slots=True)
class StepTransition:
    """
    Mudança de etapa aplicada a uma sessão.

    Attributes:
        from_step: Etapa de origem
        to_step: Etapa de destino
        trigger: 'user_navigation' ou 'authentication'
        metadata: Contexto para auditoria (nunca PII)
        timestamp: Momento da mudança (UTC)
    """

    from_step: CheckoutStep
    to_step: CheckoutStep
    trigger: str
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.trigger.strip():
            raise ValueError("trigger não pode ser vazio")

    @property
    def is_backward(self) -> bool:
        """Cliente voltou para uma etapa anterior."""
        return _position(self.to_step) < _position(self.from_step)

    @property
    def steps_skipped(self) -> int:
        """Etapas puladas num avanço (ex: autenticado pula customer_data)."""
        return max(0, _position(self.to_step) - _position(self.from_step) - 1)

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "from_step": self.from_step.value,
            "to_step": self.to_step.value,
            "trigger": self.trigger,
            "direction": "backward" if self.is_backward else "forward",
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """
    Resultado de uma tentativa de transição.

    Sucesso sempre traz `transition`; falha sempre traz `error_reason`.
    """

    success: bool
    transition: StepTransition | None = None
    error_reason: str | None = None

    def __post_init__(self) -> None:
        if self.success and self.transition is None:
            raise ValueError("Transição bem-sucedida deve incluir transition")
        if not self.success and self.error_reason is None:
            raise ValueError("Transição falha deve incluir error_reason")

    @classmethod
    def accepted(cls, transition: StepTransition) -> "TransitionResult":
        return cls(success=True, transition=transition)

    @classmethod
    def rejected(cls, reason: str) -> "TransitionResult":
        return cls(success=False, error_reason=reason)
