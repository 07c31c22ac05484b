"""
Máquina de estados (CheckoutStateMachine) das etapas do checkout.

Controla transições de etapa, aplica guards e mantém histórico
rastreável. Não persiste nada: o serviço de sessão decide quando gravar.
"""

from typing import Any

from fsm.rules.guards import DEFAULT_GUARDS, Guard, GuardResult, evaluate_guards
from fsm.states.checkout import (
    DEFAULT_INITIAL_STEP,
    CheckoutStep,
    is_terminal,
)
from fsm.transitions.rules import (
    get_next_step_after_authentication,
    get_valid_targets,
    is_transition_valid,
    progress_percentage,
)
from fsm.types.transition import StepTransition, TransitionResult


class CheckoutStateMachine:
    """
    Máquina de estados para a sessão de checkout.

    Attributes:
        current_step: Etapa atual
        history: Histórico de transições realizadas
    """

    __slots__ = ("_current_step", "_guards", "_history", "_session_id")

    def __init__(
        self,
        initial_step: CheckoutStep | None = None,
        session_id: str = "",
        guards: list[Guard] | None = None,
    ) -> None:
        """
        Inicializa a máquina de estados.

        Args:
            initial_step: Etapa inicial (usa DEFAULT_INITIAL_STEP se None)
            session_id: Identificador da sessão para logs
            guards: Guards adicionais, avaliados após DEFAULT_GUARDS
        """
        self._current_step = initial_step or DEFAULT_INITIAL_STEP
        self._history: list[StepTransition] = []
        self._session_id = session_id
        self._guards: list[Guard] = [*DEFAULT_GUARDS, *(guards or [])]

    @property
    def current_step(self) -> CheckoutStep:
        """Etapa atual da máquina."""
        return self._current_step

    @property
    def history(self) -> list[StepTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def session_id(self) -> str:
        """Identificador da sessão."""
        return self._session_id

    @property
    def is_terminal(self) -> bool:
        """Verifica se está em etapa terminal."""
        return is_terminal(self._current_step)

    @property
    def progress(self) -> float:
        """Percentual de progresso da etapa atual."""
        return progress_percentage(self._current_step)

    def can_transition_to(self, target: CheckoutStep) -> bool:
        """Verifica se pode transitar para a etapa alvo."""
        if not is_transition_valid(self._current_step, target):
            return False
        return evaluate_guards(self._current_step, target, self._guards).allowed

    def get_valid_targets(self) -> frozenset[CheckoutStep]:
        """Retorna etapas de destino válidas a partir da etapa atual."""
        return get_valid_targets(self._current_step)

    def transition(
        self,
        target: CheckoutStep,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de etapa.

        Args:
            target: Etapa de destino
            trigger: Identificador do gatilho (ex: 'user_navigation')
            metadata: Dados adicionais para auditoria (nunca PII)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        if not is_transition_valid(self._current_step, target):
            return TransitionResult.rejected(
                f"Transição inválida: {self._current_step.name} → {target.name}"
            )

        guard_result: GuardResult = evaluate_guards(
            self._current_step, target, self._guards
        )
        if not guard_result.allowed:
            return TransitionResult.rejected(guard_result.reason or "Guard negou a transição")

        return self._apply(target, trigger, metadata)

    def advance_after_authentication(
        self,
        is_authenticated: bool,
        is_guest: bool,
    ) -> TransitionResult:
        """
        Avanço automático após identificação do cliente.

        O destino vem da tabela fixa NEXT_STEP_AFTER_AUTHENTICATION, não
        da navegação do cliente.
        """
        if self.is_terminal:
            return TransitionResult.rejected(
                f"Etapa {self._current_step.name} é terminal, não permite transição"
            )
        target = get_next_step_after_authentication(is_authenticated, is_guest)
        if target == self._current_step:
            return TransitionResult.rejected("Cliente não identificado: etapa mantida")
        return self._apply(
            target,
            "authentication",
            {"is_authenticated": is_authenticated, "is_guest": is_guest},
        )

    def _apply(
        self,
        target: CheckoutStep,
        trigger: str,
        metadata: dict[str, Any] | None,
    ) -> TransitionResult:
        transition = StepTransition(
            from_step=self._current_step,
            to_step=target,
            trigger=trigger,
            metadata=metadata or {},
        )
        self._current_step = target
        self._history.append(transition)
        return TransitionResult.accepted(transition)

    def get_state_summary(self) -> dict[str, Any]:
        """
        Retorna resumo da etapa atual para observability.

        Returns:
            Dict com informações da etapa (seguro para logs)
        """
        return {
            "session_id": self._session_id,
            "current_step": self._current_step.value,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
            "valid_targets": sorted(s.value for s in self.get_valid_targets()),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        """Retorna histórico em formato seguro para logs."""
        return [t.to_log_dict() for t in self._history]


def create_fsm(
    session_id: str,
    initial_step: CheckoutStep | None = None,
    guards: list[Guard] | None = None,
) -> CheckoutStateMachine:
    """
    Factory function para criar uma FSM de checkout.

    Args:
        session_id: Identificador da sessão
        initial_step: Etapa inicial (opcional)
        guards: Guards adicionais (opcional)

    Returns:
        CheckoutStateMachine configurada
    """
    return CheckoutStateMachine(
        initial_step=initial_step,
        session_id=session_id,
        guards=guards,
    )
