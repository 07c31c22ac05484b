"""
Guards e invariantes para transições de etapa do checkout.

Guards são regras adicionais ao mapa de transições que podem bloquear
uma mudança de etapa. A máquina aceita guards extras por instância.
"""

from collections.abc import Callable

from fsm.states.checkout import TERMINAL_STEPS, CheckoutStep


class GuardResult:
    """
    Resultado da avaliação de um guard.

    Attributes:
        allowed: Se a transição é permitida
        reason: Motivo do bloqueio (se allowed=False)
    """

    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str | None = None) -> None:
        self.allowed = allowed
        self.reason = reason

    @classmethod
    def allow(cls) -> "GuardResult":
        """Cria resultado permitindo a transição."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardResult":
        """Cria resultado negando a transição."""
        return cls(allowed=False, reason=reason)


Guard = Callable[[CheckoutStep, CheckoutStep], GuardResult]


def guard_terminal_step(
    from_step: CheckoutStep,
    to_step: CheckoutStep,
) -> GuardResult:
    """Guard: tracking não permite saída."""
    if from_step in TERMINAL_STEPS:
        return GuardResult.deny(
            f"Etapa {from_step.name} é terminal, não permite transição"
        )
    return GuardResult.allow()


def guard_same_step(
    from_step: CheckoutStep,
    to_step: CheckoutStep,
) -> GuardResult:
    """
    Guard: transição reflexiva não é uma transição.

    O serviço de sessão trata "mesma etapa" como no-op antes de chegar
    aqui; a FSM nunca registra histórico para ela.
    """
    if from_step == to_step:
        return GuardResult.deny(
            f"Transição reflexiva não permitida: {from_step.name} → {to_step.name}"
        )
    return GuardResult.allow()


def guard_valid_step(
    from_step: CheckoutStep,
    to_step: CheckoutStep,
) -> GuardResult:
    """
    Guard: Verifica se ambas as etapas são válidas.

    Args:
        from_step: Etapa de origem
        to_step: Etapa de destino

    Returns:
        GuardResult indicando se transição é permitida
    """
    if not isinstance(from_step, CheckoutStep):
        return GuardResult.deny(f"Etapa de origem inválida: {from_step}")

    if not isinstance(to_step, CheckoutStep):
        return GuardResult.deny(f"Etapa de destino inválida: {to_step}")

    return GuardResult.allow()


# Lista de guards a serem aplicados em ordem
# Todos devem retornar allow() para a transição prosseguir
DEFAULT_GUARDS: list[Guard] = [
    guard_valid_step,
    guard_terminal_step,
    guard_same_step,
]


def evaluate_guards(
    from_step: CheckoutStep,
    to_step: CheckoutStep,
    guards: list[Guard] | None = None,
) -> GuardResult:
    """
    Avalia todos os guards para uma transição.

    Args:
        from_step: Etapa de origem
        to_step: Etapa de destino
        guards: Lista de guards a aplicar (usa DEFAULT_GUARDS se None)

    Returns:
        GuardResult do primeiro guard que negar, ou allow() se todos passarem
    """
    guards_to_apply = guards if guards is not None else DEFAULT_GUARDS

    for guard in guards_to_apply:
        result = guard(from_step, to_step)
        if not result.allowed:
            return result

    return GuardResult.allow()
