"""
Regras de transição válidas entre etapas do checkout.

A navegação entre as cinco etapas do checkout é livre, em qualquer
direção: pedidos de mesa pulam address (customer_data → payment) e o
cliente pode voltar para corrigir dados. Só tracking é restrito:
alcançado apenas a partir de confirmation (pedido enviado) e sem saída.
"""

from fsm.states.checkout import (
    CHECKOUT_STEP_ORDER,
    TERMINAL_STEPS,
    CheckoutStep,
    step_index,
)

# Tipagem explícita do mapa de transições
TransitionMap = dict[CheckoutStep, frozenset[CheckoutStep]]

# Única etapa a partir da qual o pedido é enviado
ORDER_PLACEMENT_STEP: CheckoutStep = CheckoutStep.CONFIRMATION


def _build_transition_map() -> TransitionMap:
    transitions: TransitionMap = {
        step: frozenset(s for s in CHECKOUT_STEP_ORDER if s != step)
        for step in CHECKOUT_STEP_ORDER
    }
    transitions[ORDER_PLACEMENT_STEP] |= TERMINAL_STEPS

    # Estados terminais: não permitem transição para outras etapas
    for step in TERMINAL_STEPS:
        transitions[step] = frozenset()
    return transitions


VALID_TRANSITIONS: TransitionMap = _build_transition_map()

# Etapa seguinte após autenticação, indexada por (autenticado, convidado)
NEXT_STEP_AFTER_AUTHENTICATION: dict[tuple[bool, bool], CheckoutStep] = {
    (True, False): CheckoutStep.ADDRESS,
    (True, True): CheckoutStep.CUSTOMER_DATA,
    (False, True): CheckoutStep.CUSTOMER_DATA,
    (False, False): CheckoutStep.AUTHENTICATION,
}


def get_valid_targets(step: CheckoutStep) -> frozenset[CheckoutStep]:
    """
    Retorna as etapas de destino válidas para uma etapa de origem.

    Args:
        step: Etapa de origem

    Returns:
        Conjunto de etapas de destino permitidas (vazio se terminal)
    """
    return VALID_TRANSITIONS.get(step, frozenset())


def is_transition_valid(from_step: CheckoutStep, to_step: CheckoutStep) -> bool:
    """
    Verifica se uma transição é válida segundo as regras definidas.

    Args:
        from_step: Etapa de origem
        to_step: Etapa de destino

    Returns:
        True se a transição é permitida, False caso contrário
    """
    if from_step in TERMINAL_STEPS:
        return False
    return to_step in get_valid_targets(from_step)


def get_next_step_after_authentication(
    is_authenticated: bool,
    is_guest: bool,
) -> CheckoutStep:
    """
    Decide a etapa seguinte à autenticação.

    Convidado vai para customer_data (precisa informar nome/telefone),
    mesmo que marcado como autenticado;
    cliente autenticado vai direto para address; sem nenhum dos dois
    permanece em authentication.
    """
    return NEXT_STEP_AFTER_AUTHENTICATION[(is_authenticated, is_guest)]


def progress_percentage(step: CheckoutStep) -> float:
    """
    Percentual de progresso da etapa: (índice + 1) / 5 * 100.

    Tracking fica fora do denominador e retorna 100.
    """
    if step in TERMINAL_STEPS:
        return 100.0
    return (step_index(step) + 1) * 100 / len(CHECKOUT_STEP_ORDER)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade do mapa de transições.

    Verifica:
    - Todas as etapas do enum estão no mapa
    - Etapas terminais têm conjunto vazio
    - Nenhuma etapa aponta para si mesma
    - Tracking só é alcançável a partir de confirmation

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for step in CheckoutStep:
        if step not in VALID_TRANSITIONS:
            errors.append(f"Etapa {step.name} ausente em VALID_TRANSITIONS")

    for step in TERMINAL_STEPS:
        targets = VALID_TRANSITIONS.get(step, frozenset())
        if targets:
            errors.append(
                f"Etapa terminal {step.name} não deveria ter transições: {targets}"
            )

    for from_step, targets in VALID_TRANSITIONS.items():
        for target in targets:
            if not isinstance(target, CheckoutStep):
                errors.append(
                    f"Transição {from_step.name} → {target}: destino inválido"
                )
                continue
            if target == from_step:
                errors.append(f"Transição reflexiva em {from_step.name}")
            if target in TERMINAL_STEPS and from_step != ORDER_PLACEMENT_STEP:
                errors.append(
                    f"Transição {from_step.name} → {target.name} antes do pedido"
                )

    return errors
