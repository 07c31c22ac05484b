"""
Etapas canônicas do fluxo de checkout.

Este módulo define as etapas que uma sessão de checkout pode assumir.
A ordem é fixa e determina o progresso exibido ao cliente.
"""

from enum import StrEnum


class CheckoutStep(StrEnum):
    """
    Etapas de uma sessão de checkout.

    Etapas do fluxo (ordem canônica):
        - AUTHENTICATION: Identificação do cliente (telefone, conta ou convidado)
        - CUSTOMER_DATA: Coleta de nome/telefone para convidados
        - ADDRESS: Endereço de entrega ou mesa
        - PAYMENT: Escolha da forma de pagamento
        - CONFIRMATION: Revisão final do pedido

    Etapa terminal:
        - TRACKING: Acompanhamento do pedido já enviado (apenas observação)
    """

    AUTHENTICATION = "authentication"
    CUSTOMER_DATA = "customer_data"
    ADDRESS = "address"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"

    TRACKING = "tracking"

    def __str__(self) -> str:
        return self.value


# Ordem usada para cálculo de progresso (tracking fica fora do denominador)
CHECKOUT_STEP_ORDER: tuple[CheckoutStep, ...] = (
    CheckoutStep.AUTHENTICATION,
    CheckoutStep.CUSTOMER_DATA,
    CheckoutStep.ADDRESS,
    CheckoutStep.PAYMENT,
    CheckoutStep.CONFIRMATION,
)

TERMINAL_STEPS: frozenset[CheckoutStep] = frozenset({CheckoutStep.TRACKING})

DEFAULT_INITIAL_STEP: CheckoutStep = CheckoutStep.AUTHENTICATION


def is_terminal(step: CheckoutStep) -> bool:
    """Verifica se a etapa é terminal."""
    return step in TERMINAL_STEPS


def is_valid_step(step: object) -> bool:
    """
    Verifica se o valor é uma etapa válida do enum.

    Aceita também a string serializada (ex: "payment").
    """
    if isinstance(step, CheckoutStep):
        return True
    if isinstance(step, str):
        return step in CheckoutStep._value2member_map_
    return False


def step_index(step: CheckoutStep) -> int:
    """
    Posição da etapa na ordem canônica.

    Returns:
        Índice 0-based; tracking retorna len(CHECKOUT_STEP_ORDER)
    """
    if step in TERMINAL_STEPS:
        return len(CHECKOUT_STEP_ORDER)
    return CHECKOUT_STEP_ORDER.index(step)
