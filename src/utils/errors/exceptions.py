"""Exceções da camada de resiliência do cliente.

Nenhuma exceção carrega PII; mensagens são seguras para log.
"""

from __future__ import annotations

import math


class ClientLayerError(Exception):
    """Base para erros expostos pela camada de resiliência."""


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class StorageError(InfrastructureError):
    """Falha ao ler ou gravar no storage chave-valor."""


class StorageUnavailableError(StorageError):
    """Storage desabilitado, sem conexão ou indisponível."""


class StorageQuotaExceededError(StorageError):
    """Escrita recusada por falta de espaço no storage."""


class RateLimitExceededError(ClientLayerError):
    """Admissão local negada para o endpoint.

    Não é repetida automaticamente; quem chama decide se espera.
    """

    def __init__(self, endpoint: str, reset_seconds: float) -> None:
        self.endpoint = endpoint
        self.reset_seconds = max(0.0, reset_seconds)
        super().__init__(
            f"Limite de requisições excedido para {endpoint}. "
            f"Tente novamente em {self.reset_minutes} minuto(s)."
        )

    @property
    def reset_minutes(self) -> int:
        """Minutos até liberar, arredondado para cima."""
        return math.ceil(self.reset_seconds / 60)


class HttpError(ClientLayerError):
    """Erro de requisição HTTP sem dados sensíveis."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable


class TransportError(HttpError):
    """Falha sem resposta do servidor (conexão caiu, DNS, timeout)."""

    def __init__(self, message: str = "http_transport_error") -> None:
        super().__init__(message, status_code=None, is_retryable=True)


class RequestTimeoutError(TransportError):
    """Requisição excedeu o timeout configurado."""

    def __init__(self, message: str = "http_timeout") -> None:
        super().__init__(message)


class ServerError(HttpError):
    """Resposta 4xx/5xx real do servidor; nunca repetida pelo transporte."""

    def __init__(
        self,
        status_code: int,
        message: str = "http_error_status",
        retry_after_seconds: float | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, is_retryable=False)
        self.retry_after_seconds = retry_after_seconds


class RequestCancelledError(ClientLayerError):
    """Requisição cancelada; resultado tardio descartado."""


class RenderError(ClientLayerError):
    """Falha capturada durante o render de um subtree."""
