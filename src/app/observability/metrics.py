"""Registro de métricas via structured logging.

As métricas são logs estruturados agregados fora do cliente; não há
coletor nem dashboard aqui.

Métricas suportadas:
- Latência: tempo de requisição por endpoint
- Retry: cada retry agendado (transporte ou render)
- Rate limit: negações do gate de admissão
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "api_client")
        operation: Nome da operação (ex: "GET /products")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id,
        },
    )


def record_retry(
    component: str,
    attempt: int,
    delay_seconds: float,
    reason: str,
) -> None:
    """Registra um retry agendado.

    Args:
        component: "api_client" ou "error_boundary"
        attempt: Tentativa que falhou (0-based)
        delay_seconds: Espera até a próxima tentativa
        reason: Tipo do erro (nome da classe, sem mensagem)
    """
    logger.info(
        "metric_retry",
        extra={
            "metric_type": "retry",
            "component": component,
            "attempt": attempt,
            "delay_seconds": round(delay_seconds, 3),
            "reason": reason,
        },
    )


def record_rate_limited(endpoint: str, reset_seconds: float) -> None:
    """Registra negação do gate de admissão."""
    logger.info(
        "metric_rate_limited",
        extra={
            "metric_type": "rate_limited",
            "component": "rate_limiter",
            "endpoint": endpoint,
            "reset_seconds": round(reset_seconds, 1),
        },
    )
