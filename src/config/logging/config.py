"""Configuração centralizada de logging.

O composition root (app/bootstrap) chama configure_logging uma vez; os
módulos usam logging.getLogger(__name__) e eventos em snake_case.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import create_formatter
from config.settings.base.core import VALID_LOG_LEVELS

if TYPE_CHECKING:
    from collections.abc import Callable

DEFAULT_SERVICE_NAME = "digimenu_checkout"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    tab_id_getter: Callable[[], str] | None = None,
    log_format: str = "json",
) -> None:
    """Instala um único handler no root logger.

    Chamadas repetidas substituem o handler anterior.

    Args:
        level: DEBUG, INFO, WARNING, ERROR ou CRITICAL (case insensitive)
        service_name: Valor do campo `service`
        correlation_id_getter: Lê o correlation_id corrente (ContextVar)
        tab_id_getter: Lê o id da aba corrente
        log_format: json ou text

    Raises:
        ValueError: Nível ou formato inválido
    """
    level_name = level.upper()
    if level_name not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_name)
    handler.setFormatter(create_formatter(log_format))
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter, tab_id_getter))

    root = logging.getLogger()
    root.setLevel(level_name)
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    key: str | None = None,
) -> None:
    """Registra que um componente seguiu com o valor padrão.

    Usado quando leitura ou escrita de storage falha e o chamador recebe
    carrinho vazio ou "sem sessão" em vez de uma exceção.

    Args:
        logger: Logger do módulo chamador
        component: Ex: "cart_store", "checkout_session"
        reason: Ex: "StorageUnavailableError", "corrupt_record"
        key: Chave de storage envolvida
    """
    extra: dict[str, object] = {"fallback_used": True, "component": component}
    if reason:
        extra["reason"] = reason
    if key:
        extra["storage_key"] = key
    logger.warning("fallback_applied", extra=extra)
