"""Formatters de logging estruturado.

Produção usa JSON (python-json-logger); desenvolvimento local pode usar
texto em linha única. Os dois formatos carregam os mesmos campos de
contexto injetados pelo CorrelationIdFilter.
"""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

# Campos presentes em todo record depois do CorrelationIdFilter
REQUIRED_LOG_FIELDS = frozenset(
    {
        "asctime",
        "levelname",
        "name",
        "message",
        "correlation_id",
        "service",
        "tab_id",
    }
)

# levelname/name saem como level/logger no JSON
FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}

TEXT_FORMAT = (
    "%(asctime)s %(levelname)-8s [%(service)s tab=%(tab_id)s "
    "cid=%(correlation_id)s] %(name)s: %(message)s"
)


def create_json_formatter() -> JsonFormatter:
    """Formatter JSON; campos passados via `extra` entram no objeto.

    Exemplo:
        {"asctime": "...", "level": "WARNING",
         "logger": "app.resilience.rate_limiter",
         "message": "rate_limit_blocked", "correlation_id": "abc-123",
         "service": "digimenu-checkout", "tab_id": "tab-1",
         "endpoint": "GET /products"}
    """
    fields = " ".join(f"%({name})s" for name in sorted(REQUIRED_LOG_FIELDS))
    return JsonFormatter(fields, rename_fields=FIELD_RENAME_MAP)


def create_text_formatter() -> logging.Formatter:
    """Formatter de texto para leitura no terminal (LOG_FORMAT=text)."""
    return logging.Formatter(TEXT_FORMAT)


def create_formatter(log_format: str = "json") -> logging.Formatter:
    """Escolhe o formatter pelo nome.

    Raises:
        ValueError: Formato desconhecido
    """
    if log_format == "json":
        return create_json_formatter()
    if log_format == "text":
        return create_text_formatter()
    raise ValueError(f"Formato de log inválido: {log_format}")
