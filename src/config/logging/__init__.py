"""Logging estruturado do digimenu-checkout.

Uso:
    from config.logging import configure_logging

    configure_logging(level="INFO", service_name="digimenu-checkout")
    logger = logging.getLogger(__name__)
    logger.info("checkout_session_created", extra={"store_id": "42"})

Todo record sai com correlation_id, tab_id e service.
"""

from config.logging.config import (
    DEFAULT_SERVICE_NAME,
    configure_logging,
    get_logger,
    log_fallback,
)
from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    TEXT_FORMAT,
    create_formatter,
    create_json_formatter,
    create_text_formatter,
)

__all__ = [
    "DEFAULT_SERVICE_NAME",
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "TEXT_FORMAT",
    "CorrelationIdFilter",
    "configure_logging",
    "create_formatter",
    "create_json_formatter",
    "create_text_formatter",
    "get_logger",
    "log_fallback",
]
