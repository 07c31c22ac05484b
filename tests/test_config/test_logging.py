"""Testes abrangentes para config.logging.

Cobre: configure_logging, get_logger, log_fallback,
CorrelationIdFilter, create_json_formatter.
"""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    CorrelationIdFilter,
    configure_logging,
    create_formatter,
    create_json_formatter,
    get_logger,
    log_fallback,
)
from config.logging.config import DEFAULT_SERVICE_NAME, VALID_LOG_LEVELS


def _record(msg: str = "msg", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestConfigureLogging:
    """Testes para configure_logging."""

    @pytest.mark.parametrize(
        "level, expected",
        [
            ("INFO", logging.INFO),
            ("DEBUG", logging.DEBUG),
            ("warning", logging.WARNING),  # case insensitive
            ("ERROR", logging.ERROR),
            ("CRITICAL", logging.CRITICAL),
        ],
    )
    def test_configure_logging_levels(self, level: str, expected: int) -> None:
        """Configura o nível do root logger."""
        configure_logging(level=level)
        assert logging.getLogger().level == expected

    def test_configure_logging_invalid_level_raises(self) -> None:
        """Nível inválido levanta ValueError."""
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="INVALID")

    def test_configure_logging_replaces_handlers(self) -> None:
        """Configure_logging substitui handlers existentes."""
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]
        configure_logging()
        assert len(root.handlers) == 1

    def test_configure_logging_installs_context_filter(self) -> None:
        """Handler recebe o CorrelationIdFilter."""
        configure_logging(correlation_id_getter=lambda: "c", tab_id_getter=lambda: "t")
        handler = logging.getLogger().handlers[0]
        assert any(isinstance(f, CorrelationIdFilter) for f in handler.filters)

    def test_constants(self) -> None:
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS
        assert DEFAULT_SERVICE_NAME == "digimenu_checkout"


class TestGetLogger:
    """Testes para get_logger."""

    def test_get_logger_same_name_returns_same_instance(self) -> None:
        """Mesmo nome retorna mesma instância."""
        logger = get_logger("same.module")
        assert isinstance(logger, logging.Logger)
        assert logger is get_logger("same.module")


class TestLogFallback:
    """Testes para log_fallback."""

    def test_log_fallback_basic(self) -> None:
        """Fallback vira warning com evento fixo."""
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "cart_store")
        logger.warning.assert_called_once()
        call_args = logger.warning.call_args
        assert call_args[0][0] == "fallback_applied"
        extra = call_args[1]["extra"]
        assert extra == {"fallback_used": True, "component": "cart_store"}

    def test_log_fallback_with_reason_and_key(self) -> None:
        """Reason e chave de storage entram no extra."""
        logger = MagicMock(spec=logging.Logger)
        log_fallback(
            logger, "checkout_session", reason="StorageUnavailableError", key="checkout_session"
        )
        extra = logger.warning.call_args[1]["extra"]
        assert extra["reason"] == "StorageUnavailableError"
        assert extra["storage_key"] == "checkout_session"


class TestCorrelationIdFilter:
    """Testes para CorrelationIdFilter."""

    def test_filter_adds_context_from_getters(self) -> None:
        """Filter adiciona correlation_id e tab_id dos getters."""
        filter_ = CorrelationIdFilter("my_service", lambda: "corr-123", lambda: "tab-1")
        record = _record()
        assert filter_.filter(record) is True
        assert record.correlation_id == "corr-123"
        assert record.tab_id == "tab-1"
        assert record.service == "my_service"

    def test_filter_preserves_explicit_values(self) -> None:
        """Filter preserva valores passados via extra."""
        filter_ = CorrelationIdFilter("svc", lambda: "from-getter", lambda: "tab-getter")
        record = _record()
        record.correlation_id = "explicit-id"
        record.tab_id = "tab-explicit"
        filter_.filter(record)
        assert record.correlation_id == "explicit-id"
        assert record.tab_id == "tab-explicit"

    def test_filter_uses_empty_string_when_no_getter(self) -> None:
        """Filter usa string vazia quando não há getter."""
        filter_ = CorrelationIdFilter("service_name")
        record = _record()
        filter_.filter(record)
        assert record.correlation_id == ""
        assert record.tab_id == ""


class TestCreateJsonFormatter:
    """Testes para create_json_formatter e constantes."""

    def test_required_log_fields_content(self) -> None:
        """REQUIRED_LOG_FIELDS contém campos obrigatórios."""
        expected = {
            "asctime",
            "levelname",
            "name",
            "message",
            "correlation_id",
            "service",
            "tab_id",
        }
        assert expected == REQUIRED_LOG_FIELDS
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}

    def test_json_formatter_formats_record(self) -> None:
        """Saída é JSON com campos renomeados."""
        formatter = create_json_formatter()
        record = _record("cart_synced")
        record.correlation_id = "abc-123"
        record.service = "test_service"
        record.tab_id = "tab-1"
        record.items_count = 3

        output = json.loads(formatter.format(record))

        assert output["message"] == "cart_synced"
        assert output["level"] == "INFO"
        assert output["logger"] == "test"
        assert output["tab_id"] == "tab-1"
        assert output["items_count"] == 3


class TestLoggingIntegration:
    """Testes de integração do sistema de logging."""

    def test_full_logging_flow(self) -> None:
        """Fluxo completo: configure, get_logger, log."""
        configure_logging(
            level="DEBUG",
            service_name="integration_test",
            correlation_id_getter=lambda: "int-test-001",
        )
        logger = get_logger("integration.test")
        logger.debug("cart_synced", extra={"items_count": 2})
        logger.info("checkout_session_created")
        logger.warning("rate_limit_exceeded", extra={"endpoint": "GET /products"})
        logger.error("error_boundary_caught")


class TestTextFormat:
    """LOG_FORMAT=text para leitura local."""

    def test_text_formatter_includes_context(self) -> None:
        formatter = create_formatter("text")
        record = _record("cart_synced")
        record.correlation_id = "abc-123"
        record.service = "svc"
        record.tab_id = "tab-1"

        line = formatter.format(record)

        assert "cart_synced" in line
        assert "tab=tab-1" in line
        assert "cid=abc-123" in line

    def test_unknown_format_raises(self) -> None:
        with pytest.raises(ValueError, match="Formato de log inválido"):
            create_formatter("xml")

    def test_configure_logging_text_format(self) -> None:
        configure_logging(log_format="text")
        handler = logging.getLogger().handlers[0]
        assert not isinstance(handler.formatter, type(create_json_formatter()))
