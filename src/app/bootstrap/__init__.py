"""Bootstrap da aplicação: inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
monta o ResilienceContainer com implementações concretas.

Uso:
    from app.bootstrap import initialize_app, create_container

    initialize_app()
    container = create_container()
    tab = container.open_tab()
"""

from __future__ import annotations

import logging

from app.bootstrap.container import ContainerSettings, ResilienceContainer, TabContext
from app.bootstrap.dependencies import create_storage_backend
from app.infra.runtime import AsyncioScheduler, SystemClock
from app.observability import get_correlation_id, get_tab_id
from config.logging import configure_logging
from config.settings import (
    get_api_settings,
    get_base_settings,
    get_cart_settings,
    get_checkout_session_settings,
    get_rate_limit_settings,
    get_retry_settings,
    get_storage_settings,
    validate_all_settings,
)

STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)

__all__ = [
    "ContainerSettings",
    "ResilienceContainer",
    "TabContext",
    "create_container",
    "create_storage_backend",
    "initialize_app",
    "initialize_test_app",
    "validate_runtime_settings",
]


def initialize_app() -> None:
    """Configura logging JSON com correlation_id e tab_id.

    Deve ser chamada uma vez no início do processo.
    """
    base = get_base_settings()
    configure_logging(
        level=base.log_level,
        service_name=base.service_name,
        correlation_id_getter=get_correlation_id,
        tab_id_getter=get_tab_id,
        log_format=base.log_format,
    )


def initialize_test_app() -> None:
    """Logging em DEBUG para testes."""
    configure_logging(
        level="DEBUG",
        service_name="digimenu_checkout_test",
        correlation_id_getter=get_correlation_id,
        tab_id_getter=get_tab_id,
    )


def validate_runtime_settings() -> None:
    """Valida settings no startup.

    Em `staging`/`production` falha rápido; em `development` só alerta.

    Raises:
        RuntimeError: Settings inválidas em ambiente estrito
    """
    environment = get_base_settings().environment
    errors = validate_all_settings()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if environment in STRICT_VALIDATION_ENVS:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


def create_container() -> ResilienceContainer:
    """Monta o container a partir das variáveis de ambiente.

    Precisa de um event loop em execução quando timers forem agendados.
    """
    validate_runtime_settings()
    settings = ContainerSettings(
        session=get_checkout_session_settings(),
        cart=get_cart_settings(),
        rate_limit=get_rate_limit_settings(),
        retry=get_retry_settings(),
        api=get_api_settings(),
    )
    backend = create_storage_backend(get_storage_settings(), get_base_settings())
    return ResilienceContainer(
        backend,
        SystemClock(),
        AsyncioScheduler(),
        settings,
        deliver_events_async=True,
    )
