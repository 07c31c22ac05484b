"""Agregador de settings do digimenu-checkout.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# API client settings
from config.settings.api import (
    LOCAL_API_BASE_URL,
    ApiSettings,
    get_api_settings,
    resolve_api_base_url,
)

# Base settings
from config.settings.base import (
    BaseSettings,
    CheckoutSessionSettings,
    Environment,
    StorageBackend,
    StorageSettings,
    get_base_settings,
    get_checkout_session_settings,
    get_storage_settings,
)

# Cart settings
from config.settings.cart import (
    CartSettings,
    get_cart_settings,
)

# Resilience settings
from config.settings.resilience import (
    RateLimitSettings,
    RetrySettings,
    get_rate_limit_settings,
    get_retry_settings,
)

__all__ = [
    # Constants
    "LOCAL_API_BASE_URL",
    # API
    "ApiSettings",
    # Base
    "BaseSettings",
    # Cart
    "CartSettings",
    "CheckoutSessionSettings",
    "Environment",
    # Resilience
    "RateLimitSettings",
    "RetrySettings",
    "StorageBackend",
    "StorageSettings",
    "get_api_settings",
    "get_base_settings",
    "get_cart_settings",
    "get_checkout_session_settings",
    "get_rate_limit_settings",
    "get_retry_settings",
    "get_storage_settings",
    "resolve_api_base_url",
    "validate_all_settings",
]


def validate_all_settings() -> list[str]:
    """Valida todas as settings carregadas do ambiente.

    Returns:
        Lista agregada de erros (vazia = OK).
    """
    base = get_base_settings()
    errors: list[str] = []
    errors.extend(base.validate())
    errors.extend(get_storage_settings().validate(base))
    errors.extend(get_checkout_session_settings().validate())
    errors.extend(get_cart_settings().validate())
    errors.extend(get_rate_limit_settings().validate())
    errors.extend(get_retry_settings().validate())
    errors.extend(get_api_settings().validate())
    return errors
