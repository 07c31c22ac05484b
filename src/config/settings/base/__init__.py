"""Agregador de settings base.

Re-exporta todas as settings base para uso externo.
"""

from __future__ import annotations

from config.settings.base.core import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.base.session import (
    CheckoutSessionSettings,
    get_checkout_session_settings,
)
from config.settings.base.storage import (
    StorageBackend,
    StorageSettings,
    get_storage_settings,
)

__all__ = [
    # Core
    "BaseSettings",
    # Session
    "CheckoutSessionSettings",
    # Types
    "Environment",
    "StorageBackend",
    # Storage
    "StorageSettings",
    "get_base_settings",
    "get_checkout_session_settings",
    "get_storage_settings",
]
