"""Agregador de settings de resiliência.

Re-exporta settings de rate limiting e retry.
"""

from __future__ import annotations

from config.settings.resilience.rate_limit import (
    RateLimitSettings,
    get_rate_limit_settings,
)
from config.settings.resilience.retry import (
    RetrySettings,
    get_retry_settings,
)

__all__ = [
    "RateLimitSettings",
    "RetrySettings",
    "get_rate_limit_settings",
    "get_retry_settings",
]
