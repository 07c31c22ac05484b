"""Observabilidade: contexto de rastreamento e métricas via logs.

Uso:
    from app.observability import get_correlation_id, set_correlation_id
    from app.observability import record_latency, record_retry
"""

from app.observability.correlation import (
    generate_correlation_id,
    get_correlation_id,
    get_tab_id,
    reset_correlation_id,
    reset_tab_id,
    set_correlation_id,
    set_tab_id,
)
from app.observability.metrics import (
    record_latency,
    record_rate_limited,
    record_retry,
)

__all__ = [
    "generate_correlation_id",
    "get_correlation_id",
    "get_tab_id",
    "record_latency",
    "record_rate_limited",
    "record_retry",
    "reset_correlation_id",
    "reset_tab_id",
    "set_correlation_id",
    "set_tab_id",
]
