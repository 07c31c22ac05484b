"""Relógio de sistema (UTC)."""

from __future__ import annotations

import time
from datetime import UTC, datetime


class SystemClock:
    """Implementação de ClockProtocol sobre o relógio do sistema."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    def timestamp(self) -> float:
        return time.time()
