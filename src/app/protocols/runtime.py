"""Protocolos de tempo e agendamento.

Relógio e timers são injetados para que expiração e backoff sejam
testáveis sem esperar tempo real.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol


class ClockProtocol(Protocol):
    """Fonte de tempo."""

    def now(self) -> datetime:
        """Instante atual (UTC, timezone-aware)."""
        ...

    def timestamp(self) -> float:
        """Instante atual em segundos desde a epoch."""
        ...


class TimerHandleProtocol(Protocol):
    """Handle de um callback agendado."""

    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class SchedulerProtocol(Protocol):
    """Agendador de callbacks (equivalente a setTimeout)."""

    def call_later(
        self,
        delay_seconds: float,
        callback: Callable[[], None],
    ) -> TimerHandleProtocol: ...
