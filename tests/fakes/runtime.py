"""Relógio e agendador falsos para testes determinísticos.

O FakeScheduler avança o FakeClock junto com os timers, então expiração
e backoff são exercitados sem esperar tempo real.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

DEFAULT_START = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class FakeClock:
    """ClockProtocol controlado pelo teste."""

    def __init__(self, start: datetime = DEFAULT_START) -> None:
        self._ts = start.timestamp()

    def now(self) -> datetime:
        return datetime.fromtimestamp(self._ts, UTC)

    def timestamp(self) -> float:
        return self._ts

    def advance(self, seconds: float = 0.0, *, minutes: float = 0.0, hours: float = 0.0) -> None:
        self._ts += seconds + minutes * 60 + hours * 3600

    def set_timestamp(self, value: float) -> None:
        self._ts = value


class FakeTimerHandle:
    def __init__(self, when: float, delay: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.delay = delay
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class FakeScheduler:
    """SchedulerProtocol que só dispara timers quando o teste avança o tempo."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self._clock = clock or FakeClock()
        self._timers: list[FakeTimerHandle] = []
        self.delays: list[float] = []

    @property
    def clock(self) -> FakeClock:
        return self._clock

    @property
    def pending(self) -> list[FakeTimerHandle]:
        return [t for t in self._timers if not t.cancelled()]

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> FakeTimerHandle:
        handle = FakeTimerHandle(self._clock.timestamp() + delay_seconds, delay_seconds, callback)
        self._timers.append(handle)
        self.delays.append(delay_seconds)
        return handle

    def advance(self, seconds: float) -> None:
        """Avança o tempo disparando, em ordem, os timers vencidos."""
        target = self._clock.timestamp() + seconds
        while True:
            due = [t for t in self.pending if t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self._timers.remove(timer)
            self._clock.set_timestamp(max(self._clock.timestamp(), timer.when))
            timer.callback()
        self._clock.set_timestamp(target)

    def run_next(self) -> bool:
        """Dispara o próximo timer pendente, avançando até ele."""
        pending = self.pending
        if not pending:
            return False
        timer = min(pending, key=lambda t: t.when)
        self._timers.remove(timer)
        self._clock.set_timestamp(max(self._clock.timestamp(), timer.when))
        timer.callback()
        return True
