"""Testes do ToastNotifier e do PageEventBus."""

from __future__ import annotations

from typing import Any

import pytest

from app.notifications import (
    TOAST_ADD,
    TOAST_CLEAR,
    TOAST_REMOVE,
    PageEventBus,
    ToastNotifier,
    ToastType,
)
from tests.fakes.runtime import FakeClock, FakeScheduler
from utils.errors import RateLimitExceededError


@pytest.fixture
def bus() -> PageEventBus:
    return PageEventBus()


@pytest.fixture
def events(bus: PageEventBus) -> list[tuple[str, dict[str, Any]]]:
    received: list[tuple[str, dict[str, Any]]] = []
    for name in (TOAST_ADD, TOAST_REMOVE, TOAST_CLEAR):
        bus.subscribe(name, lambda detail, name=name: received.append((name, detail)))
    return received


class TestPageEventBus:
    def test_unsubscribe_and_failing_listener(self, bus: PageEventBus) -> None:
        seen: list[dict[str, Any]] = []

        def broken(_detail: dict[str, Any]) -> None:
            raise RuntimeError("quebrado")

        bus.subscribe("x", broken)
        unsubscribe = bus.subscribe("x", seen.append)
        bus.emit("x", {"a": 1})
        unsubscribe()
        bus.emit("x", {"a": 2})

        assert seen == [{"a": 1}]


class TestToastNotifier:
    def test_show_emits_add_and_auto_removes(
        self, bus: PageEventBus, events, clock: FakeClock, scheduler: FakeScheduler
    ) -> None:
        notifier = ToastNotifier(bus, clock, scheduler)
        toast = notifier.success("Pedido enviado", "Acompanhe pelo app")

        assert events[0][0] == TOAST_ADD
        assert events[0][1]["type"] == "success"
        assert events[0][1]["timestamp"] == clock.timestamp()

        scheduler.advance(5)

        assert events[-1] == (TOAST_REMOVE, {"id": toast.id})
        assert notifier.active == []

    def test_persistent_toast_not_scheduled(
        self, bus: PageEventBus, clock: FakeClock, scheduler: FakeScheduler
    ) -> None:
        notifier = ToastNotifier(bus, clock, scheduler)
        toast = notifier.show(ToastType.INFO, "Fixo", "", persistent=True)

        assert toast.duration_seconds is None
        assert scheduler.pending == []

    def test_oldest_evicted_when_full(self, bus: PageEventBus, events, clock: FakeClock) -> None:
        notifier = ToastNotifier(bus, clock, max_toasts=2)
        first = notifier.info("1")
        notifier.info("2")
        notifier.info("3")

        assert [t.title for t in notifier.active] == ["2", "3"]
        assert (TOAST_REMOVE, {"id": first.id}) in events

    def test_clear(self, bus: PageEventBus, events, clock: FakeClock) -> None:
        notifier = ToastNotifier(bus, clock)
        notifier.error("Falhou")
        notifier.clear()
        assert events[-1] == (TOAST_CLEAR, {})
        assert notifier.active == []

    def test_rate_limited_toast(self, bus: PageEventBus, clock: FakeClock) -> None:
        notifier = ToastNotifier(bus, clock)
        toast = notifier.notify_rate_limited(RateLimitExceededError("GET /products", 290))

        assert toast.type == ToastType.WARNING
        assert toast.title == "Muitas requisições"
        assert toast.message == "Aguarde e tente novamente em 5 minuto(s)."
        assert toast.metadata == {"endpoint": "GET /products", "reset_minutes": 5}

    def test_session_expired_toast(self, bus: PageEventBus, clock: FakeClock) -> None:
        toast = ToastNotifier(bus, clock).notify_session_expired()
        assert toast.title == "Sessão expirada"
        assert toast.duration_seconds == 8.0
