"""Pub/sub in-page (equivalente a window.dispatchEvent/addEventListener)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

PageEventListener = Callable[[dict[str, Any]], None]


class PageEventBus:
    """Barramento de eventos de uma aba. Entrega síncrona, na ordem de inscrição."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[PageEventListener]] = {}

    def subscribe(self, event_name: str, listener: PageEventListener) -> Callable[[], None]:
        self._listeners.setdefault(event_name, []).append(listener)

        def _unsubscribe() -> None:
            listeners = self._listeners.get(event_name, [])
            if listener in listeners:
                listeners.remove(listener)

        return _unsubscribe

    def emit(self, event_name: str, detail: dict[str, Any] | None = None) -> None:
        for listener in list(self._listeners.get(event_name, [])):
            try:
                listener(dict(detail or {}))
            except Exception:
                logger.exception("page_event_listener_failed", extra={"event": event_name})

    def clear(self) -> None:
        self._listeners.clear()
