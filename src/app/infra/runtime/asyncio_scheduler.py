"""Agendador sobre o event loop do asyncio.

Equivalente a setTimeout: o callback roda no loop da aba, depois do
atraso, a menos que o handle seja cancelado antes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class AsyncioScheduler:
    """Implementação de SchedulerProtocol usando loop.call_later.

    Args:
        loop: Event loop alvo (usa o loop em execução se None)
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(
        self,
        delay_seconds: float,
        callback: Callable[[], None],
    ) -> asyncio.TimerHandle:
        return self._get_loop().call_later(max(0.0, delay_seconds), self._run, callback)

    @staticmethod
    def _run(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            logger.exception("scheduled_callback_failed")
