"""Token de cancelamento ligado ao tempo de vida de um componente.

Quando o dono é descartado, requisições e esperas de backoff pendentes
terminam com RequestCancelledError e nenhum resultado tardio é aplicado.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from utils.errors import RequestCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Sinal de cancelamento cooperativo."""

    __slots__ = ("_callbacks", "_cancelled", "_event", "_reason")

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: str | None = None
        self._event: asyncio.Event | None = None
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def _get_event(self) -> asyncio.Event:
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        return self._event

    def cancel(self, reason: str = "disposed") -> None:
        """Cancela; chamadas repetidas são ignoradas."""
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        if self._event is not None:
            self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("cancellation_callback_failed")

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Registra callback; se já cancelado, executa na hora.

        Returns:
            Função que remove o callback
        """
        if self._cancelled:
            callback()
            return lambda: None
        self._callbacks.append(callback)

        def _remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _remove

    def raise_if_cancelled(self) -> None:
        """Raises: RequestCancelledError se cancelado."""
        if self._cancelled:
            raise RequestCancelledError(self._reason or "cancelled")

    async def sleep(self, delay_seconds: float) -> None:
        """Espera interrompível pelo cancelamento."""
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._get_event().wait(), timeout=delay_seconds)
        except TimeoutError:
            return
        self.raise_if_cancelled()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Aguarda `awaitable`, abandonando-o se o token for cancelado antes.

        Raises:
            RequestCancelledError: Cancelado antes ou durante a espera
        """
        if self._cancelled:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise RequestCancelledError(self._reason or "cancelled")
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._get_event().wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
        if self._cancelled:
            task.cancel()
            raise RequestCancelledError(self._reason or "cancelled")
        return task.result()
