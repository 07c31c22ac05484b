"""Reconciliação oportunista do carrinho entre abas.

Gatilhos de `sync_cart()`: início, aba voltando a ficar visível,
intervalo periódico enquanto houver itens, evento `storage` de outra aba
para a chave do carrinho e retorno da conexão. Convergência eventual,
sem transação.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.protocols.storage_events import StorageEvent
from config.settings.cart import CartSettings

if TYPE_CHECKING:
    from app.cart.store import CartStore
    from app.protocols.runtime import SchedulerProtocol, TimerHandleProtocol
    from app.protocols.storage_events import StorageEventChannelProtocol, Unsubscribe

logger = logging.getLogger(__name__)


class CartSyncCoordinator:
    """Mantém o cache do CartStore próximo do registro persistido."""

    def __init__(
        self,
        store: CartStore,
        events: StorageEventChannelProtocol,
        scheduler: SchedulerProtocol,
        settings: CartSettings | None = None,
    ) -> None:
        self._store = store
        self._events = events
        self._scheduler = scheduler
        self._settings = settings or store.settings
        self._timer: TimerHandleProtocol | None = None
        self._unsubscribe: Unsubscribe | None = None
        self._online = True
        self._visible = True
        self._started = False
        self.sync_count = 0

    @property
    def is_running(self) -> bool:
        return self._started

    @property
    def is_online(self) -> bool:
        return self._online

    def start(self) -> None:
        """Monta: sincroniza, assina eventos e agenda o intervalo."""
        if self._started:
            return
        self._started = True
        self._unsubscribe = self._events.subscribe(self._on_storage_event)
        self._sync("mount")
        self._schedule_tick()

    def dispose(self) -> None:
        """Desmonta: cancela timer e assinatura."""
        self._started = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # ──────────────────────────────────────────────────────────────
    # Gatilhos
    # ──────────────────────────────────────────────────────────────

    def on_visibility_change(self, visible: bool) -> None:
        was_visible = self._visible
        self._visible = visible
        if visible and not was_visible and self._started:
            self._sync("visibility")

    def set_online(self, online: bool) -> None:
        was_online = self._online
        self._online = online
        if online and not was_online and self._started:
            self._sync("online")
        elif not online and was_online:
            logger.info("cart_sync_offline")

    def _on_storage_event(self, event: StorageEvent) -> None:
        if event.key is not None and event.key != self._settings.storage_key:
            return
        self._sync("storage_event")

    def _schedule_tick(self) -> None:
        self._timer = self._scheduler.call_later(
            self._settings.sync_interval_seconds, self._tick
        )

    def _tick(self) -> None:
        self._timer = None
        if not self._started:
            return
        if self._online and self._store.items_count() > 0:
            self._sync("interval")
        self._schedule_tick()

    def _sync(self, trigger: str) -> None:
        # Só o evento `storage` garante que a ausência do registro foi uma remoção
        self._store.sync_cart(missing_is_empty=trigger == "storage_event")
        self.sync_count += 1
        logger.debug(
            "cart_synced",
            extra={"trigger": trigger, "items_count": self._store.items_count()},
        )
