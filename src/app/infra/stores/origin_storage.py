"""Storage de origem compartilhado entre abas.

OriginStorage embrulha um backend chave-valor e distribui eventos
`storage` para as abas que NÃO fizeram a escrita, como o navegador faz
com o localStorage. Cada aba enxerga o storage via TabStorage.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.protocols.key_value_store import KeyValueStoreProtocol
from app.protocols.storage_events import (
    StorageEvent,
    StorageEventChannelProtocol,
    StorageListener,
    Unsubscribe,
)

if TYPE_CHECKING:
    from app.protocols.runtime import SchedulerProtocol

logger = logging.getLogger(__name__)


class OriginStorage:
    """Substrato compartilhado por todas as abas de uma origem.

    Args:
        backend: Onde os valores realmente ficam (memória ou Redis)
        scheduler: Se informado, eventos são entregues de forma assíncrona
            (call_later com atraso zero); sem ele, entrega imediata
    """

    def __init__(
        self,
        backend: KeyValueStoreProtocol,
        scheduler: SchedulerProtocol | None = None,
    ) -> None:
        self._backend = backend
        self._scheduler = scheduler
        self._tabs: dict[str, TabStorage] = {}

    @property
    def backend(self) -> KeyValueStoreProtocol:
        return self._backend

    def open_tab(self, tab_id: str) -> TabStorage:
        """Abre (ou reabre) a visão de uma aba."""
        tab = self._tabs.get(tab_id)
        if tab is None:
            tab = TabStorage(self, tab_id)
            self._tabs[tab_id] = tab
        return tab

    def close_tab(self, tab_id: str) -> None:
        """Fecha a aba; ela deixa de receber eventos."""
        tab = self._tabs.pop(tab_id, None)
        if tab is not None:
            tab.clear_listeners()

    def write(self, writer: str, key: str, value: str | None) -> None:
        """Grava (ou remove, com value=None) e notifica as outras abas."""
        old_value = self._backend.get_item(key)
        if value is None:
            self._backend.remove_item(key)
        else:
            self._backend.set_item(key, value)
        if old_value == value:
            return
        event = StorageEvent(
            key=key,
            old_value=old_value,
            new_value=value,
            source_tab_id=writer,
        )
        for tab_id, tab in list(self._tabs.items()):
            if tab_id == writer:
                continue
            self._deliver(tab, event)

    def _deliver(self, tab: TabStorage, event: StorageEvent) -> None:
        if self._scheduler is None:
            tab.dispatch(event)
            return
        self._scheduler.call_later(0, lambda: tab.dispatch(event))


class TabStorage(KeyValueStoreProtocol, StorageEventChannelProtocol):
    """Visão de uma aba sobre o storage da origem."""

    def __init__(self, origin: OriginStorage, tab_id: str) -> None:
        self._origin = origin
        self._tab_id = tab_id
        self._listeners: list[StorageListener] = []

    @property
    def tab_id(self) -> str:
        return self._tab_id

    def get_item(self, key: str) -> str | None:
        return self._origin.backend.get_item(key)

    def set_item(self, key: str, value: str) -> None:
        self._origin.write(self._tab_id, key, value)

    def remove_item(self, key: str) -> None:
        self._origin.write(self._tab_id, key, None)

    def keys(self) -> list[str]:
        return self._origin.backend.keys()

    def subscribe(self, listener: StorageListener) -> Unsubscribe:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def dispatch(self, event: StorageEvent) -> None:
        """Entrega evento aos listeners da aba.

        Falha de um listener não impede os demais.
        """
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "storage_listener_failed",
                    extra={"tab_id": self._tab_id, "key": event.key},
                )
