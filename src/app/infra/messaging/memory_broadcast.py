"""BroadcastChannel em memória.

Um hub por origem; cada aba abre um canal nomeado. Mensagens postadas
chegam a todos os outros participantes do mesmo nome, nunca ao emissor.
Mensagens são copiadas (dicts rasos) para que o receptor não compartilhe
estado mutável com o emissor.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any

from app.protocols.broadcast import BroadcastChannelProtocol, BroadcastListener

logger = logging.getLogger(__name__)


class MemoryBroadcastHub:
    """Registro dos canais abertos na origem."""

    def __init__(self) -> None:
        self._channels: dict[str, list[MemoryBroadcastChannel]] = {}

    def open(self, name: str, tab_id: str) -> MemoryBroadcastChannel:
        channel = MemoryBroadcastChannel(self, name, tab_id)
        self._channels.setdefault(name, []).append(channel)
        return channel

    def publish(self, sender: MemoryBroadcastChannel, message: dict[str, Any]) -> None:
        """Entrega a mensagem aos outros canais do mesmo nome."""
        for channel in list(self._channels.get(sender.name, [])):
            if channel is sender:
                continue
            channel.deliver(copy.deepcopy(message))

    def detach(self, channel: MemoryBroadcastChannel) -> None:
        peers = self._channels.get(channel.name, [])
        if channel in peers:
            peers.remove(channel)


class MemoryBroadcastChannel(BroadcastChannelProtocol):
    """Canal de uma aba."""

    def __init__(self, hub: MemoryBroadcastHub, name: str, tab_id: str) -> None:
        self._hub = hub
        self.name = name
        self.tab_id = tab_id
        self._listeners: list[BroadcastListener] = []
        self._closed = False

    def post_message(self, message: dict[str, Any]) -> None:
        if self._closed:
            return
        self._hub.publish(self, message)

    def subscribe(self, listener: BroadcastListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def deliver(self, message: dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                logger.exception(
                    "broadcast_listener_failed",
                    extra={"channel": self.name, "tab_id": self.tab_id},
                )

    def close(self) -> None:
        self._closed = True
        self._listeners.clear()
        self._hub.detach(self)
