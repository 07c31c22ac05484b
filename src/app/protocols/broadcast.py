"""Protocolo de canal de broadcast entre abas da mesma origem."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

BroadcastListener = Callable[[dict[str, Any]], None]


class BroadcastChannelProtocol(ABC):
    """Canal nomeado; mensagens chegam a todos os outros participantes."""

    @abstractmethod
    def post_message(self, message: dict[str, Any]) -> None: ...

    @abstractmethod
    def subscribe(self, listener: BroadcastListener) -> Callable[[], None]: ...

    @abstractmethod
    def close(self) -> None: ...
