"""Protocolos e contratos do core da aplicação."""

from .broadcast import BroadcastChannelProtocol, BroadcastListener
from .key_value_store import KeyValueStoreProtocol
from .runtime import ClockProtocol, SchedulerProtocol, TimerHandleProtocol
from .storage_events import (
    StorageEvent,
    StorageEventChannelProtocol,
    StorageListener,
    Unsubscribe,
)

__all__ = [
    "BroadcastChannelProtocol",
    "BroadcastListener",
    "ClockProtocol",
    "KeyValueStoreProtocol",
    "SchedulerProtocol",
    "StorageEvent",
    "StorageEventChannelProtocol",
    "StorageListener",
    "TimerHandleProtocol",
    "Unsubscribe",
]
