"""Canais de mensagem entre abas."""

from app.infra.messaging.memory_broadcast import (
    MemoryBroadcastChannel,
    MemoryBroadcastHub,
)

__all__ = ["MemoryBroadcastChannel", "MemoryBroadcastHub"]
