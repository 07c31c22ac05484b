"""Relógio e agendador concretos."""

from app.infra.runtime.asyncio_scheduler import AsyncioScheduler
from app.infra.runtime.clock import SystemClock

__all__ = ["AsyncioScheduler", "SystemClock"]
