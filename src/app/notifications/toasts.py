"""Notificações toast para o usuário.

Publica `toast-add`, `toast-remove` e `toast-clear` no PageEventBus; a
camada de UI apenas escuta. Mensagens de erro nunca carregam PII.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.notifications.events import PageEventBus
    from app.protocols.runtime import ClockProtocol, SchedulerProtocol, TimerHandleProtocol
    from utils.errors import RateLimitExceededError

logger = logging.getLogger(__name__)

TOAST_ADD = "toast-add"
TOAST_REMOVE = "toast-remove"
TOAST_CLEAR = "toast-clear"

DEFAULT_DURATION_SECONDS = 5.0


class ToastType(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class Toast:
    """Notificação exibida."""

    id: str
    type: ToastType
    title: str
    message: str
    duration_seconds: float | None = DEFAULT_DURATION_SECONDS
    persistent: bool = False
    timestamp: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "duration_seconds": self.duration_seconds,
            "persistent": self.persistent,
            "timestamp": self.timestamp,
            "metadata": dict(self.metadata),
        }


class ToastNotifier:
    """Cria e remove toasts; agenda remoção automática quando há scheduler."""

    def __init__(
        self,
        bus: PageEventBus,
        clock: ClockProtocol,
        scheduler: SchedulerProtocol | None = None,
        max_toasts: int = 5,
    ) -> None:
        self._bus = bus
        self._clock = clock
        self._scheduler = scheduler
        self._max_toasts = max_toasts
        self._active: dict[str, Toast] = {}
        self._timers: dict[str, TimerHandleProtocol] = {}

    @property
    def active(self) -> list[Toast]:
        return list(self._active.values())

    def show(
        self,
        type_: ToastType | str,
        title: str,
        message: str,
        *,
        duration_seconds: float | None = DEFAULT_DURATION_SECONDS,
        persistent: bool = False,
        metadata: dict[str, Any] | None = None,
    ) -> Toast:
        toast = Toast(
            id=f"toast_{uuid.uuid4().hex[:12]}",
            type=ToastType(type_),
            title=title,
            message=message,
            duration_seconds=None if persistent else duration_seconds,
            persistent=persistent,
            timestamp=self._clock.timestamp(),
            metadata=metadata or {},
        )
        while len(self._active) >= self._max_toasts:
            oldest = next(iter(self._active))
            self.remove(oldest)
        self._active[toast.id] = toast
        self._bus.emit(TOAST_ADD, toast.to_dict())
        if self._scheduler is not None and toast.duration_seconds:
            self._timers[toast.id] = self._scheduler.call_later(
                toast.duration_seconds, lambda: self.remove(toast.id)
            )
        return toast

    def remove(self, toast_id: str) -> None:
        timer = self._timers.pop(toast_id, None)
        if timer is not None:
            timer.cancel()
        if self._active.pop(toast_id, None) is None:
            return
        self._bus.emit(TOAST_REMOVE, {"id": toast_id})

    def clear(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._active.clear()
        self._bus.emit(TOAST_CLEAR, {})

    # ──────────────────────────────────────────────────────────────
    # Atalhos
    # ──────────────────────────────────────────────────────────────

    def success(self, title: str, message: str = "") -> Toast:
        return self.show(ToastType.SUCCESS, title, message)

    def error(self, title: str, message: str = "") -> Toast:
        return self.show(ToastType.ERROR, title, message, duration_seconds=8.0)

    def warning(self, title: str, message: str = "") -> Toast:
        return self.show(ToastType.WARNING, title, message)

    def info(self, title: str, message: str = "") -> Toast:
        return self.show(ToastType.INFO, title, message)

    def notify_rate_limited(self, error: RateLimitExceededError) -> Toast:
        """Toast acionável para chamada negada pelo gate local."""
        logger.info("toast_rate_limited", extra={"endpoint": error.endpoint})
        return self.show(
            ToastType.WARNING,
            "Muitas requisições",
            f"Aguarde e tente novamente em {error.reset_minutes} minuto(s).",
            metadata={"endpoint": error.endpoint, "reset_minutes": error.reset_minutes},
        )

    def notify_session_expired(self) -> Toast:
        return self.show(
            ToastType.WARNING,
            "Sessão expirada",
            "Seu checkout expirou por inatividade. Recomece para continuar.",
            duration_seconds=8.0,
        )
