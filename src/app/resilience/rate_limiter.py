"""Gate de admissão local por endpoint.

Janela fixa de `window_seconds` com no máximo `limit` chamadas; ao
estourar, o endpoint fica bloqueado por `block_seconds` (bloqueio plano,
sem escalonamento). Estado apenas em memória, por aba.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

from app.observability.metrics import record_rate_limited
from config.settings.resilience.rate_limit import RateLimitSettings
from utils.errors import RateLimitExceededError

if TYPE_CHECKING:
    from app.protocols.runtime import ClockProtocol

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

KEY_PREFIX = "rate_limit:"


def rate_limit_key(endpoint: str) -> str:
    return f"{KEY_PREFIX}{endpoint}"


@dataclass(slots=True)
class RateLimitEntry:
    """Contador de um endpoint.

    Attributes:
        key: "rate_limit:" + endpoint
        count: Chamadas admitidas na janela atual
        window_reset_time: Epoch (s) em que a janela reinicia
        blocked: Endpoint bloqueado
        block_reset_time: Epoch (s) em que o bloqueio termina
    """

    key: str
    count: int
    window_reset_time: float
    blocked: bool = False
    block_reset_time: float = 0.0

    @property
    def endpoint(self) -> str:
        return self.key.removeprefix(KEY_PREFIX)

    def reset_time(self) -> float:
        """Instante relevante: fim do bloqueio ou fim da janela."""
        return self.block_reset_time if self.blocked else self.window_reset_time

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "count": self.count,
            "window_reset_time": self.window_reset_time,
            "blocked": self.blocked,
            "block_reset_time": self.block_reset_time,
        }


class RateLimiter:
    """Rate limiter de janela fixa com bloqueio plano."""

    def __init__(
        self,
        clock: ClockProtocol,
        settings: RateLimitSettings | None = None,
    ) -> None:
        self._clock = clock
        self._settings = settings or RateLimitSettings()
        self._entries: dict[str, RateLimitEntry] = {}

    @property
    def settings(self) -> RateLimitSettings:
        return self._settings

    def _open_window(self, key: str, now: float) -> RateLimitEntry:
        entry = RateLimitEntry(
            key=key,
            count=1,
            window_reset_time=now + self._settings.window_seconds,
        )
        self._entries[key] = entry
        return entry

    def is_allowed(self, endpoint: str, limit: int | None = None) -> bool:
        """Admite (e contabiliza) uma chamada ao endpoint.

        Args:
            endpoint: Identificador do endpoint (ex: "GET /products")
            limit: Máximo por janela (padrão: settings.default_limit)

        Returns:
            True se admitida
        """
        request_limit = limit or self._settings.default_limit
        key = rate_limit_key(endpoint)
        now = self._clock.timestamp()
        entry = self._entries.get(key)

        if entry is None:
            self._open_window(key, now)
            return True

        if entry.blocked:
            if now >= entry.block_reset_time:
                logger.info("rate_limit_unblocked", extra={"endpoint": endpoint})
                self._open_window(key, now)
                return True
            return False

        if now >= entry.window_reset_time:
            self._open_window(key, now)
            return True

        if entry.count < request_limit:
            entry.count += 1
            return True

        entry.blocked = True
        entry.block_reset_time = now + self._settings.block_seconds
        logger.warning(
            "rate_limit_exceeded",
            extra={
                "endpoint": endpoint,
                "limit": request_limit,
                "block_seconds": self._settings.block_seconds,
            },
        )
        record_rate_limited(endpoint, self._settings.block_seconds)
        return False

    def exhaust(self, endpoint: str, retry_after_seconds: float | None = None) -> None:
        """Bloqueia o endpoint após 429 do servidor.

        Usa Retry-After quando informado; senão, o bloqueio padrão.
        """
        now = self._clock.timestamp()
        block = (
            retry_after_seconds
            if retry_after_seconds is not None and retry_after_seconds > 0
            else self._settings.block_seconds
        )
        key = rate_limit_key(endpoint)
        entry = self._entries.get(key) or self._open_window(key, now)
        # Contador rearmado: o próximo is_allowed após o bloqueio abre janela nova
        entry.count = 0
        entry.window_reset_time = now + block
        entry.blocked = True
        entry.block_reset_time = now + block
        logger.warning(
            "rate_limit_exhausted_by_server",
            extra={"endpoint": endpoint, "block_seconds": block},
        )
        record_rate_limited(endpoint, block)

    # ──────────────────────────────────────────────────────────────
    # Consultas
    # ──────────────────────────────────────────────────────────────

    def _blocked_now(self, entry: RateLimitEntry | None) -> bool:
        if entry is None or not entry.blocked:
            return False
        return self._clock.timestamp() < entry.block_reset_time

    def is_blocked(self, endpoint: str) -> bool:
        """Leitura pura: não altera a entrada (is_allowed desbloqueia)."""
        return self._blocked_now(self._entries.get(rate_limit_key(endpoint)))

    def get_remaining(self, endpoint: str, limit: int | None = None) -> int:
        """Chamadas restantes na janela; 0 sem entrada ou bloqueado."""
        request_limit = limit or self._settings.default_limit
        entry = self._entries.get(rate_limit_key(endpoint))
        if entry is None or self._blocked_now(entry):
            return 0
        if entry.blocked or self._clock.timestamp() >= entry.window_reset_time:
            return request_limit
        return max(0, request_limit - entry.count)

    def get_reset_time(self, endpoint: str) -> float:
        """Segundos até liberar (fim do bloqueio ou da janela)."""
        entry = self._entries.get(rate_limit_key(endpoint))
        if entry is None:
            return 0.0
        return max(0.0, entry.reset_time() - self._clock.timestamp())

    def get_entry(self, endpoint: str) -> RateLimitEntry | None:
        return self._entries.get(rate_limit_key(endpoint))

    def get_stats(self) -> dict[str, dict[str, Any]]:
        """Resumo por endpoint: count, remaining, blocked, reset_in."""
        stats: dict[str, dict[str, Any]] = {}
        for entry in list(self._entries.values()):
            endpoint = entry.endpoint
            stats[endpoint] = {
                "count": entry.count,
                "remaining": self.get_remaining(endpoint),
                "blocked": self.is_blocked(endpoint),
                "reset_in": self.get_reset_time(endpoint),
            }
        return stats

    def reset(self, endpoint: str) -> None:
        self._entries.pop(rate_limit_key(endpoint), None)

    def clear_all(self) -> None:
        self._entries.clear()

    def check(self, endpoint: str, limit: int | None = None) -> None:
        """Como is_allowed, mas lança ao negar.

        Raises:
            RateLimitExceededError: Endpoint bloqueado ou limite estourado
        """
        if not self.is_allowed(endpoint, limit):
            raise RateLimitExceededError(endpoint, self.get_reset_time(endpoint))


def rate_limited(
    limiter: RateLimiter,
    endpoint: str,
    limit: int | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator que passa a função assíncrona pelo gate de admissão.

    Example:
        @rate_limited(limiter, "POST /orders", limit=3)
        async def submit_order(payload): ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            limiter.check(endpoint, limit)
            return await func(*args, **kwargs)

        return wrapper

    return decorator
