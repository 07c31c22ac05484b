"""Política de retry compartilhada.

Um único objeto {max_attempts, delay_fn, is_retryable} usado pelo cliente
de API (retry de transporte) e pelo error boundary (retry de render).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from app.observability.metrics import record_retry
from app.resilience.backoff import compute_backoff_delay
from utils.errors import TransportError

if TYPE_CHECKING:
    from app.resilience.cancellation import CancellationToken

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _always_retryable(_exc: BaseException) -> bool:
    return True


def is_transport_error(exc: BaseException) -> bool:
    """Só falhas sem resposta do servidor são repetidas."""
    return isinstance(exc, TransportError)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Política de retry.

    Attributes:
        max_attempts: Máximo de repetições após a falha inicial
        delay_fn: Espera (segundos) antes da repetição n (0-based)
        is_retryable: Classifica o erro
        component: Nome usado em logs e métricas
    """

    max_attempts: int
    delay_fn: Callable[[int], float]
    is_retryable: Callable[[BaseException], bool] = _always_retryable
    component: str = "retry"

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError(f"max_attempts deve ser >= 0, recebido: {self.max_attempts}")

    @classmethod
    def exponential(
        cls,
        max_attempts: int,
        base_seconds: float,
        is_retryable: Callable[[BaseException], bool] = _always_retryable,
        component: str = "retry",
    ) -> RetryPolicy:
        """Política com atraso base * 2**n."""
        return cls(
            max_attempts=max_attempts,
            delay_fn=lambda attempt: compute_backoff_delay(attempt, base_seconds),
            is_retryable=is_retryable,
            component=component,
        )

    def can_attempt(self, attempt: int) -> bool:
        """Ainda há repetições disponíveis após `attempt` repetições?"""
        return attempt < self.max_attempts

    def should_retry(self, attempt: int, error: BaseException) -> bool:
        """Repetir após a falha da tentativa `attempt`?"""
        return self.can_attempt(attempt) and self.is_retryable(error)

    def delay_for(self, attempt: int) -> float:
        return self.delay_fn(attempt)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        cancellation: CancellationToken | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> T:
        """Executa `operation` repetindo conforme a política.

        Esgotadas as repetições (ou erro não repetível), o último erro
        propaga sem alteração.

        Args:
            operation: Fábrica da tentativa (chamada de novo a cada repetição)
            cancellation: Interrompe a espera e descarta tentativas pendentes
            sleep: Função de espera (padrão: asyncio.sleep ou token.sleep)

        Returns:
            Resultado da primeira tentativa bem-sucedida
        """
        attempt = 0
        while True:
            if cancellation is not None:
                cancellation.raise_if_cancelled()
            try:
                return await operation()
            except Exception as exc:
                if not self.should_retry(attempt, exc):
                    raise
                delay = self.delay_for(attempt)
                record_retry(self.component, attempt, delay, type(exc).__name__)
                logger.info(
                    "retry_scheduled",
                    extra={
                        "component": self.component,
                        "attempt": attempt,
                        "delay_seconds": delay,
                        "error": type(exc).__name__,
                    },
                )
                await self._wait(delay, cancellation, sleep)
                attempt += 1

    @staticmethod
    async def _wait(
        delay: float,
        cancellation: CancellationToken | None,
        sleep: Callable[[float], Awaitable[None]] | None,
    ) -> None:
        if sleep is not None:
            await sleep(delay)
            if cancellation is not None:
                cancellation.raise_if_cancelled()
            return
        if cancellation is not None:
            await cancellation.sleep(delay)
            return
        await asyncio.sleep(delay)
