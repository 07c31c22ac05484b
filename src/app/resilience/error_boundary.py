"""Recuperação de falhas de render com backoff.

Envolve uma função de render; ao falhar, agenda nova tentativa em
retry_delay * 2**retry_count enquanto houver repetições. Esgotadas, o
boundary fica no estado terminal e só um recarregamento resolve.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, TypeVar

from app.observability.metrics import record_retry
from app.resilience.retry_policy import RetryPolicy
from config.settings.resilience.retry import RetrySettings
from utils.errors import RenderError

if TYPE_CHECKING:
    from app.protocols.runtime import SchedulerProtocol, TimerHandleProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorCallback = Callable[[BaseException, int], None]

_COMPONENT = "error_boundary"


class BoundaryStatus(StrEnum):
    """Estados do boundary."""

    IDLE = "idle"
    RENDERED = "rendered"
    RETRY_SCHEDULED = "retry_scheduled"
    FAILED = "failed"
    MAX_RETRIES_REACHED = "max_retries_reached"
    DISPOSED = "disposed"


class ProviderErrorBoundary(Generic[T]):
    """Boundary de erro de um subtree.

    O contador de retry nunca é zerado por um render bem-sucedido; o
    orçamento vale para toda a vida do boundary.
    """

    def __init__(
        self,
        render_fn: Callable[[], T],
        scheduler: SchedulerProtocol,
        *,
        name: str = "provider",
        max_retries: int | None = None,
        retry_delay_seconds: float | None = None,
        enable_auto_retry: bool | None = None,
        on_error: ErrorCallback | None = None,
        settings: RetrySettings | None = None,
    ) -> None:
        """Inicializa o boundary.

        Args:
            render_fn: Produz a saída do subtree; pode lançar
            scheduler: Agenda o retry automático
            name: Nome usado em logs
            max_retries: Repetições antes do estado terminal
            retry_delay_seconds: Base do backoff
            enable_auto_retry: Agenda retry sozinho após falha
            on_error: Callback (erro, retry_count) a cada falha
            settings: Padrões quando os argumentos acima são None
        """
        resolved = settings or RetrySettings()
        self._render_fn = render_fn
        self._scheduler = scheduler
        self._name = name
        self._auto_retry = (
            resolved.boundary_auto_retry if enable_auto_retry is None else enable_auto_retry
        )
        self._policy = RetryPolicy.exponential(
            max_attempts=(
                resolved.boundary_max_retries if max_retries is None else max_retries
            ),
            base_seconds=(
                resolved.boundary_retry_delay_seconds
                if retry_delay_seconds is None
                else retry_delay_seconds
            ),
            component=_COMPONENT,
        )
        self._on_error = on_error
        self._status = BoundaryStatus.IDLE
        self._retry_count = 0
        self._error: BaseException | None = None
        self._output: T | None = None
        self._timer: TimerHandleProtocol | None = None

    # ──────────────────────────────────────────────────────────────
    # Estado
    # ──────────────────────────────────────────────────────────────

    @property
    def status(self) -> BoundaryStatus:
        return self._status

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def max_retries(self) -> int:
        return self._policy.max_attempts

    @property
    def error(self) -> BaseException | None:
        return self._error

    @property
    def output(self) -> T | None:
        return self._output

    @property
    def has_error(self) -> bool:
        return self._error is not None

    @property
    def can_retry(self) -> bool:
        return (
            self._status not in (BoundaryStatus.DISPOSED, BoundaryStatus.MAX_RETRIES_REACHED)
            and self._policy.can_attempt(self._retry_count)
        )

    @property
    def retry_pending(self) -> bool:
        return self._timer is not None and not self._timer.cancelled()

    # ──────────────────────────────────────────────────────────────
    # Ciclo
    # ──────────────────────────────────────────────────────────────

    def render(self) -> T | None:
        """Executa o render; em falha retorna None e trata o erro."""
        if self._status == BoundaryStatus.DISPOSED:
            return None
        try:
            output = self._render_fn()
        except Exception as exc:
            self._handle_error(exc)
            return None
        self._error = None
        self._output = output
        self._status = BoundaryStatus.RENDERED
        return output

    def retry(self) -> T | None:
        """Retry manual: ignora o atraso, consome o mesmo orçamento."""
        self._cancel_timer()
        return self._attempt(trigger="manual")

    def dispose(self) -> None:
        """Desmonta: cancela retry pendente e ignora renders futuros."""
        self._cancel_timer()
        self._status = BoundaryStatus.DISPOSED

    def _attempt(self, trigger: str) -> T | None:
        if self._status == BoundaryStatus.DISPOSED:
            return None
        if not self._policy.can_attempt(self._retry_count):
            self._status = BoundaryStatus.MAX_RETRIES_REACHED
            logger.warning(
                "error_boundary_max_retries_reached",
                extra={"boundary": self._name, "retry_count": self._retry_count},
            )
            return None
        self._retry_count += 1
        self._error = None
        logger.info(
            "error_boundary_retry",
            extra={
                "boundary": self._name,
                "retry_count": self._retry_count,
                "trigger": trigger,
            },
        )
        return self.render()

    def _handle_error(self, exc: BaseException) -> None:
        error = exc if isinstance(exc, RenderError) else RenderError(str(exc) or type(exc).__name__)
        if error is not exc:
            error.__cause__ = exc
        self._error = error
        self._output = None
        logger.error(
            "error_boundary_caught",
            extra={
                "boundary": self._name,
                "error": type(exc).__name__,
                "retry_count": self._retry_count,
            },
        )
        if self._on_error is not None:
            try:
                self._on_error(error, self._retry_count)
            except Exception:
                logger.exception("error_boundary_callback_failed", extra={"boundary": self._name})

        if not self._policy.can_attempt(self._retry_count):
            self._status = BoundaryStatus.MAX_RETRIES_REACHED
            logger.warning(
                "error_boundary_max_retries_reached",
                extra={"boundary": self._name, "retry_count": self._retry_count},
            )
            return

        if not self._auto_retry:
            self._status = BoundaryStatus.FAILED
            return

        delay = self._policy.delay_for(self._retry_count)
        record_retry(_COMPONENT, self._retry_count, delay, type(exc).__name__)
        self._status = BoundaryStatus.RETRY_SCHEDULED
        self._timer = self._scheduler.call_later(delay, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        self._attempt(trigger="auto")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
