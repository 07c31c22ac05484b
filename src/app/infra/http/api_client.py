"""Cliente da API do digimenu sobre httpx.

Fluxo de cada chamada: gate de admissão local (RateLimiter) → tentativa
envolvida pela RetryPolicy → servidor. Só falhas de transporte (sem
resposta ou timeout) são repetidas; qualquer resposta 4xx/5xx vira
ServerError na hora.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING, Any

import httpx

from app.observability import generate_correlation_id, get_correlation_id, record_latency
from app.resilience.retry_policy import RetryPolicy, is_transport_error
from config.settings.api import ApiSettings
from config.settings.resilience.retry import RetrySettings
from utils.errors import (
    RateLimitExceededError,
    RequestTimeoutError,
    ServerError,
    StorageError,
    TransportError,
)

if TYPE_CHECKING:
    from app.protocols.key_value_store import KeyValueStoreProtocol
    from app.resilience.cancellation import CancellationToken
    from app.resilience.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

RateLimitedCallback = Callable[[RateLimitExceededError], None]


def parse_retry_after(value: str | None) -> float | None:
    """Converte Retry-After (segundos ou data HTTP) em segundos."""
    if not value:
        return None
    text = value.strip()
    try:
        return max(0.0, float(text))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(text)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max(0.0, (when - datetime.now(UTC)).total_seconds())


class ApiClient:
    """Cliente HTTP com rate limiting local, retry de transporte e token bearer."""

    def __init__(
        self,
        limiter: RateLimiter,
        settings: ApiSettings | None = None,
        retry_settings: RetrySettings | None = None,
        *,
        token_storage: KeyValueStoreProtocol | None = None,
        on_unauthorized: Callable[[], None] | None = None,
        on_rate_limited: RateLimitedCallback | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Inicializa o cliente.

        Args:
            limiter: Gate de admissão da aba
            settings: Base URL, timeout e chave do token
            retry_settings: Limite e base do backoff de transporte
            token_storage: Storage de onde o token bearer é lido
            on_unauthorized: Chamado em 401 (token inválido)
            on_rate_limited: Chamado quando o gate local nega a chamada
            transport: Transporte httpx (testes usam httpx.MockTransport)
            sleep: Espera entre tentativas (padrão: asyncio.sleep)
            cancellation: Token padrão das requisições (ex: o da aba)
        """
        self._settings = settings or ApiSettings()
        retry = retry_settings or RetrySettings()
        self._limiter = limiter
        self._token_storage = token_storage
        self._on_unauthorized = on_unauthorized
        self._on_rate_limited = on_rate_limited
        self._sleep = sleep
        self._cancellation = cancellation
        self._policy = RetryPolicy.exponential(
            max_attempts=retry.api_max_retries,
            base_seconds=retry.api_backoff_base_seconds,
            is_retryable=is_transport_error,
            component="api_client",
        )
        self._client = httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ──────────────────────────────────────────────────────────────
    # Verbos
    # ──────────────────────────────────────────────────────────────

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        cancellation: CancellationToken | None = None,
        rate_limit: int | None = None,
    ) -> Any:
        """Executa a requisição.

        Returns:
            JSON decodificado (None para resposta sem corpo)

        Raises:
            RateLimitExceededError: Gate local negou a chamada
            TransportError: Sem resposta após esgotar os retries
            ServerError: Resposta 4xx/5xx
            RequestCancelledError: Token cancelado antes do resultado
        """
        if cancellation is None:
            cancellation = self._cancellation
        method = method.upper()
        endpoint = f"{method} {path}"
        self._admit(endpoint, rate_limit)

        merged_headers = {**self._auth_headers(), **(headers or {})}
        merged_headers.setdefault(
            CORRELATION_HEADER, get_correlation_id() or generate_correlation_id()
        )

        async def _attempt() -> httpx.Response:
            return await self._send_once(
                method, path, endpoint, json, params, merged_headers, cancellation
            )

        response = await self._policy.run(_attempt, cancellation=cancellation, sleep=self._sleep)
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        self._raise_for_status(response, endpoint)
        if not response.content:
            return None
        return response.json()

    # ──────────────────────────────────────────────────────────────
    # Internos
    # ──────────────────────────────────────────────────────────────

    def _admit(self, endpoint: str, rate_limit: int | None) -> None:
        if not self._limiter.settings.enabled:
            return
        if self._limiter.is_allowed(endpoint, rate_limit):
            return
        error = RateLimitExceededError(endpoint, self._limiter.get_reset_time(endpoint))
        logger.warning(
            "api_request_rate_limited",
            extra={"endpoint": endpoint, "reset_minutes": error.reset_minutes},
        )
        if self._on_rate_limited is not None:
            self._on_rate_limited(error)
        raise error

    def _auth_headers(self) -> dict[str, str]:
        if self._token_storage is None:
            return {}
        try:
            token = self._token_storage.get_item(self._settings.token_storage_key)
        except StorageError as exc:
            logger.warning("api_token_unavailable", extra={"error": type(exc).__name__})
            return {}
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def _send_once(
        self,
        method: str,
        path: str,
        endpoint: str,
        json: Any,
        params: dict[str, Any] | None,
        headers: dict[str, str],
        cancellation: CancellationToken | None,
    ) -> httpx.Response:
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        started = time.perf_counter()
        call = self._client.request(method, path, json=json, params=params, headers=headers)
        try:
            if cancellation is not None:
                response = await cancellation.run(call)
            else:
                response = await call
        except httpx.TimeoutException as exc:
            logger.warning("api_request_timeout", extra={"endpoint": endpoint})
            raise RequestTimeoutError() from exc
        except httpx.TransportError as exc:
            logger.warning(
                "api_transport_error",
                extra={"endpoint": endpoint, "error": type(exc).__name__},
            )
            raise TransportError() from exc
        record_latency(
            "api_client",
            endpoint,
            (time.perf_counter() - started) * 1000,
            headers.get(CORRELATION_HEADER),
        )
        return response

    def _raise_for_status(self, response: httpx.Response, endpoint: str) -> None:
        status = response.status_code
        if status < 400:
            return
        if status == 401:
            self._handle_unauthorized()
        retry_after = None
        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            self._limiter.exhaust(endpoint, retry_after)
        logger.warning(
            "api_request_failed",
            extra={"endpoint": endpoint, "status_code": status},
        )
        raise ServerError(status, retry_after_seconds=retry_after)

    def _handle_unauthorized(self) -> None:
        if self._token_storage is not None:
            try:
                self._token_storage.remove_item(self._settings.token_storage_key)
            except StorageError as exc:
                logger.warning("api_token_remove_failed", extra={"error": type(exc).__name__})
        logger.info("api_unauthorized")
        if self._on_unauthorized is not None:
            self._on_unauthorized()
