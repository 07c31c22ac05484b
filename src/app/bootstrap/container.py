"""Composition root da camada de resiliência.

ResilienceContainer representa a origem (storage compartilhado, hub de
broadcast, relógio, agendador). Cada aba aberta recebe um TabContext com
suas próprias instâncias; nada é singleton de módulo. `dispose()` desfaz
timers, assinaturas e requisições pendentes.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from app.cart import CartMutationCoordinator, CartStore, CartSyncCoordinator
from app.infra.http import ApiClient
from app.infra.messaging import MemoryBroadcastHub
from app.infra.stores import OriginStorage
from app.notifications import PageEventBus, ToastNotifier
from app.resilience import CancellationToken, ProviderErrorBoundary, RateLimiter
from app.sessions import CheckoutSessionService
from config.settings import (
    ApiSettings,
    CartSettings,
    CheckoutSessionSettings,
    RateLimitSettings,
    RetrySettings,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from app.infra.stores import TabStorage
    from app.protocols.key_value_store import KeyValueStoreProtocol
    from app.protocols.runtime import ClockProtocol, SchedulerProtocol

logger = logging.getLogger(__name__)

CART_CHANNEL = "digimenu-cart"


@dataclass(frozen=True)
class ContainerSettings:
    """Settings usadas pelo container (padrões quando não informadas)."""

    session: CheckoutSessionSettings = field(default_factory=CheckoutSessionSettings)
    cart: CartSettings = field(default_factory=CartSettings)
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)
    retry: RetrySettings = field(default_factory=RetrySettings)
    api: ApiSettings = field(default_factory=ApiSettings)


class TabContext:
    """Instâncias de uma aba."""

    def __init__(
        self,
        tab_id: str,
        storage: TabStorage,
        container: ResilienceContainer,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = container.settings
        self.tab_id = tab_id
        self.storage = storage
        self.cancellation = CancellationToken()
        self.events = PageEventBus()
        self.toasts = ToastNotifier(self.events, container.clock, container.scheduler)
        self.sessions = CheckoutSessionService(
            storage,
            container.clock,
            settings.session,
            on_expired=self.toasts.notify_session_expired,
        )
        self.cart = CartStore(storage, container.clock, settings.cart)
        self.cart_sync = CartSyncCoordinator(
            self.cart, storage, container.scheduler, settings.cart
        )
        self._channel = container.broadcast.open(CART_CHANNEL, tab_id)
        self.cart_coordinator = CartMutationCoordinator(
            self.cart,
            self._channel,
            storage,
            container.clock,
            tab_id,
            settings.cart,
            container.scheduler,
        )
        self.rate_limiter = RateLimiter(container.clock, settings.rate_limit)
        self.api = ApiClient(
            self.rate_limiter,
            settings.api,
            settings.retry,
            token_storage=storage,
            on_rate_limited=self.toasts.notify_rate_limited,
            transport=transport,
            cancellation=self.cancellation,
        )
        self._scheduler = container.scheduler
        self._retry_settings = settings.retry
        self._boundaries: list[ProviderErrorBoundary] = []
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def start(self) -> None:
        """Monta a aba: sincroniza o carrinho e entra na coordenação."""
        self.cart_sync.start()
        self.cart_coordinator.start()

    def error_boundary(
        self,
        render_fn: Callable[[], object],
        name: str = "provider",
    ) -> ProviderErrorBoundary:
        """Cria um boundary descartado junto com a aba."""
        boundary = ProviderErrorBoundary(
            render_fn,
            self._scheduler,
            name=name,
            settings=self._retry_settings,
        )
        self._boundaries.append(boundary)
        return boundary

    def dispose(self) -> None:
        """Cancela requisições, timers e assinaturas da aba."""
        if self._disposed:
            return
        self._disposed = True
        self.cancellation.cancel("tab_disposed")
        for boundary in self._boundaries:
            boundary.dispose()
        self._boundaries.clear()
        self.cart_sync.dispose()
        self.cart_coordinator.dispose()
        self._channel.close()
        self.toasts.clear()
        self.events.clear()
        logger.info("tab_disposed", extra={"tab_id": self.tab_id})

    async def aclose(self) -> None:
        self.dispose()
        await self.api.aclose()


class ResilienceContainer:
    """Origem: storage compartilhado e abas abertas."""

    def __init__(
        self,
        backend: KeyValueStoreProtocol,
        clock: ClockProtocol,
        scheduler: SchedulerProtocol,
        settings: ContainerSettings | None = None,
        *,
        deliver_events_async: bool = False,
    ) -> None:
        """Inicializa a origem.

        Args:
            backend: Storage chave-valor compartilhado
            clock: Relógio
            scheduler: Agendador de timers
            settings: Settings dos componentes
            deliver_events_async: Entrega eventos `storage` via scheduler
        """
        self.clock = clock
        self.scheduler = scheduler
        self.settings = settings or ContainerSettings()
        self.origin = OriginStorage(backend, scheduler if deliver_events_async else None)
        self.broadcast = MemoryBroadcastHub()
        self._tabs: dict[str, TabContext] = {}

    @property
    def tabs(self) -> dict[str, TabContext]:
        return dict(self._tabs)

    def open_tab(
        self,
        tab_id: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        start: bool = True,
    ) -> TabContext:
        """Abre uma aba e (por padrão) a monta."""
        resolved_id = tab_id or f"tab_{uuid.uuid4().hex[:8]}"
        if resolved_id in self._tabs:
            return self._tabs[resolved_id]
        storage = self.origin.open_tab(resolved_id)
        tab = TabContext(resolved_id, storage, self, transport=transport)
        self._tabs[resolved_id] = tab
        if start:
            tab.start()
        logger.info("tab_opened", extra={"tab_id": resolved_id})
        return tab

    def close_tab(self, tab_id: str) -> None:
        tab = self._tabs.pop(tab_id, None)
        if tab is None:
            return
        tab.dispose()
        self.origin.close_tab(tab_id)

    def dispose(self) -> None:
        for tab_id in list(self._tabs):
            self.close_tab(tab_id)

    async def aclose(self) -> None:
        tabs = list(self._tabs.values())
        self.dispose()
        for tab in tabs:
            await tab.api.aclose()
