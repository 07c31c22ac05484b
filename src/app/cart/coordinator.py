"""Coordenação de mutações do carrinho entre abas via aba líder.

Cada aba envia mutações imutáveis por um canal de broadcast. A aba que
detém o lease de líder (registro no storage, com expiração pelo relógio)
aplica as mutações na ordem recebida com `apply_mutation`, grava e
republica o estado mesclado. Mutações de seguidores ficam pendentes até
o líder confirmar; se o líder some, quem assumir o lease reaplica as
pendentes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.cart.mutations import CartMutation, mutation_from_message
from app.cart.state import CartState
from app.infra.stores.safe_io import load_json_record, remove_record, save_json_record
from config.settings.cart import CartSettings

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.cart.store import CartStore
    from app.protocols.broadcast import BroadcastChannelProtocol
    from app.protocols.key_value_store import KeyValueStoreProtocol
    from app.protocols.runtime import ClockProtocol, SchedulerProtocol, TimerHandleProtocol

logger = logging.getLogger(__name__)

_COMPONENT = "cart_leader"

MESSAGE_MUTATION = "cart_mutation"
MESSAGE_STATE = "cart_state"


class CartMutationCoordinator:
    """Aplica mutações do carrinho sem perda entre abas."""

    def __init__(
        self,
        store: CartStore,
        channel: BroadcastChannelProtocol,
        storage: KeyValueStoreProtocol,
        clock: ClockProtocol,
        tab_id: str,
        settings: CartSettings | None = None,
        scheduler: SchedulerProtocol | None = None,
    ) -> None:
        """Inicializa o coordenador.

        Args:
            store: CartStore da aba
            channel: Canal de broadcast do carrinho
            storage: Storage onde fica o lease do líder
            clock: Relógio para expiração do lease
            tab_id: Identificador desta aba
            settings: Chave e duração do lease
            scheduler: Se informado, renova o lease periodicamente
        """
        self._store = store
        self._channel = channel
        self._storage = storage
        self._clock = clock
        self._tab_id = tab_id
        self._settings = settings or store.settings
        self._scheduler = scheduler
        self._pending: dict[str, CartMutation] = {}
        self._unsubscribe: Callable[[], None] | None = None
        self._timer: TimerHandleProtocol | None = None
        self._was_leader = False

    @property
    def tab_id(self) -> str:
        return self._tab_id

    @property
    def pending(self) -> list[CartMutation]:
        return list(self._pending.values())

    # ──────────────────────────────────────────────────────────────
    # Ciclo de vida
    # ──────────────────────────────────────────────────────────────

    def start(self) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._channel.subscribe(self._on_message)
        self._schedule_heartbeat()

    def dispose(self) -> None:
        """Para de participar e libera o lease se for líder."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.is_leader():
            remove_record(self._storage, self._settings.leader_key, _COMPONENT)
            logger.info("cart_leader_released", extra={"tab_id": self._tab_id})
        self._was_leader = False

    # ──────────────────────────────────────────────────────────────
    # Lease
    # ──────────────────────────────────────────────────────────────

    def _read_lease(self) -> dict[str, Any] | None:
        lease = load_json_record(self._storage, self._settings.leader_key, _COMPONENT)
        if lease is None or "tab_id" not in lease or "expires_at" not in lease:
            return None
        return lease

    def _lease_is_live(self, lease: dict[str, Any] | None) -> bool:
        if lease is None:
            return False
        try:
            return float(lease["expires_at"]) > self._clock.timestamp()
        except (TypeError, ValueError):
            return False

    def current_leader(self) -> str | None:
        lease = self._read_lease()
        return str(lease["tab_id"]) if self._lease_is_live(lease) else None

    def is_leader(self) -> bool:
        return self.current_leader() == self._tab_id

    def try_acquire_leadership(self) -> bool:
        """Assume ou renova o lease se estiver livre, expirado ou já for nosso."""
        lease = self._read_lease()
        if self._lease_is_live(lease) and str(lease["tab_id"]) != self._tab_id:
            self._was_leader = False
            return False
        saved = save_json_record(
            self._storage,
            self._settings.leader_key,
            {
                "tab_id": self._tab_id,
                "expires_at": self._clock.timestamp() + self._settings.leader_lease_seconds,
            },
            _COMPONENT,
        )
        if not saved or not self.is_leader():
            return False
        if not self._was_leader:
            self._was_leader = True
            logger.info("cart_leader_acquired", extra={"tab_id": self._tab_id})
            self._on_became_leader()
        return True

    def heartbeat(self) -> None:
        """Renova o lease do líder ou assume um lease abandonado."""
        self.try_acquire_leadership()

    def _schedule_heartbeat(self) -> None:
        if self._scheduler is None:
            return
        self._timer = self._scheduler.call_later(
            self._settings.leader_lease_seconds / 2, self._on_heartbeat_timer
        )

    def _on_heartbeat_timer(self) -> None:
        self._timer = None
        self.heartbeat()
        self._schedule_heartbeat()

    def _on_became_leader(self) -> None:
        self._store.sync_cart()
        if not self._pending:
            return
        replay = list(self._pending.values())
        self._pending.clear()
        logger.info(
            "cart_pending_replayed",
            extra={"tab_id": self._tab_id, "count": len(replay)},
        )
        self._apply_and_publish(replay)

    # ──────────────────────────────────────────────────────────────
    # Mutações
    # ──────────────────────────────────────────────────────────────

    def submit(self, mutation: CartMutation) -> CartState | None:
        """Envia uma mutação.

        Returns:
            Estado mesclado se esta aba é a líder; None se a mutação foi
            encaminhada e aguarda confirmação do líder
        """
        if self.try_acquire_leadership():
            return self._apply_and_publish([mutation])
        self._pending[mutation.mutation_id] = mutation
        self._channel.post_message(
            {
                "type": MESSAGE_MUTATION,
                "origin": self._tab_id,
                "mutation": mutation.to_message(),
            }
        )
        return None

    def _apply_and_publish(self, mutations: list[CartMutation]) -> CartState:
        applied: list[str] = []
        for mutation in mutations:
            try:
                self._store.apply(mutation)
            except ValueError as exc:
                logger.warning(
                    "cart_mutation_rejected",
                    extra={"kind": mutation.kind, "error": type(exc).__name__},
                )
            applied.append(mutation.mutation_id)
        state = self._store.state
        self._channel.post_message(
            {
                "type": MESSAGE_STATE,
                "leader": self._tab_id,
                "applied": applied,
                "state": state.to_dict(),
            }
        )
        return state

    def _on_message(self, message: dict[str, Any]) -> None:
        kind = message.get("type")
        if kind == MESSAGE_MUTATION:
            self._handle_remote_mutation(message)
        elif kind == MESSAGE_STATE:
            self._handle_remote_state(message)

    def _handle_remote_mutation(self, message: dict[str, Any]) -> None:
        if not self.is_leader():
            return
        try:
            mutation = mutation_from_message(message.get("mutation") or {})
        except ValueError as exc:
            logger.warning(
                "cart_mutation_invalid",
                extra={"origin": message.get("origin"), "error": str(exc)},
            )
            return
        self._apply_and_publish([mutation])

    def _handle_remote_state(self, message: dict[str, Any]) -> None:
        for mutation_id in message.get("applied", []):
            self._pending.pop(mutation_id, None)
        try:
            state = CartState.from_dict(message["state"])
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("cart_state_message_invalid", extra={"error": type(exc).__name__})
            return
        self._store.adopt_state(state)
