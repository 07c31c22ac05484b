"""Carrinho persistido no storage da origem.

Cada aba mantém um cache do carrinho e grava o estado inteiro a cada
mutação. Entre abas vale last-writer-wins: duas abas que mutam sem um
`sync_cart()` no meio perdem a escrita da primeira. Para convergência
sem perda, use CartMutationCoordinator.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from app.cart.mutations import (
    AddItem,
    CartMutation,
    ClearCart,
    RemoveItem,
    SetContext,
    SetDeliveryMode,
    UpdateItem,
    apply_mutation,
)
from app.cart.state import CartState
from app.domain.cart_item import CartItem
from app.infra.stores.safe_io import (
    is_record_missing,
    load_json_record,
    save_json_record,
)
from config.settings.cart import CartSettings

if TYPE_CHECKING:
    from app.protocols.key_value_store import KeyValueStoreProtocol
    from app.protocols.runtime import ClockProtocol

logger = logging.getLogger(__name__)

_COMPONENT = "cart_store"

DELIVERY_ESTIMATE_MINUTES = 45
PICKUP_ESTIMATE_MINUTES = 20

CartListener = Callable[[CartState], None]


@dataclass(frozen=True, slots=True)
class CartSummary:
    """Resumo exibido no checkout."""

    subtotal: float
    delivery_fee: float
    discount: float
    total: float
    items_count: int
    total_items: int
    estimated_time_minutes: int
    free_delivery: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "delivery_fee": self.delivery_fee,
            "discount": self.discount,
            "total": self.total,
            "items_count": self.items_count,
            "total_items": self.total_items,
            "estimated_time_minutes": self.estimated_time_minutes,
            "free_delivery": self.free_delivery,
        }


class CartStore:
    """Carrinho de uma aba."""

    def __init__(
        self,
        storage: KeyValueStoreProtocol,
        clock: ClockProtocol,
        settings: CartSettings | None = None,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._settings = settings or CartSettings()
        self._state = CartState(ttl_hours=self._settings.ttl_hours)
        self._listeners: list[CartListener] = []
        self.sync_cart()

    # ──────────────────────────────────────────────────────────────
    # Estado
    # ──────────────────────────────────────────────────────────────

    @property
    def settings(self) -> CartSettings:
        return self._settings

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def items(self) -> tuple[CartItem, ...]:
        return self._state.items

    @property
    def store_id(self) -> str | None:
        return self._state.store_id

    @property
    def table_id(self) -> str | None:
        return self._state.table_id

    @property
    def delivery_mode(self) -> bool:
        return self._state.delivery_mode

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Notifica a cada mudança do cache (mutação local ou sync)."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _now(self) -> float:
        return self._clock.timestamp()

    def _set_state(self, state: CartState) -> None:
        changed = state != self._state
        self._state = state
        if not changed:
            return
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("cart_listener_failed")

    def _persist(self) -> bool:
        return save_json_record(
            self._storage, self._settings.storage_key, self._state.to_dict(), _COMPONENT
        )

    def _live_state(self) -> CartState:
        """Cache atual; expirado vira vazio antes de qualquer mutação."""
        now = self._now()
        if self._state.is_expired_at(now):
            logger.info("cart_expired", extra={"store_id": self._state.store_id})
            return self._state.cleared(now)
        return self._state

    # ──────────────────────────────────────────────────────────────
    # Mutações
    # ──────────────────────────────────────────────────────────────

    def apply(self, mutation: CartMutation) -> CartState:
        """Aplica a mutação ao cache e grava o estado inteiro.

        Sem mudança (ex: set_context com o mesmo contexto) nada é gravado.
        """
        current = self._live_state()
        updated = apply_mutation(current, mutation, self._now())
        if updated is self._state:
            return self._state
        self._set_state(updated)
        self._persist()
        logger.debug(
            "cart_mutation_applied",
            extra={"kind": mutation.kind, "items_count": len(updated.items)},
        )
        return updated

    def set_context(self, store_id: str, table_id: str | None = None) -> None:
        """Define loja/mesa. Trocar de contexto não limpa os itens."""
        self.apply(SetContext(str(store_id), str(table_id) if table_id is not None else None))

    def set_delivery_mode(self, delivery_mode: bool) -> None:
        self.apply(SetDeliveryMode(bool(delivery_mode)))

    def set_cart_ttl(self, hours: float) -> None:
        """Altera o TTL; valor negativo expira o carrinho na hora."""
        if hours == self._state.ttl_hours:
            return
        self._set_state(replace(self._state, ttl_hours=float(hours)))
        self._persist()

    def apply_session_context(self, context_type: str) -> None:
        """TTL por tipo de sessão: mesa usa o TTL de mesa, demais o de delivery."""
        if context_type == "table":
            self.set_cart_ttl(self._settings.table_ttl_hours)
        else:
            self.set_cart_ttl(self._settings.delivery_ttl_hours)
        self.set_delivery_mode(context_type == "delivery")

    def add_item(self, item: CartItem | Mapping[str, Any]) -> CartState:
        """Adiciona item; mesma chave de merge soma quantidades.

        Raises:
            ValueError: Item inválido (quantidade < 1, preço negativo...)
        """
        cart_item = item if isinstance(item, CartItem) else CartItem.model_validate(item)
        return self.apply(AddItem(cart_item))

    def update_item(self, ref: int | str, **changes: Any) -> CartState:
        """Atualiza item por id, identify ou product_id.

        quantity <= 0 remove a entrada. Item não encontrado é ignorado.

        Raises:
            ValueError: Campo não atualizável ou valor inválido
        """
        try:
            return self.apply(UpdateItem(ref, changes))
        except ValidationError as exc:
            raise ValueError(f"Atualização inválida para o item {ref}") from exc

    def remove_item(self, ref: int | str) -> CartState:
        return self.apply(RemoveItem(ref))

    def clear_cart(self) -> None:
        """Esvazia itens, mantendo o contexto."""
        self.apply(ClearCart())

    # ──────────────────────────────────────────────────────────────
    # Sincronização
    # ──────────────────────────────────────────────────────────────

    def sync_cart(self, *, missing_is_empty: bool = False) -> CartState:
        """Relê o registro persistido e substitui o cache da aba.

        Registro corrompido ou ilegível mantém o cache (ou o carrinho
        vazio na primeira leitura). Carrinho expirado é limpo.

        Args:
            missing_is_empty: Registro ausente esvazia o cache, mantendo o
                contexto (outra aba removeu o carrinho ou limpou o storage)
        """
        key = self._settings.storage_key
        data = load_json_record(self._storage, key, _COMPONENT)
        if data is None:
            missing = missing_is_empty and is_record_missing(self._storage, key, _COMPONENT)
            if missing and self._state.items:
                logger.info("cart_removed_elsewhere", extra={"store_id": self.store_id})
                self._set_state(self._state.cleared(self._now()))
            return self._state
        try:
            loaded = CartState.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("cart_record_corrupt", extra={"error": type(exc).__name__})
            return self._state
        now = self._now()
        if loaded.is_expired_at(now):
            logger.info("cart_expired", extra={"store_id": loaded.store_id})
            self._set_state(loaded.cleared(now))
            self._persist()
            return self._state
        self._set_state(loaded)
        return self._state

    def adopt_state(self, state: CartState) -> None:
        """Substitui o cache por um estado já persistido por outra aba."""
        self._set_state(state)

    def is_expired(self) -> bool:
        return self._state.is_expired_at(self._now())

    # ──────────────────────────────────────────────────────────────
    # Agregados
    # ──────────────────────────────────────────────────────────────

    def total_items(self) -> int:
        """Soma das quantidades."""
        return sum(item.quantity for item in self._state.items)

    def total_price(self) -> float:
        """Soma das linhas, incluindo adicionais."""
        return round(sum(item.line_total for item in self._state.items), 2)

    def items_count(self) -> int:
        """Número de entradas distintas."""
        return len(self._state.items)

    def calculate_delivery_fee(self) -> float:
        if not self._state.delivery_mode:
            return 0.0
        if self.total_price() >= self._settings.free_delivery_threshold:
            return 0.0
        return self._settings.delivery_fee

    def validate_minimum_order(self, minimum: float | None = None) -> bool:
        required = self._settings.minimum_order_value if minimum is None else minimum
        return self.total_price() >= required

    def validate_cart_context(
        self,
        store_id: str | None = None,
        table_id: str | None = None,
    ) -> bool:
        """Carrinho pronto para checkout.

        Exige loja definida e itens. Se store_id for informado, o carrinho
        precisa pertencer a essa loja e mesa.
        """
        if not self._state.store_id or not self._state.items:
            return False
        if store_id is None:
            return True
        return self._state.store_id == str(store_id) and self._state.table_id == (
            str(table_id) if table_id is not None else None
        )

    def get_cart_summary(self, discount: float = 0.0) -> CartSummary:
        subtotal = self.total_price()
        delivery_fee = self.calculate_delivery_fee()
        return CartSummary(
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            discount=discount,
            total=round(max(0.0, subtotal + delivery_fee - discount), 2),
            items_count=self.items_count(),
            total_items=self.total_items(),
            estimated_time_minutes=(
                DELIVERY_ESTIMATE_MINUTES if self._state.delivery_mode else PICKUP_ESTIMATE_MINUTES
            ),
            free_delivery=self._state.delivery_mode and delivery_fee == 0.0,
        )
