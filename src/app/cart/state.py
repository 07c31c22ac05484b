"""Estado persistido do carrinho."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from app.domain.cart_item import CartItem

SECONDS_PER_HOUR = 3600
STORAGE_VERSION = 1


@dataclass(frozen=True, slots=True)
class CartState:
    """Snapshot imutável do carrinho de uma aba.

    Attributes:
        items: Entradas, no máximo uma por chave de merge
        store_id: Loja do contexto atual
        table_id: Mesa (None em delivery/balcão)
        delivery_mode: Pedido para entrega
        last_updated: Epoch (s) da última mutação
        ttl_hours: Validade contada a partir de last_updated
    """

    items: tuple[CartItem, ...] = ()
    store_id: str | None = None
    table_id: str | None = None
    delivery_mode: bool = False
    last_updated: float = 0.0
    ttl_hours: float = 24.0

    def is_expired_at(self, now_ts: float) -> bool:
        """Carrinho vazio nunca expira."""
        if not self.items:
            return False
        return now_ts - self.last_updated > self.ttl_hours * SECONDS_PER_HOUR

    def cleared(self, now_ts: float) -> CartState:
        """Sem itens, mantendo o contexto."""
        return replace(self, items=(), last_updated=now_ts)

    def next_item_id(self) -> int:
        return max((item.id or 0 for item in self.items), default=0) + 1

    def to_dict(self) -> dict[str, Any]:
        """Formato do registro: {"state": {...}, "version": N}."""
        return {
            "state": {
                "items": [item.to_storage_dict() for item in self.items],
                "store_id": self.store_id,
                "table_id": self.table_id,
                "delivery_mode": self.delivery_mode,
                "last_updated": int(self.last_updated * 1000),
                "ttl_hours": self.ttl_hours,
            },
            "version": STORAGE_VERSION,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartState:
        """Reconstrói a partir do registro.

        Raises:
            KeyError, TypeError, ValueError: Registro malformado
                (pydantic.ValidationError é ValueError)
        """
        state = data["state"]
        store_id = state.get("store_id")
        table_id = state.get("table_id")
        return cls(
            items=tuple(CartItem.model_validate(raw) for raw in state.get("items", [])),
            store_id=str(store_id) if store_id is not None else None,
            table_id=str(table_id) if table_id is not None else None,
            delivery_mode=bool(state.get("delivery_mode", False)),
            last_updated=float(state.get("last_updated", 0)) / 1000,
            ttl_hours=float(state.get("ttl_hours", 24.0)),
        )
