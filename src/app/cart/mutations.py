"""Mutações do carrinho como mensagens imutáveis.

`apply_mutation` é a única função que altera o estado do carrinho; o
CartStore local e o coordenador líder usam a mesma função, então o
resultado não depende de quem aplica.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar

from pydantic import ValidationError

from app.cart.merge import find_item, merge_key, normalize_item
from app.cart.state import CartState
from app.domain.cart_item import CartItem

UPDATABLE_FIELDS = frozenset(
    {"name", "price", "quantity", "notes", "additionals", "image", "identify"}
)


def _new_mutation_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class CartMutation:
    """Base das mensagens de mutação."""

    kind: ClassVar[str] = ""
    mutation_id: str = field(default_factory=_new_mutation_id, kw_only=True)

    def payload(self) -> dict[str, Any]:
        return {}

    def to_message(self) -> dict[str, Any]:
        return {"kind": self.kind, "mutation_id": self.mutation_id, "payload": self.payload()}


@dataclass(frozen=True, slots=True)
class AddItem(CartMutation):
    kind: ClassVar[str] = "add_item"
    item: CartItem

    def payload(self) -> dict[str, Any]:
        return {"item": self.item.to_storage_dict()}


@dataclass(frozen=True, slots=True)
class UpdateItem(CartMutation):
    kind: ClassVar[str] = "update_item"
    ref: int | str
    changes: Mapping[str, Any]

    def __post_init__(self) -> None:
        unknown = set(self.changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Campos não atualizáveis: {sorted(unknown)}")

    def payload(self) -> dict[str, Any]:
        changes = dict(self.changes)
        if "additionals" in changes:
            changes["additionals"] = [
                a.model_dump(mode="json") if hasattr(a, "model_dump") else dict(a)
                for a in changes["additionals"]
            ]
        return {"ref": self.ref, "changes": changes}


@dataclass(frozen=True, slots=True)
class RemoveItem(CartMutation):
    kind: ClassVar[str] = "remove_item"
    ref: int | str

    def payload(self) -> dict[str, Any]:
        return {"ref": self.ref}


@dataclass(frozen=True, slots=True)
class ClearCart(CartMutation):
    kind: ClassVar[str] = "clear_cart"


@dataclass(frozen=True, slots=True)
class SetContext(CartMutation):
    kind: ClassVar[str] = "set_context"
    store_id: str
    table_id: str | None = None

    def payload(self) -> dict[str, Any]:
        return {"store_id": self.store_id, "table_id": self.table_id}


@dataclass(frozen=True, slots=True)
class SetDeliveryMode(CartMutation):
    kind: ClassVar[str] = "set_delivery_mode"
    delivery_mode: bool

    def payload(self) -> dict[str, Any]:
        return {"delivery_mode": self.delivery_mode}


def mutation_from_message(message: Mapping[str, Any]) -> CartMutation:
    """Reconstrói a mutação recebida pelo canal de broadcast.

    Raises:
        ValueError: Tipo desconhecido ou payload inválido
    """
    kind = message.get("kind")
    mutation_id = str(message.get("mutation_id") or _new_mutation_id())
    payload = message.get("payload") or {}
    try:
        match kind:
            case AddItem.kind:
                return AddItem(CartItem.model_validate(payload["item"]), mutation_id=mutation_id)
            case UpdateItem.kind:
                return UpdateItem(payload["ref"], dict(payload["changes"]), mutation_id=mutation_id)
            case RemoveItem.kind:
                return RemoveItem(payload["ref"], mutation_id=mutation_id)
            case ClearCart.kind:
                return ClearCart(mutation_id=mutation_id)
            case SetContext.kind:
                return SetContext(
                    str(payload["store_id"]),
                    payload.get("table_id"),
                    mutation_id=mutation_id,
                )
            case SetDeliveryMode.kind:
                return SetDeliveryMode(bool(payload["delivery_mode"]), mutation_id=mutation_id)
    except (KeyError, TypeError, ValidationError) as exc:
        raise ValueError(f"Mutação inválida: {kind}") from exc
    raise ValueError(f"Tipo de mutação desconhecido: {kind}")


# ──────────────────────────────────────────────────────────────
# Merge puro
# ──────────────────────────────────────────────────────────────


def apply_mutation(state: CartState, mutation: CartMutation, now_ts: float) -> CartState:
    """Aplica a mutação e retorna o novo estado.

    Retorna o próprio `state` (mesmo objeto) quando nada muda; quem
    chama usa isso para não gravar.

    Raises:
        ValueError: Atualização produz item inválido
    """
    match mutation:
        case AddItem(item=item):
            return _add_item(state, item, now_ts)
        case UpdateItem(ref=ref, changes=changes):
            return _update_item(state, ref, changes, now_ts)
        case RemoveItem(ref=ref):
            return _remove_item(state, ref, now_ts)
        case ClearCart():
            if not state.items:
                return state
            return state.cleared(now_ts)
        case SetContext(store_id=store_id, table_id=table_id):
            if state.store_id == store_id and state.table_id == table_id:
                return state
            return replace(state, store_id=store_id, table_id=table_id, last_updated=now_ts)
        case SetDeliveryMode(delivery_mode=delivery_mode):
            if state.delivery_mode == delivery_mode:
                return state
            return replace(state, delivery_mode=delivery_mode, last_updated=now_ts)
    raise TypeError(f"Mutação não suportada: {type(mutation).__name__}")


def _add_item(state: CartState, item: CartItem, now_ts: float) -> CartState:
    incoming = normalize_item(item)
    key = merge_key(incoming)
    items = list(state.items)
    for index, existing in enumerate(items):
        if merge_key(existing) == key:
            items[index] = existing.model_copy(
                update={"quantity": existing.quantity + incoming.quantity}
            )
            return replace(state, items=tuple(items), last_updated=now_ts)
    items.append(incoming.model_copy(update={"id": state.next_item_id()}))
    return replace(state, items=tuple(items), last_updated=now_ts)


def _update_item(
    state: CartState,
    ref: int | str,
    changes: Mapping[str, Any],
    now_ts: float,
) -> CartState:
    target = find_item(state.items, ref)
    if target is None:
        return state
    quantity = changes.get("quantity")
    if quantity is not None and int(quantity) <= 0:
        return _drop(state, target, now_ts)
    data = target.model_dump()
    data.update(changes)
    updated = normalize_item(CartItem.model_validate(data))
    key = merge_key(updated)
    twin = next(
        (item for item in state.items if item is not target and merge_key(item) == key),
        None,
    )
    if twin is None:
        items = tuple(updated if item is target else item for item in state.items)
        return replace(state, items=items, last_updated=now_ts)
    # Mudou para a chave de outra entrada: uma só entrada por chave
    folded = twin.model_copy(update={"quantity": twin.quantity + updated.quantity})
    items = tuple(
        folded if item is twin else item for item in state.items if item is not target
    )
    return replace(state, items=items, last_updated=now_ts)


def _remove_item(state: CartState, ref: int | str, now_ts: float) -> CartState:
    target = find_item(state.items, ref)
    if target is None:
        return state
    return _drop(state, target, now_ts)


def _drop(state: CartState, target: CartItem, now_ts: float) -> CartState:
    items = tuple(item for item in state.items if item is not target)
    return replace(state, items=items, last_updated=now_ts)
