"""Chave de merge e normalização de itens do carrinho.

Dois itens com a mesma chave (produto, adicionais, observações) ocupam
uma única entrada e têm as quantidades somadas.
"""

from __future__ import annotations

from collections.abc import Iterable

from app.domain.cart_item import CartAdditional, CartItem

MergeKey = tuple[str, tuple[int, ...], str]

_HASH_MASK = 0x7FFFFFFF


def synthetic_additional_id(name: str) -> int:
    """Id determinístico derivado dos códigos de caractere do nome.

    Mesmo nome, mesmo id, em qualquer aba e sessão. Nomes diferentes
    podem colidir.
    """
    value = 0
    for char in name:
        value = (value * 31 + ord(char)) & _HASH_MASK
    return value


def normalize_additional_id(additional: CartAdditional) -> int:
    raw = additional.id
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return synthetic_additional_id(additional.name or text)


def normalize_item(item: CartItem) -> CartItem:
    """Garante ids numéricos nos adicionais."""
    if all(isinstance(a.id, int) for a in item.additionals):
        return item
    additionals = [
        a.model_copy(update={"id": normalize_additional_id(a)}) for a in item.additionals
    ]
    return item.model_copy(update={"additionals": additionals})


def merge_key(item: CartItem) -> MergeKey:
    product = item.identify or str(item.product_id)
    additional_ids = tuple(sorted(normalize_additional_id(a) for a in item.additionals))
    return (product, additional_ids, item.notes or "")


def find_item(items: Iterable[CartItem], ref: int | str) -> CartItem | None:
    """Localiza item por id interno, identify ou product_id, nessa ordem."""
    candidates = list(items)
    internal_id = _as_int(ref)
    if internal_id is not None:
        for item in candidates:
            if item.id == internal_id:
                return item
    text = str(ref)
    for item in candidates:
        if item.identify and item.identify == text:
            return item
    for item in candidates:
        if str(item.product_id) == text:
            return item
    return None


def _as_int(ref: int | str) -> int | None:
    if isinstance(ref, bool):
        return None
    if isinstance(ref, int):
        return ref
    text = str(ref).strip()
    if text.isdigit():
        return int(text)
    return None
