"""Carrinho: estado persistido, merge, sincronização e coordenação entre abas."""

from .coordinator import CartMutationCoordinator
from .merge import find_item, merge_key, normalize_item, synthetic_additional_id
from .mutations import (
    AddItem,
    CartMutation,
    ClearCart,
    RemoveItem,
    SetContext,
    SetDeliveryMode,
    UpdateItem,
    apply_mutation,
    mutation_from_message,
)
from .state import CartState
from .store import CartStore, CartSummary
from .sync import CartSyncCoordinator

__all__ = [
    "AddItem",
    "CartMutation",
    "CartMutationCoordinator",
    "CartState",
    "CartStore",
    "CartSummary",
    "CartSyncCoordinator",
    "ClearCart",
    "RemoveItem",
    "SetContext",
    "SetDeliveryMode",
    "UpdateItem",
    "apply_mutation",
    "find_item",
    "merge_key",
    "mutation_from_message",
    "normalize_item",
    "synthetic_additional_id",
]
