"""Testes das mutações do carrinho e do merge puro."""

from __future__ import annotations

import pytest

from app.cart.mutations import (
    AddItem,
    ClearCart,
    RemoveItem,
    SetContext,
    SetDeliveryMode,
    UpdateItem,
    apply_mutation,
    mutation_from_message,
)
from app.cart.state import CartState
from app.domain.cart_item import CartItem

NOW = 1_768_478_400.0


def _item(**overrides: object) -> CartItem:
    data = {"product_id": 10, "name": "X-Burger", "price": 25.0, "quantity": 1}
    data.update(overrides)
    return CartItem.model_validate(data)


class TestApplyMutation:
    """Aplicação pura, independente de quem aplica."""

    def test_add_assigns_sequential_ids(self) -> None:
        state = apply_mutation(CartState(), AddItem(_item()), NOW)
        state = apply_mutation(state, AddItem(_item(product_id=11)), NOW)

        assert [item.id for item in state.items] == [1, 2]
        assert state.last_updated == NOW

    def test_add_same_merge_key_sums_quantity(self) -> None:
        state = apply_mutation(CartState(), AddItem(_item(quantity=2)), NOW)
        state = apply_mutation(state, AddItem(_item(quantity=3)), NOW)

        assert len(state.items) == 1
        assert state.items[0].quantity == 5

    def test_update_quantity_zero_removes(self) -> None:
        state = apply_mutation(CartState(), AddItem(_item()), NOW)
        state = apply_mutation(state, UpdateItem(1, {"quantity": 0}), NOW)
        assert state.items == ()

    def test_update_changes_fields(self) -> None:
        state = apply_mutation(CartState(), AddItem(_item()), NOW)
        state = apply_mutation(state, UpdateItem(1, {"quantity": 4, "notes": "bem passado"}), NOW)
        assert state.items[0].quantity == 4
        assert state.items[0].notes == "bem passado"

    def test_update_into_existing_merge_key_folds_entries(self) -> None:
        state = apply_mutation(
            CartState(), AddItem(_item(identify="p10", notes="sem cebola", quantity=2)), NOW
        )
        state = apply_mutation(state, AddItem(_item(identify="p10", quantity=3)), NOW)
        assert len(state.items) == 2

        state = apply_mutation(state, UpdateItem(1, {"notes": None}), NOW + 1)

        assert [(item.id, item.notes, item.quantity) for item in state.items] == [(2, None, 5)]
        assert state.last_updated == NOW + 1

    def test_update_invalid_value_raises(self) -> None:
        state = apply_mutation(CartState(), AddItem(_item()), NOW)
        with pytest.raises(ValueError):
            apply_mutation(state, UpdateItem(1, {"price": -1}), NOW)

    def test_update_rejects_unknown_field(self) -> None:
        with pytest.raises(ValueError):
            UpdateItem(1, {"product_id": 3})

    def test_missing_item_returns_same_state(self) -> None:
        state = apply_mutation(CartState(), AddItem(_item()), NOW)
        assert apply_mutation(state, RemoveItem(42), NOW + 1) is state
        assert apply_mutation(state, UpdateItem(42, {"quantity": 2}), NOW + 1) is state

    def test_idempotent_context_changes(self) -> None:
        state = apply_mutation(CartState(), SetContext("1", "7"), NOW)
        assert apply_mutation(state, SetContext("1", "7"), NOW + 1) is state
        assert apply_mutation(state, SetDeliveryMode(False), NOW + 1) is state
        assert apply_mutation(CartState(), ClearCart(), NOW) == CartState()

    def test_clear_keeps_context(self) -> None:
        state = apply_mutation(CartState(store_id="1", table_id="7"), AddItem(_item()), NOW)
        cleared = apply_mutation(state, ClearCart(), NOW + 5)
        assert cleared.items == ()
        assert cleared.store_id == "1"
        assert cleared.table_id == "7"


class TestMutationMessages:
    """Mensagens trafegam pelo canal de broadcast como dicts."""

    @pytest.mark.parametrize(
        "mutation",
        [
            AddItem(_item(additionals=[{"id": 1, "name": "Ovo", "price": 2.0}])),
            UpdateItem("pizza", {"quantity": 2}),
            RemoveItem(3),
            ClearCart(),
            SetContext("5", None),
            SetDeliveryMode(True),
        ],
    )
    def test_message_reconstructs_same_mutation(self, mutation) -> None:
        assert mutation_from_message(mutation.to_message()) == mutation

    def test_unknown_kind_raises(self) -> None:
        with pytest.raises(ValueError):
            mutation_from_message({"kind": "explode", "payload": {}})

    def test_bad_payload_raises(self) -> None:
        with pytest.raises(ValueError):
            mutation_from_message({"kind": "add_item", "payload": {"item": {"name": "x"}}})
