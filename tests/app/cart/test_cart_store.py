"""Testes do CartStore.

Testa:
    - Persistência do estado inteiro a cada mutação
    - TTL por inatividade e por tipo de sessão
    - Fallback em registro corrompido ou storage falho
    - Agregados (totais, taxa de entrega, resumo)
    - Perda de escrita entre abas sem sincronização
"""

from __future__ import annotations

import json

import pytest

from app.cart import CartStore
from app.domain.cart_item import CartItem
from app.infra.stores import MemoryKeyValueStore
from config.settings import CartSettings
from tests.fakes.runtime import FakeClock

CART_KEY = "digimenu-cart"


def _burger(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {"product_id": 10, "name": "X-Burger", "price": 25.0}
    data.update(overrides)
    return data


@pytest.fixture
def cart(storage: MemoryKeyValueStore, clock: FakeClock) -> CartStore:
    return CartStore(storage, clock)


class TestCartPersistence:
    """Cada mutação grava o estado inteiro."""

    def test_add_item_persists_versioned_record(
        self, cart: CartStore, storage: MemoryKeyValueStore, clock: FakeClock
    ) -> None:
        cart.set_context("1", "7")
        cart.add_item(_burger())

        record = json.loads(storage.get_item(CART_KEY))
        assert record["version"] == 1
        assert record["state"]["store_id"] == "1"
        assert record["state"]["table_id"] == "7"
        assert record["state"]["last_updated"] == int(clock.timestamp() * 1000)
        assert record["state"]["items"][0]["id"] == 1

    def test_new_store_loads_persisted_cart(
        self, cart: CartStore, storage: MemoryKeyValueStore, clock: FakeClock
    ) -> None:
        cart.add_item(_burger(quantity=2))
        reopened = CartStore(storage, clock)
        assert reopened.state == cart.state
        assert reopened.total_items() == 2

    def test_noop_mutation_does_not_write(
        self, cart: CartStore, storage: MemoryKeyValueStore
    ) -> None:
        cart.set_context("1")
        before = storage.get_item(CART_KEY)
        cart.set_context("1")
        cart.remove_item(999)
        assert storage.get_item(CART_KEY) == before

    def test_same_merge_key_sums_quantities(self, cart: CartStore) -> None:
        cart.add_item(_burger(quantity=2, notes="sem cebola"))
        cart.add_item(_burger(quantity=3, notes="sem cebola"))
        assert cart.items_count() == 1
        assert cart.items[0].quantity == 5

    def test_remove_then_add_restores_single_entry(self, cart: CartStore) -> None:
        cart.add_item(_burger(quantity=2))
        cart.remove_item(1)
        cart.add_item(_burger(quantity=4))
        assert cart.items_count() == 1
        assert cart.items[0].quantity == 4

    def test_update_to_existing_key_keeps_single_entry(self, cart: CartStore) -> None:
        cart.add_item(_burger(identify="p10", notes="sem cebola"))
        cart.add_item(_burger(identify="p10"))

        cart.update_item(1, notes=None)

        assert cart.items_count() == 1
        assert cart.total_items() == 2

    def test_context_switch_keeps_items(self, cart: CartStore) -> None:
        cart.set_context("1", "7")
        cart.add_item(_burger())
        cart.set_context("2")
        assert cart.items_count() == 1
        assert cart.store_id == "2"
        assert cart.table_id is None

    def test_invalid_item_raises_value_error(self, cart: CartStore) -> None:
        with pytest.raises(ValueError):
            cart.add_item(_burger(quantity=0))
        with pytest.raises(ValueError):
            cart.add_item(_burger(price=-5))

    def test_update_item_invalid_value_raises(self, cart: CartStore) -> None:
        cart.add_item(_burger())
        with pytest.raises(ValueError):
            cart.update_item(1, price=-3)

    def test_update_item_by_product_id(self, cart: CartStore) -> None:
        cart.add_item(CartItem(product_id=10, name="X-Burger", price=25.0))
        cart.update_item("10", quantity=3)
        assert cart.items[0].quantity == 3
        cart.update_item("10", quantity=0)
        assert cart.items == ()

    def test_listener_notified_only_on_change(self, cart: CartStore) -> None:
        seen: list[int] = []
        unsubscribe = cart.subscribe(lambda state: seen.append(len(state.items)))

        cart.add_item(_burger())
        cart.remove_item(999)
        unsubscribe()
        cart.clear_cart()

        assert seen == [1]


class TestCartExpiry:
    """TTL contado a partir da última mutação."""

    def test_cart_expires_after_ttl(
        self, cart: CartStore, storage: MemoryKeyValueStore, clock: FakeClock
    ) -> None:
        cart.set_context("1")
        cart.add_item(_burger())
        clock.advance(hours=24, seconds=1)

        cart.sync_cart()

        assert cart.items == ()
        assert cart.store_id == "1"
        assert json.loads(storage.get_item(CART_KEY))["state"]["items"] == []

    def test_cart_within_ttl_survives(self, cart: CartStore, clock: FakeClock) -> None:
        cart.add_item(_burger())
        clock.advance(hours=24)
        cart.sync_cart()
        assert cart.items_count() == 1

    def test_expired_cache_is_cleared_before_mutation(
        self, cart: CartStore, clock: FakeClock
    ) -> None:
        cart.add_item(_burger())
        clock.advance(hours=25)
        cart.add_item(_burger(product_id=11, name="Batata"))
        assert [item.name for item in cart.items] == ["Batata"]

    def test_empty_cart_never_expires(self, cart: CartStore, clock: FakeClock) -> None:
        cart.set_context("1")
        clock.advance(hours=100)
        assert cart.is_expired() is False

    def test_session_context_ttl(self, cart: CartStore, clock: FakeClock) -> None:
        cart.apply_session_context("table")
        assert cart.state.ttl_hours == 4.0
        assert cart.delivery_mode is False

        cart.apply_session_context("delivery")
        assert cart.state.ttl_hours == 2.0
        assert cart.delivery_mode is True

        cart.add_item(_burger())
        clock.advance(hours=2, seconds=1)
        assert cart.is_expired() is True


class TestCartStorageFallback:
    """Falha de storage nunca interrompe o carrinho."""

    def test_corrupt_record_starts_empty(
        self, storage: MemoryKeyValueStore, clock: FakeClock
    ) -> None:
        storage.set_item(CART_KEY, "{{{")
        cart = CartStore(storage, clock)
        assert cart.items == ()
        assert storage.get_item(CART_KEY) is None

    def test_malformed_record_keeps_cache(
        self, cart: CartStore, storage: MemoryKeyValueStore
    ) -> None:
        cart.add_item(_burger())
        storage.set_item(CART_KEY, json.dumps({"state": {"items": [{"name": "x"}]}}))
        cart.sync_cart()
        assert cart.items_count() == 1

    def test_missing_record_empties_cache_only_when_asked(
        self, cart: CartStore, storage: MemoryKeyValueStore
    ) -> None:
        cart.set_context("1")
        cart.add_item(_burger())
        storage.remove_item(CART_KEY)

        cart.sync_cart()
        assert cart.items_count() == 1

        cart.sync_cart(missing_is_empty=True)
        assert cart.items == ()
        assert cart.store_id == "1"

    def test_failed_read_keeps_cache_even_when_missing_is_empty(
        self, cart: CartStore, storage: MemoryKeyValueStore
    ) -> None:
        cart.add_item(_burger())
        storage.fail_reads = True
        cart.sync_cart(missing_is_empty=True)
        assert cart.items_count() == 1

    def test_write_failure_keeps_state_in_memory(
        self, cart: CartStore, storage: MemoryKeyValueStore
    ) -> None:
        storage.fail_writes = True
        cart.add_item(_burger())
        assert cart.items_count() == 1
        assert storage.get_item(CART_KEY) is None

    def test_quota_exceeded_keeps_state_in_memory(self, clock: FakeClock) -> None:
        cart = CartStore(MemoryKeyValueStore(quota_bytes=10), clock)
        cart.add_item(_burger())
        assert cart.items_count() == 1


class TestCartAggregates:
    """Totais e resumo do checkout."""

    def test_totals(self, cart: CartStore) -> None:
        cart.add_item(
            _burger(quantity=2, additionals=[{"id": 1, "name": "Bacon", "price": 3.0}])
        )
        cart.add_item(_burger(product_id=11, name="Refrigerante", price=6.5))

        assert cart.items_count() == 2
        assert cart.total_items() == 3
        assert cart.total_price() == 59.5

    def test_delivery_fee_and_free_threshold(
        self, storage: MemoryKeyValueStore, clock: FakeClock
    ) -> None:
        cart = CartStore(
            storage, clock, CartSettings(delivery_fee=7.0, free_delivery_threshold=50.0)
        )
        cart.add_item(_burger())
        assert cart.calculate_delivery_fee() == 0.0

        cart.set_delivery_mode(True)
        assert cart.calculate_delivery_fee() == 7.0

        cart.update_item(1, quantity=2)
        assert cart.calculate_delivery_fee() == 0.0

    def test_minimum_order(self, cart: CartStore) -> None:
        cart.add_item(_burger())
        assert cart.validate_minimum_order(20.0) is True
        assert cart.validate_minimum_order(30.0) is False
        assert cart.validate_minimum_order() is True

    def test_validate_cart_context(self, cart: CartStore) -> None:
        assert cart.validate_cart_context() is False
        cart.set_context("1", "7")
        assert cart.validate_cart_context() is False
        cart.add_item(_burger())
        assert cart.validate_cart_context() is True
        assert cart.validate_cart_context("1", "7") is True
        assert cart.validate_cart_context("1") is False
        assert cart.validate_cart_context("2", "7") is False

    def test_summary(self, storage: MemoryKeyValueStore, clock: FakeClock) -> None:
        cart = CartStore(storage, clock, CartSettings(delivery_fee=5.0))
        cart.set_delivery_mode(True)
        cart.add_item(_burger())

        summary = cart.get_cart_summary(discount=40.0)

        assert summary.subtotal == 25.0
        assert summary.delivery_fee == 5.0
        assert summary.total == 0.0
        assert summary.estimated_time_minutes == 45
        assert summary.free_delivery is False
        assert summary.to_dict()["items_count"] == 1


class TestCrossTabLostUpdate:
    """Sem sync entre as mutações, a última escrita vence."""

    def test_second_tab_overwrites_first_without_sync(self, clock: FakeClock) -> None:
        shared = MemoryKeyValueStore()
        tab_a = CartStore(shared, clock)
        tab_b = CartStore(shared, clock)

        tab_a.add_item(_burger(name="X"))
        tab_b.add_item(_burger(product_id=11, name="Y"))
        tab_a.sync_cart()

        assert [item.name for item in tab_a.items] == ["Y"]

    def test_sync_before_mutation_keeps_both(self, clock: FakeClock) -> None:
        shared = MemoryKeyValueStore()
        tab_a = CartStore(shared, clock)
        tab_b = CartStore(shared, clock)

        tab_a.add_item(_burger(name="X"))
        tab_b.sync_cart()
        tab_b.add_item(_burger(product_id=11, name="Y"))

        assert [item.name for item in tab_b.items] == ["X", "Y"]
