"""Tests for the session cart: quantities, removal, snapshots and locking."""

import threading

import pytest
from pydantic import ValidationError as PydanticValidationError

from storefront.domain.errors import InvalidQuantity, ItemNotFound
from storefront.domain.schemas import LineItem, SessionContext
from storefront.services.cart_store import CartStore


class TestAdd:
    def test_add_creates_entry(self, cart):
        cart.add(101, 3)
        assert cart.items() == {101: 3}

    def test_add_increments_existing_entry(self, cart):
        cart.add(101, 3)
        cart.add(101, 2)
        assert cart.items() == {101: 5}

    @pytest.mark.parametrize("qty", [0, -1, 2.5, "2", True, None])
    def test_add_rejects_non_positive_or_non_integer(self, cart, qty):
        cart.add(205, 1)
        with pytest.raises(InvalidQuantity):
            cart.add(101, qty)
        assert cart.items() == {205: 1}

    def test_add_zero_leaves_empty_cart_untouched(self, cart):
        with pytest.raises(InvalidQuantity):
            cart.add(101, 0)
        assert cart.items() == {}
        assert cart.snapshot() == ()


class TestSetDelta:
    def test_negative_delta_decrements(self, cart):
        cart.add(101, 5)
        cart.set_delta(101, -2)
        assert cart.items() == {101: 3}

    def test_positive_delta_increments(self, cart):
        cart.add(101, 1)
        cart.set_delta(101, 4)
        assert cart.items() == {101: 5}

    @pytest.mark.parametrize("delta", [-3, -10])
    def test_delta_to_zero_or_below_removes_entry(self, cart, delta):
        cart.add(101, 3)
        cart.add(205, 1)
        cart.set_delta(101, delta)
        assert cart.items() == {205: 1}

    def test_missing_entry_raises(self, cart):
        with pytest.raises(ItemNotFound) as exc:
            cart.set_delta(101, 1)
        assert exc.value.product_id == 101

    def test_non_integer_delta_rejected(self, cart):
        cart.add(101, 1)
        with pytest.raises(InvalidQuantity):
            cart.set_delta(101, 1.5)
        assert cart.items() == {101: 1}


class TestSetQuantity:
    def test_sets_new_total(self, cart):
        cart.add(101, 2)
        cart.set_quantity(101, 7)
        assert cart.items() == {101: 7}

    def test_zero_removes_entry(self, cart):
        cart.add(101, 2)
        cart.set_quantity(101, 0)
        assert cart.items() == {}

    def test_negative_rejected(self, cart):
        cart.add(101, 2)
        with pytest.raises(InvalidQuantity):
            cart.set_quantity(101, -1)


class TestRemoveAndClear:
    def test_remove_existing(self, cart):
        cart.add(101, 2)
        cart.add(205, 1)
        cart.remove(101)
        assert cart.items() == {205: 1}

    def test_remove_missing_raises(self, cart):
        with pytest.raises(ItemNotFound):
            cart.remove(101)

    def test_clear_is_idempotent(self, cart):
        cart.add(101, 2)
        cart.clear()
        cart.clear()
        assert cart.items() == {}
        assert cart.total_items() == 0


class TestSnapshot:
    def test_snapshot_is_sorted_tuple_of_line_items(self, cart):
        cart.add(205, 1)
        cart.add(101, 3)
        snap = cart.snapshot()
        assert snap == (
            LineItem(product_id=101, quantity=3),
            LineItem(product_id=205, quantity=1),
        )
        assert isinstance(snap, tuple)

    def test_snapshot_lines_are_frozen(self, cart):
        cart.add(101, 3)
        line = cart.snapshot()[0]
        with pytest.raises(PydanticValidationError):
            line.quantity = 10

    def test_snapshot_does_not_follow_later_changes(self, cart):
        cart.add(101, 3)
        snap = cart.snapshot()
        cart.add(101, 1)
        assert snap[0].quantity == 3


class TestSessions:
    def test_carts_are_isolated_per_session(self, cart_repo):
        alice = CartStore(cart_repo, SessionContext(session_id="a"))
        bob = CartStore(cart_repo, SessionContext(session_id="b"))
        alice.add(101, 1)
        bob.add(101, 4)
        assert alice.items() == {101: 1}
        assert bob.items() == {101: 4}

    def test_concurrent_adds_in_one_session_do_not_lose_updates(self, cart_repo):
        stores = [CartStore(cart_repo, SessionContext(session_id="shared")) for _ in range(8)]

        def worker(store):
            for _ in range(50):
                store.add(101, 1)

        threads = [threading.Thread(target=worker, args=(s,)) for s in stores]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert stores[0].items() == {101: 400}
