"""
Tests for cart models and the guest cart store
"""

import json
from decimal import Decimal

import pytest

from storefront.cart import Cart, CartLine, LocalCartStore, ProductSnapshot
from storefront.db import MemoryStorage


class TestCartLine:
    """Tests for CartLine dataclass."""

    def test_line_total(self):
        """Test line total is unit price times quantity."""
        line = CartLine(line_id="guest-1-1", product_id=1, quantity=3, unit_price="19.99")

        assert line.unit_price == Decimal("19.99")
        assert line.line_total == Decimal("59.97")

    def test_name_falls_back_to_product_id(self):
        line = CartLine(line_id="guest-1-7", product_id=7, quantity=1, unit_price=10)

        assert line.name == "7"
        assert line.stock is None

    def test_to_dict(self, product_a):
        """Test serialization to dict."""
        line = CartLine(
            line_id="guest-1-1",
            product_id=1,
            quantity=2,
            unit_price=Decimal("50"),
            product=ProductSnapshot.from_product(product_a),
        )

        data = line.to_dict()

        assert data["lineId"] == "guest-1-1"
        assert data["productId"] == 1
        assert data["unitPrice"] == "50"
        assert data["product"]["name"] == "Amul Butter"
        assert data["product"]["stock"] == 10

    def test_from_dict_legacy_shape(self):
        """Test reading a line stored without lineId/unitPrice."""
        line = CartLine.from_dict(
            {
                "id": "guest-1-1",
                "productId": 1,
                "quantity": 2,
                "product": {"id": 1, "name": "Amul Butter", "price": 50},
            }
        )

        assert line.line_id == "guest-1-1"
        assert line.unit_price == Decimal("50")
        assert line.name == "Amul Butter"

    @pytest.mark.parametrize("quantity", [0, -1, "2", True, None])
    def test_from_dict_rejects_bad_quantity(self, quantity):
        with pytest.raises(ValueError):
            CartLine.from_dict(
                {"lineId": "guest-1-1", "productId": 1, "quantity": quantity, "unitPrice": "5"}
            )


class TestCart:
    """Tests for Cart dataclass."""

    def test_create_empty_cart(self):
        """Test creating empty cart."""
        cart = Cart.empty()

        assert cart.items == []
        assert cart.total_amount == Decimal("0")
        assert cart.total_items == 0
        assert cart.is_empty
        assert cart.subject is None

    def test_recalculate_total(self):
        cart = Cart(
            items=[
                CartLine(line_id="a", product_id=1, quantity=2, unit_price=50),
                CartLine(line_id="b", product_id=2, quantity=1, unit_price=30),
            ],
            total_amount=999,
        )

        assert cart.recalculate_total() == Decimal("130")
        assert cart.total_items == 3
        assert cart.line_count == 2

    def test_find_helpers(self):
        cart = Cart(items=[CartLine(line_id="a", product_id=1, quantity=2, unit_price=50)])

        assert cart.find_line("a").product_id == 1
        assert cart.find_line("missing") is None
        assert cart.find_product(1).line_id == "a"
        assert cart.quantity_of(1) == 2
        assert cart.quantity_of(2) == 0

    def test_copy_is_independent(self):
        cart = Cart(items=[CartLine(line_id="a", product_id=1, quantity=2, unit_price=50)])
        clone = cart.copy()

        clone.items[0].quantity = 9

        assert cart.items[0].quantity == 2

    def test_cart_serialization(self, product_a):
        """Test cart serialization and deserialization."""
        cart = Cart(
            items=[
                CartLine(
                    line_id="guest-4-1",
                    product_id=1,
                    quantity=2,
                    unit_price=Decimal("50"),
                    product=ProductSnapshot.from_product(product_a),
                )
            ],
            next_line_seq=5,
        )
        cart.recalculate_total()

        data = cart.to_dict()
        assert data["totalAmount"] == "100"
        assert data["lineSeq"] == 5

        restored = Cart.from_dict(json.loads(json.dumps(data)))

        assert len(restored.items) == 1
        assert restored.items[0].line_id == "guest-4-1"
        assert restored.items[0].product.image_url == "/img/butter.png"
        assert restored.total_amount == Decimal("100")
        assert restored.next_line_seq == 5

    def test_from_dict_recomputes_total(self):
        """Test a stored total that disagrees with the lines is ignored."""
        cart = Cart.from_dict(
            {
                "items": [{"lineId": "guest-1-1", "productId": 1, "quantity": 2, "unitPrice": "50"}],
                "totalAmount": "12345",
            }
        )

        assert cart.total_amount == Decimal("100")

    def test_from_dict_derives_line_seq(self):
        """Test carts stored without lineSeq never reuse existing line ids."""
        cart = Cart.from_dict(
            {
                "items": [
                    {"lineId": "guest-7-1", "productId": 1, "quantity": 1, "unitPrice": "50"},
                    {"lineId": "guest-2-2", "productId": 2, "quantity": 1, "unitPrice": "30"},
                ]
            }
        )

        assert cart.next_line_seq == 8

    def test_from_dict_rejects_duplicate_products(self):
        with pytest.raises(ValueError):
            Cart.from_dict(
                {
                    "items": [
                        {"lineId": "a", "productId": 1, "quantity": 1, "unitPrice": "50"},
                        {"lineId": "b", "productId": 1, "quantity": 1, "unitPrice": "50"},
                    ]
                }
            )


class TestLocalCartStore:
    """Tests for the guest cart store."""

    def test_read_missing_key_is_empty(self, local_store):
        """Test reading with no stored cart twice gives the same empty cart."""
        first = local_store.read()
        second = local_store.read()

        assert first.items == [] and first.total_amount == Decimal("0")
        assert second.items == [] and second.total_amount == Decimal("0")

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            "[]",
            '{"items": "nope"}',
            '{"items": [{"lineId": 1}]}',
            "null",
            "[" * 200000,
            '{"items": [{"lineId": "guest-1-1", "productId": 1, "quantity": 2, "unitPrice": "9e999999"}]}',
        ],
        ids=["bad-json", "list", "items-not-list", "line-missing-fields", "null", "deep-nesting", "price-overflow"],
    )
    def test_read_corrupt_value_is_empty(self, raw):
        store = LocalCartStore(MemoryStorage({"guestCart": raw}))

        assert store.read().items == []
        assert store.read().total_amount == Decimal("0")

    def test_add_same_product_twice_bumps_one_line(self, local_store, product_a):
        local_store.add_line(product_a, 2)
        cart = local_store.add_line(product_a, 3)

        assert cart.line_count == 1
        assert cart.items[0].quantity == 5
        assert cart.total_amount == Decimal("250")

    def test_add_snapshots_product(self, local_store, product_a):
        cart = local_store.add_line(product_a)

        line = cart.items[0]
        assert line.line_id == "guest-1-1"
        assert line.unit_price == Decimal("50")
        assert line.product.name == "Amul Butter"
        assert line.stock == 10

    def test_add_ignores_non_positive_quantity(self, local_store, product_a):
        cart = local_store.add_line(product_a, 0)

        assert cart.is_empty
        assert local_store.storage.get("guestCart") is None

    def test_total_tracks_every_change(self, local_store, product_a, product_b):
        local_store.add_line(product_a, 2)
        cart = local_store.add_line(product_b, 1)
        assert cart.total_amount == Decimal("130")

        cart = local_store.remove_line(cart.find_product(product_a.id).line_id)
        assert cart.total_amount == Decimal("30")
        assert local_store.read().total_amount == Decimal("30")

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_update_to_zero_or_less_removes_line(self, local_store, product_a, product_b, quantity):
        local_store.add_line(product_a, 2)
        cart = local_store.add_line(product_b, 1)
        line_id = cart.find_product(product_a.id).line_id

        cart = local_store.update_line(line_id, quantity)

        assert cart.find_line(line_id) is None
        assert cart.total_amount == Decimal("30")

    def test_update_sets_quantity(self, local_store, product_a):
        cart = local_store.add_line(product_a, 1)

        cart = local_store.update_line(cart.items[0].line_id, 4)

        assert cart.items[0].quantity == 4
        assert cart.total_amount == Decimal("200")

    def test_unknown_line_is_noop(self, local_store, product_a):
        before = local_store.add_line(product_a, 2)

        updated = local_store.update_line("nonexistent", 5)
        removed = local_store.remove_line("nonexistent")

        assert updated.items == before.items
        assert updated.total_amount == before.total_amount
        assert removed.items == before.items
        assert removed.total_amount == Decimal("100")

    def test_line_ids_not_reused_after_removal(self, local_store, product_a, product_b):
        cart = local_store.add_line(product_a)
        first_id = cart.items[0].line_id
        local_store.remove_line(first_id)

        cart = local_store.add_line(product_a)

        assert cart.items[0].line_id != first_id

    def test_line_ids_not_reused_after_clear(self, local_store, product_a):
        first = local_store.add_line(product_a).items[0].line_id
        local_store.clear()

        second = local_store.add_line(product_a).items[0].line_id

        assert second != first

    def test_line_ids_not_reused_by_new_store_after_clear(self, storage, product_a):
        first = LocalCartStore(storage).add_line(product_a).items[0].line_id
        LocalCartStore(storage).clear()

        second = LocalCartStore(storage).add_line(product_a).items[0].line_id

        assert second != first

    def test_unreadable_line_counter_is_ignored(self, product_a):
        store = LocalCartStore(MemoryStorage({"guestCart:seq": "abc"}))

        cart = store.add_line(product_a)

        assert cart.items[0].line_id == "guest-1-1"
        assert store.storage.get("guestCart:seq") == "2"

    def test_corrupt_cart_then_add_works(self, product_a):
        store = LocalCartStore(MemoryStorage({"guestCart": "[" * 200000}))

        cart = store.add_line(product_a, 1)

        assert cart.total_amount == Decimal("50")
        assert store.read().total_amount == Decimal("50")

    def test_clear_removes_key(self, local_store, product_a):
        local_store.add_line(product_a)

        local_store.clear()

        assert local_store.storage.get("guestCart") is None
        assert local_store.read().is_empty

    def test_storage_failure_degrades(self, failing_storage, product_a):
        """Test a storage that always raises never breaks the store."""
        store = LocalCartStore(failing_storage)

        assert store.read().is_empty
        cart = store.add_line(product_a, 2)
        assert cart.total_amount == Decimal("100")
        store.clear()

    def test_persists_camel_case_shape(self, local_store, product_a):
        local_store.add_line(product_a, 2)

        data = json.loads(local_store.storage.get("guestCart"))

        assert data["totalAmount"] == "100"
        assert data["items"][0]["productId"] == 1
        assert data["items"][0]["quantity"] == 2

    def test_custom_key(self, storage, product_a):
        store = LocalCartStore(storage, key="kioskCart")

        store.add_line(product_a)

        assert storage.get("kioskCart") is not None
        assert storage.get("guestCart") is None
