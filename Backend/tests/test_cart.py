"""
Cart Tests

Tests for:
1. Lines are isolated per store slug within one session cart
2. Adding an existing (product, variant) line merges quantities
3. Quantity updates below 1 are rejected
4. clear(slug) vs clear_all()
5. Persistence through MemoryCartStorage and JsonFileCartStorage

Run with: pytest tests/test_cart.py -v
"""

import json
import logging
from decimal import Decimal

import pytest

from storefront.cart import CartLineItem, CartStore, JsonFileCartStorage, MemoryCartStorage


def _line(slug="bombay", product_id="saree-1", variant_id=None, quantity=1, price="2499.00", name="Banarasi Saree"):
    return CartLineItem(
        product_id=product_id,
        variant_id=variant_id,
        tenant_slug=slug,
        name=name,
        unit_price=Decimal(price),
        quantity=quantity,
    )


@pytest.fixture
def cart():
    return CartStore()


# ────────────────────────────────────────────────────────────────
# Line items
# ────────────────────────────────────────────────────────────────

class TestCartLineItem:

    def test_slug_is_normalized(self):
        assert _line(slug=" Bombay ").tenant_slug == "bombay"

    def test_line_total(self):
        assert _line(quantity=3, price="10.50").line_total == Decimal("31.50")

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValueError):
            _line(quantity=quantity)

    def test_negative_price_is_rejected(self):
        with pytest.raises(ValueError):
            _line(price="-1")

    def test_empty_slug_is_rejected(self):
        with pytest.raises(ValueError):
            _line(slug="")

    def test_key_includes_store(self):
        assert _line(slug="a").key != _line(slug="b").key


# ────────────────────────────────────────────────────────────────
# Isolation
# ────────────────────────────────────────────────────────────────

class TestCartIsolation:

    def test_stores_never_see_each_other(self, cart):
        cart.add_item(_line(slug="bombay", product_id="saree-1"))
        cart.add_item(_line(slug="kathmandu", product_id="thangka-1", price="99.00"))

        assert [line.product_id for line in cart.items_for("bombay")] == ["saree-1"]
        assert [line.product_id for line in cart.items_for("kathmandu")] == ["thangka-1"]
        assert cart.items_for("elsewhere") == ()

    def test_same_product_in_two_stores_is_two_lines(self, cart):
        cart.add_item(_line(slug="bombay", quantity=2))
        cart.add_item(_line(slug="kathmandu", quantity=5))

        assert cart.count_for("bombay") == 2
        assert cart.count_for("kathmandu") == 5

    def test_totals_are_per_store(self, cart):
        cart.add_item(_line(slug="bombay", quantity=2, price="100"))
        cart.add_item(_line(slug="kathmandu", price="7"))

        assert cart.total_for("bombay") == Decimal("200")
        assert cart.total_for("kathmandu") == Decimal("7")
        assert cart.total_for("elsewhere") == Decimal("0")

    def test_reads_normalize_slug(self, cart):
        cart.add_item(_line(slug="bombay"))
        assert len(cart.items_for("BOMBAY")) == 1

    def test_tenants(self, cart):
        cart.add_item(_line(slug="bombay"))
        cart.add_item(_line(slug="kathmandu"))
        assert set(cart.tenants()) == {"bombay", "kathmandu"}


# ────────────────────────────────────────────────────────────────
# Mutations
# ────────────────────────────────────────────────────────────────

class TestCartMutations:

    def test_add_merges_quantity(self, cart):
        cart.add_item(_line(quantity=2))
        merged = cart.add_item(_line(quantity=3))

        assert merged.quantity == 5
        assert len(cart.items_for("bombay")) == 1

    def test_different_variants_are_separate_lines(self, cart):
        cart.add_item(_line(variant_id="red"))
        cart.add_item(_line(variant_id="blue"))
        cart.add_item(_line(variant_id=None))
        assert len(cart.items_for("bombay")) == 3

    def test_update_quantity(self, cart):
        cart.add_item(_line(variant_id="red"))
        updated = cart.update_quantity("bombay", "saree-1", "red", 4)

        assert updated.quantity == 4
        assert cart.count_for("bombay") == 4

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_update_below_one_is_rejected_and_changes_nothing(self, cart, quantity):
        cart.add_item(_line(quantity=2))

        with pytest.raises(ValueError):
            cart.update_quantity("bombay", "saree-1", None, quantity)

        assert cart.count_for("bombay") == 2

    def test_update_missing_line(self, cart):
        assert cart.update_quantity("bombay", "saree-1", None, 2) is None

    def test_update_does_not_cross_stores(self, cart):
        cart.add_item(_line(slug="kathmandu"))
        assert cart.update_quantity("bombay", "saree-1", None, 9) is None
        assert cart.count_for("kathmandu") == 1

    def test_remove_item(self, cart):
        cart.add_item(_line(product_id="a"))
        cart.add_item(_line(product_id="b"))

        assert cart.remove_item("bombay", "a", None) is True
        assert [line.product_id for line in cart.items_for("bombay")] == ["b"]
        assert cart.remove_item("bombay", "a", None) is False

    def test_removing_last_line_drops_the_store(self, cart):
        cart.add_item(_line())
        cart.remove_item("bombay", "saree-1", None)
        assert cart.tenants() == ()

    def test_clear_only_empties_one_store(self, cart):
        cart.add_item(_line(slug="bombay", product_id="a"))
        cart.add_item(_line(slug="bombay", product_id="b"))
        cart.add_item(_line(slug="kathmandu"))

        assert cart.clear("bombay") == 2
        assert cart.items_for("bombay") == ()
        assert cart.count_for("kathmandu") == 1

    def test_clear_all(self, cart):
        cart.add_item(_line(slug="bombay"))
        cart.add_item(_line(slug="kathmandu", quantity=2))

        assert cart.clear_all() == 2
        assert cart.tenants() == ()

    def test_checkout_summary(self, cart):
        cart.add_item(_line(quantity=2, price="100"))
        cart.add_item(_line(product_id="dupatta", price="50"))
        cart.add_item(_line(slug="kathmandu", price="999"))

        summary = cart.checkout_for("bombay")

        assert summary.tenant_slug == "bombay"
        assert summary.item_count == 3
        assert summary.total == Decimal("250")
        assert not summary.is_empty
        assert cart.checkout_for("elsewhere").is_empty


# ────────────────────────────────────────────────────────────────
# TenantCart view
# ────────────────────────────────────────────────────────────────

class TestTenantCart:

    def test_view_is_bound_to_its_store(self, cart):
        bombay = cart.for_tenant("bombay")
        kathmandu = cart.for_tenant("kathmandu")

        bombay.add_item("saree-1", "Banarasi Saree", "2499.00", quantity=2)
        kathmandu.add_item("thangka-1", "Thangka", "99")

        assert bombay.item_count == 2
        assert bombay.total == Decimal("4998.00")
        assert [line.product_id for line in kathmandu.items] == ["thangka-1"]

    def test_view_mutations(self, cart):
        view = cart.for_tenant("bombay")
        view.add_item("saree-1", "Banarasi Saree", "10", variant_id="red", variant_name="Red")

        assert view.update_quantity("saree-1", "red", 3).quantity == 3
        assert view.checkout().total == Decimal("30")
        assert view.remove_item("saree-1", "red") is True
        assert view.items == ()

    def test_view_clear(self, cart):
        cart.add_item(_line(slug="kathmandu"))
        view = cart.for_tenant("bombay")
        view.add_item("saree-1", "Banarasi Saree", "10")

        assert view.clear() == 1
        assert cart.count_for("kathmandu") == 1


# ────────────────────────────────────────────────────────────────
# Persistence
# ────────────────────────────────────────────────────────────────

class TestCartPersistence:

    def test_memory_storage_round_trip(self):
        storage = MemoryCartStorage()
        CartStore(storage, key="s1").add_item(_line(quantity=2, variant_id="red"))

        reloaded = CartStore(storage, key="s1")

        [line] = reloaded.items_for("bombay")
        assert line.quantity == 2
        assert line.variant_id == "red"
        assert line.unit_price == Decimal("2499.00")

    def test_keys_are_separate_carts(self):
        storage = MemoryCartStorage()
        CartStore(storage, key="s1").add_item(_line())
        assert CartStore(storage, key="s2").tenants() == ()

    def test_json_file_document_shape(self, tmp_path):
        storage = JsonFileCartStorage(tmp_path)
        cart = CartStore(storage, key="session-1")
        cart.add_item(_line(slug="bombay"))
        cart.add_item(_line(slug="kathmandu", product_id="thangka-1"))

        document = json.loads((tmp_path / "session-1.json").read_text())

        assert document["version"] == 1
        assert set(document["tenants"]) == {"bombay", "kathmandu"}
        assert document["tenants"]["bombay"][0]["unit_price"] == "2499.00"

    def test_json_file_survives_restart(self, tmp_path):
        CartStore(JsonFileCartStorage(tmp_path), key="session-1").add_item(_line(quantity=3))
        reloaded = CartStore(JsonFileCartStorage(tmp_path), key="session-1")
        assert reloaded.count_for("bombay") == 3

    def test_clear_is_persisted(self, tmp_path):
        storage = JsonFileCartStorage(tmp_path)
        cart = CartStore(storage, key="session-1")
        cart.add_item(_line(slug="bombay"))
        cart.add_item(_line(slug="kathmandu"))
        cart.clear("bombay")

        assert CartStore(storage, key="session-1").tenants() == ("kathmandu",)

    def test_flat_list_document_is_partitioned(self):
        storage = MemoryCartStorage()
        storage.save("legacy", [
            _line(slug="bombay", quantity=1).to_dict(),
            _line(slug="bombay", quantity=2).to_dict(),
            _line(slug="kathmandu").to_dict(),
        ])

        cart = CartStore(storage, key="legacy")

        assert cart.count_for("bombay") == 3
        assert len(cart.items_for("bombay")) == 1
        assert cart.count_for("kathmandu") == 1

    def test_corrupt_file_starts_empty(self, tmp_path, caplog):
        (tmp_path / "session-1.json").write_text("{not json")

        with caplog.at_level(logging.WARNING, logger="storefront.cart.storage"):
            cart = CartStore(JsonFileCartStorage(tmp_path), key="session-1")

        assert cart.tenants() == ()
        assert "Unreadable cart file" in caplog.text

    def test_malformed_document_starts_empty(self, caplog):
        storage = MemoryCartStorage()
        storage.save("bad", {"version": 1, "tenants": {"bombay": [{"name": "no product id"}]}})

        with caplog.at_level(logging.WARNING, logger="storefront.cart.store"):
            cart = CartStore(storage, key="bad")

        assert cart.tenants() == ()
        assert "Discarding unreadable cart" in caplog.text

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "x" * 200])
    def test_invalid_file_keys_are_rejected(self, tmp_path, key):
        with pytest.raises(ValueError):
            JsonFileCartStorage(tmp_path).load(key)
