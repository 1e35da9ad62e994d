"""Tests for the in-memory catalogue store and its factory."""

import pytest
from catalogue.store import get_variation_store, reset_variation_store, set_variation_store
from catalogue.store.memory_adapter import InMemoryVariationStore
from catalogue.store.port import Product, Variation
from shared.errors import InsufficientStock, ProductNotFound, VariationNotFound


class TestVariation:
    def test_effective_price_prefers_sale_price(self):
        variation = Variation("v", "p", "SKU", "V", unit_price=100, sale_price=80)
        assert variation.effective_price == 80

    def test_effective_price_falls_back_to_unit_price(self):
        assert Variation("v", "p", "SKU", "V", unit_price=100).effective_price == 100

    def test_zero_sale_price_is_still_a_sale_price(self):
        assert Variation("v", "p", "SKU", "V", unit_price=100, sale_price=0).effective_price == 0


class TestSeeding:
    def test_variation_registered_on_product(self, seeded_store):
        product = seeded_store.get_product("prod-tee")
        assert product.variation_ids == ("var-tee-s", "var-tee-m")

    def test_negative_stock_rejected(self, store):
        with pytest.raises(ValueError):
            store.add_variation(Variation("v", "p", "SKU", "V", unit_price=1, available_quantity=-1))

    def test_update_prices(self, seeded_store):
        updated = seeded_store.update_prices("var-tee-s", unit_price=220_000, sale_price=199_000)
        assert updated.effective_price == 199_000
        assert seeded_store.get_variation("var-tee-s").available_quantity == 10


class TestReads:
    def test_unknown_variation(self, store):
        with pytest.raises(VariationNotFound) as exc:
            store.get_variation("var-404")
        assert exc.value.messages == {"variation_id": ["Variation var-404 not found"]}

    def test_unknown_product(self, store):
        with pytest.raises(ProductNotFound):
            store.get_product("prod-404")

    def test_product_for_variation(self, seeded_store):
        assert seeded_store.get_product_for_variation("var-mug").summary() == {
            "product_id": "prod-mug",
            "name": "Stone Mug",
            "slug": "stone-mug",
        }

    def test_product_for_orphan_variation(self, store):
        store.add_variation(Variation("v", "gone", "SKU", "V", unit_price=1, available_quantity=1))
        with pytest.raises(ProductNotFound):
            store.get_product_for_variation("v")


class TestConditionalUpdates:
    def test_decrement(self, seeded_store):
        assert seeded_store.decrement_available("var-mug", 5) == 0

    def test_decrement_below_zero_fails_without_change(self, seeded_store):
        with pytest.raises(InsufficientStock):
            seeded_store.decrement_available("var-mug", 6)
        assert seeded_store.get_variation("var-mug").available_quantity == 5

    def test_increment(self, seeded_store):
        assert seeded_store.increment_available("var-mug", 2) == 7

    def test_calls_recorded(self, seeded_store):
        seeded_store.decrement_available("var-mug", 1)
        assert seeded_store.calls == [{"method": "decrement_available", "variation_id": "var-mug", "quantity": 1}]


class TestFactory:
    def test_default_is_in_memory(self):
        reset_variation_store()
        assert isinstance(get_variation_store(), InMemoryVariationStore)

    def test_default_is_stable(self):
        assert get_variation_store() is get_variation_store()

    def test_override(self):
        custom = InMemoryVariationStore()
        set_variation_store(custom)
        assert get_variation_store() is custom
