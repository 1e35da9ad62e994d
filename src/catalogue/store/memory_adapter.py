"""In-process catalogue store for development and testing.

Holds variations and products in dictionaries guarded by a single lock. Stock
updates take the lock for the whole read-validate-write, so the conditional
decrement behaves like a store-level compare-and-swap. Lock acquisition is
bounded by ``STOCK_LOCK_TIMEOUT``; on expiry the call raises ``StoreTimeout``
instead of hanging.
"""

import threading
from contextlib import contextmanager
from dataclasses import replace

from shared.errors import InsufficientStock, ProductNotFound, StoreTimeout, VariationNotFound
from shared.settings import stock_lock_timeout

from catalogue.store.port import Product, Variation, VariationStore


class InMemoryVariationStore(VariationStore):
    """Thread-safe in-memory catalogue store."""

    def __init__(self, lock_timeout: float | None = None) -> None:
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout
        self._variations: dict[str, Variation] = {}
        self._products: dict[str, Product] = {}
        self.calls: list[dict] = []

    @contextmanager
    def _locked(self, operation: str):
        timeout = self._lock_timeout if self._lock_timeout is not None else stock_lock_timeout()
        if not self._lock.acquire(timeout=timeout):
            raise StoreTimeout(operation, timeout)
        try:
            yield
        finally:
            self._lock.release()

    # -------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------
    def add_product(self, product: Product) -> Product:
        with self._locked("add_product"):
            self._products[str(product.product_id)] = product
        return product

    def add_variation(self, variation: Variation) -> Variation:
        if variation.available_quantity < 0:
            raise ValueError("available_quantity cannot be negative")

        with self._locked("add_variation"):
            self._variations[str(variation.variation_id)] = variation
            product = self._products.get(str(variation.product_id))
            if product is not None and variation.variation_id not in product.variation_ids:
                self._products[product.product_id] = replace(
                    product, variation_ids=(*product.variation_ids, variation.variation_id)
                )
        return variation

    def update_prices(self, variation_id: str, unit_price: float, sale_price: float | None = None) -> Variation:
        with self._locked("update_prices"):
            variation = self._require(variation_id)
            updated = replace(variation, unit_price=unit_price, sale_price=sale_price)
            self._variations[updated.variation_id] = updated
        return updated

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def _require(self, variation_id: str) -> Variation:
        variation = self._variations.get(str(variation_id))
        if variation is None:
            raise VariationNotFound(variation_id)
        return variation

    def get_variation(self, variation_id: str) -> Variation:
        with self._locked("get_variation"):
            return self._require(variation_id)

    def get_product(self, product_id: str) -> Product:
        with self._locked("get_product"):
            product = self._products.get(str(product_id))
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def get_product_for_variation(self, variation_id: str) -> Product:
        with self._locked("get_product_for_variation"):
            variation = self._require(variation_id)
            product = self._products.get(str(variation.product_id))
        if product is None:
            raise ProductNotFound(variation.product_id)
        return product

    # -------------------------------------------------------------------
    # Conditional stock updates
    # -------------------------------------------------------------------
    def decrement_available(self, variation_id: str, quantity: int) -> int:
        with self._locked("decrement_available"):
            variation = self._require(variation_id)
            self.calls.append({"method": "decrement_available", "variation_id": str(variation_id), "quantity": quantity})
            if variation.available_quantity < quantity:
                raise InsufficientStock(variation_id, quantity, variation.available_quantity)

            updated = replace(variation, available_quantity=variation.available_quantity - quantity)
            self._variations[updated.variation_id] = updated
            return updated.available_quantity

    def increment_available(self, variation_id: str, quantity: int) -> int:
        with self._locked("increment_available"):
            variation = self._require(variation_id)
            self.calls.append({"method": "increment_available", "variation_id": str(variation_id), "quantity": quantity})
            updated = replace(variation, available_quantity=variation.available_quantity + quantity)
            self._variations[updated.variation_id] = updated
            return updated.available_quantity
