"""Catalogue store port (abstract interface).

The catalogue subsystem owns variations and products; the ordering engine
only reads them and mutates ``available_quantity`` through the two
conditional updates below. Adapters must make ``decrement_available`` and
``increment_available`` atomic at the store level: a decrement either fully
applies or fails with ``InsufficientStock``, and concurrent calls can never
jointly drive a quantity below zero.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Variation:
    """A purchasable SKU of a product with its own price and stock count."""

    variation_id: str
    product_id: str
    sku: str
    name: str
    unit_price: float
    sale_price: float | None = None
    available_quantity: int = 0

    @property
    def effective_price(self) -> float:
        return self.sale_price if self.sale_price is not None else self.unit_price


@dataclass(frozen=True)
class Product:
    product_id: str
    name: str
    slug: str = ""
    variation_ids: tuple[str, ...] = field(default_factory=tuple)

    def summary(self) -> dict:
        """Product info attached to order lines (without variations)."""
        return {"product_id": self.product_id, "name": self.name, "slug": self.slug}


class VariationStore(ABC):
    """Abstract catalogue store interface."""

    @abstractmethod
    def get_variation(self, variation_id: str) -> Variation:
        """Return the live variation or raise ``VariationNotFound``."""
        ...

    @abstractmethod
    def get_product(self, product_id: str) -> Product:
        """Return the product or raise ``ProductNotFound``."""
        ...

    @abstractmethod
    def get_product_for_variation(self, variation_id: str) -> Product:
        """Return the product owning the variation or raise ``ProductNotFound``."""
        ...

    @abstractmethod
    def decrement_available(self, variation_id: str, quantity: int) -> int:
        """Atomically subtract ``quantity`` if enough stock remains.

        Returns the new available quantity. Raises ``InsufficientStock`` and
        leaves the quantity unchanged otherwise.
        """
        ...

    @abstractmethod
    def increment_available(self, variation_id: str, quantity: int) -> int:
        """Atomically add ``quantity``. Returns the new available quantity."""
        ...
