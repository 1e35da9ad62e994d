"""Shopping Cart aggregate — one working set of (variation, quantity) lines per customer.

The cart never reserves stock. Quantities are checked against the variation's
live ``available_quantity`` when a line is added or set, but stock can still
be sold out from under the cart before checkout, which re-validates.

Every mutation is persisted as a single optimistic write. Protean checks the
aggregate ``_version`` at commit, so a stale cart never overwrites a newer one.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer
from shared.errors import ItemNotFound, QuantityExceedsStock

from ordering.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from ordering.domain import ordering


def _validate_quantity(quantity):
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationError({"quantity": ["Quantity must be a positive integer"]})


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    variation_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@ordering.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------
    def find_item(self, variation_id):
        return next((i for i in self.items if str(i.variation_id) == str(variation_id)), None)

    def _require_item(self, variation_id):
        item = self.find_item(variation_id)
        if item is None:
            raise ItemNotFound(variation_id)
        return item

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, variation_id, quantity, available_quantity):
        """Add units of a variation, merging into an existing line.

        The resulting line quantity must not exceed ``available_quantity``.
        """
        _validate_quantity(quantity)

        existing = self.find_item(variation_id)
        new_quantity = quantity + (existing.quantity if existing else 0)
        if new_quantity > available_quantity:
            raise QuantityExceedsStock(variation_id, new_quantity, available_quantity)

        now = datetime.now(UTC)
        if existing:
            existing.quantity = new_quantity
        else:
            self.add_items(CartItem(variation_id=variation_id, quantity=quantity, added_at=now))
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                variation_id=str(variation_id),
                quantity=quantity,
                new_quantity=new_quantity,
            )
        )

    def set_item_quantity(self, variation_id, quantity, available_quantity):
        """Overwrite the quantity of an existing line."""
        _validate_quantity(quantity)
        item = self._require_item(variation_id)
        if quantity > available_quantity:
            raise QuantityExceedsStock(variation_id, quantity, available_quantity)

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                variation_id=str(variation_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def decrement_item(self, variation_id):
        """Take one unit off a line; the last unit removes the line."""
        item = self._require_item(variation_id)
        if item.quantity <= 1:
            self.remove_item(variation_id)
            return

        previous_quantity = item.quantity
        item.quantity = previous_quantity - 1
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                variation_id=str(variation_id),
                previous_quantity=previous_quantity,
                new_quantity=item.quantity,
            )
        )

    def remove_item(self, variation_id):
        item = self._require_item(variation_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                variation_id=str(variation_id),
            )
        )

    def clear(self):
        """Empty the cart. The cart itself is kept for the customer."""
        removed = list(self.items)
        for item in removed:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                items_removed=len(removed),
            )
        )

    def lines(self):
        """``(variation_id, quantity)`` pairs in insertion order."""
        return [(str(item.variation_id), item.quantity) for item in self.items]
