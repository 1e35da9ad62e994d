"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer

from ordering.domain import ordering


@ordering.event(part_of="ShoppingCart")
class CartItemAdded:
    """A variation was added to the cart, or its quantity increased by an add."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    variation_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart line was set or decremented."""

    __version__ = 1

    cart_id = Identifier(required=True)
    variation_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A line was removed from the cart (explicitly or by decrementing to zero)."""

    __version__ = 1

    cart_id = Identifier(required=True)
    variation_id = Identifier(required=True)


@ordering.event(part_of="ShoppingCart")
class CartCleared:
    """Every line was removed from the cart, e.g. after checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)
