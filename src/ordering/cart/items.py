"""Cart item management — commands and handler.

Every handler returns the refreshed ``CartSnapshot``.
"""

from catalogue.store import get_variation_store
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.management import get_or_create_cart
from ordering.cart.pricing import price_snapshot
from ordering.domain import ordering


@ordering.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    variation_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="ShoppingCart")
class SetCartItemQuantity:
    customer_id = Identifier(required=True)
    variation_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="ShoppingCart")
class DecrementCartItem:
    customer_id = Identifier(required=True)
    variation_id = Identifier(required=True)


@ordering.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    variation_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        variation = get_variation_store().get_variation(command.variation_id)
        cart = get_or_create_cart(command.customer_id)
        cart.add_item(
            variation_id=command.variation_id,
            quantity=command.quantity,
            available_quantity=variation.available_quantity,
        )
        current_domain.repository_for(ShoppingCart).add(cart)
        return price_snapshot(command.customer_id)

    @handle(SetCartItemQuantity)
    def set_cart_item_quantity(self, command):
        variation = get_variation_store().get_variation(command.variation_id)
        cart = get_or_create_cart(command.customer_id)
        cart.set_item_quantity(
            variation_id=command.variation_id,
            quantity=command.quantity,
            available_quantity=variation.available_quantity,
        )
        current_domain.repository_for(ShoppingCart).add(cart)
        return price_snapshot(command.customer_id)

    @handle(DecrementCartItem)
    def decrement_cart_item(self, command):
        cart = get_or_create_cart(command.customer_id)
        cart.decrement_item(command.variation_id)
        current_domain.repository_for(ShoppingCart).add(cart)
        return price_snapshot(command.customer_id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = get_or_create_cart(command.customer_id)
        cart.remove_item(command.variation_id)
        current_domain.repository_for(ShoppingCart).add(cart)
        return price_snapshot(command.customer_id)
