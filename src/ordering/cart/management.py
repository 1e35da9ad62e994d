"""Cart management — lookup-or-create, clearing, and command dispatch."""

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError
from protean.fields import Identifier
from protean.utils.globals import current_domain
from shared.errors import CartConflict

from ordering.cart.cart import ShoppingCart
from ordering.cart.pricing import price_snapshot
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


def get_or_create_cart(customer_id):
    """Return the customer's cart, creating and persisting an empty one if absent."""
    repo = current_domain.repository_for(ShoppingCart)
    cart = repo.for_customer(customer_id)
    if cart is None:
        cart = repo.add(ShoppingCart.create(customer_id=customer_id))
        logger.info("Cart created", cart_id=str(cart.id), customer_id=str(customer_id))
    return cart


def process_cart_command(command):
    """Process a cart command and return its refreshed ``CartSnapshot``.

    A write that lost to a concurrent change of the same cart raises
    ``CartConflict``; none of the command's changes are kept.
    """
    try:
        return current_domain.process(command, asynchronous=False)
    except ExpectedVersionError as exc:
        logger.warning(
            "Cart changed concurrently",
            customer_id=str(command.customer_id),
            command=command.__class__.__name__,
        )
        raise CartConflict(command.customer_id) from exc


@ordering.command(part_of="ShoppingCart")
class ClearCart:
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        cart = get_or_create_cart(command.customer_id)
        cart.clear()
        current_domain.repository_for(ShoppingCart).add(cart)
        return price_snapshot(command.customer_id)
