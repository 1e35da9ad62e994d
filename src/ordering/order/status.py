"""Order status updates — command and handler.

Cancelling returns every item's quantity to stock once the cancellation is
committed (see ``stock_release``). Delivering marks the order Paid. Both
apply whether a customer or an admin makes the change; customers may only
touch their own orders.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from shared.errors import OrderNotFound

from ordering.domain import ordering
from ordering.order.order import Actor, Order, OrderStatus
from ordering.order.queries import serialize_order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    actor = String(choices=Actor, default=Actor.CUSTOMER.value)
    customer_id = Identifier()


def load_order_for(actor, order_id, customer_id=None):
    """Load an order the actor may change. Customers only see their own."""
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound(order_id) from None

    if Actor(actor) == Actor.CUSTOMER:
        if customer_id is None:
            raise ValidationError({"customer_id": ["A customer is required to update their order"]})
        if not order.is_owned_by(customer_id):
            raise OrderNotFound(order_id)
    return order


@ordering.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        actor = command.actor or Actor.CUSTOMER.value
        order = load_order_for(actor, command.order_id, command.customer_id)
        previous = order.status

        order.transition_to(command.status, actor=actor)
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order status updated",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
            actor=actor,
        )
        return serialize_order(order, include_customer=False)
