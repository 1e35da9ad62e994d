"""Gateway payment confirmation — command and handler.

When a customer returns from the payment gateway, the order is looked up by
its code and marked Paid. The order's status is left alone.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from shared.errors import OrderNotFound

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.queries import serialize_order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class RecordOrderPayment:
    order_code = String(required=True, max_length=32)
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class RecordOrderPaymentHandler:
    @handle(RecordOrderPayment)
    def record_order_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find_by_code(command.order_code)
        if order is None or not order.is_owned_by(command.customer_id):
            raise OrderNotFound(command.order_code)

        order.mark_paid()
        repo.add(order)
        logger.info("Order payment recorded", order_id=str(order.id), order_code=order.order_code)
        return serialize_order(order, include_customer=False)
