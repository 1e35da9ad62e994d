"""Returns a cancelled order's items to stock.

Runs as an OrderCancelled event handler, so stock moves only after the
cancellation has been committed. A cancellation that loses a concurrent
write, or whose commit fails, raises no event and releases nothing.
"""

import json

import structlog
from inventory.ledger import InventoryLedger, Reservation
from protean import handle

from ordering.domain import ordering
from ordering.order.events import OrderCancelled
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.event_handler(part_of=Order)
class CancelledOrderStockHandler:
    @handle(OrderCancelled)
    def release_cancelled_items(self, event: OrderCancelled) -> None:
        reservations = [
            Reservation(variation_id=line["variation_id"], quantity=line["quantity"]) for line in json.loads(event.items)
        ]
        logger.info(
            "Returning cancelled order's items to stock",
            order_id=str(event.order_id),
            order_code=event.order_code,
            lines=len(reservations),
        )
        InventoryLedger().release_all(reservations)
