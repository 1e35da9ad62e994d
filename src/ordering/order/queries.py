"""Order reads — single order lookup and the filtered, paged order listing.

Orders are serialized with product info on every line and, where the owner
is known to the customer directory, the owner's public profile. Password
hashes never leave the directory.
"""

import math
from dataclasses import dataclass, field

from catalogue.store import get_variation_store
from identity.directory import get_customer_directory
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from shared.errors import CustomerNotFound, OrderNotFound, ProductNotFound, VariationNotFound

from ordering.order.order import LINEAR_PATH, Order, OrderStatus

SORT_KEYS = ("created_at", "updated_at", "total_amount", "total_price", "order_code")


@dataclass(frozen=True)
class OrderPage:
    orders: list[dict] = field(default_factory=list)
    total_docs: int = 0
    total_pages: int = 0


def _product_info(variation_id):
    try:
        return get_variation_store().get_product_for_variation(variation_id).summary()
    except (VariationNotFound, ProductNotFound):
        return None


def serialize_order(order, include_customer=True) -> dict:
    data = {
        "id": str(order.id),
        "order_code": order.order_code,
        "customer_id": str(order.customer_id),
        "status": order.status,
        "status_history": order.history,
        "payment": {
            "method": order.payment.method,
            "status": order.payment.status,
        },
        "receiver_name": order.receiver_name,
        "phone_number": order.phone_number,
        "shipping_address": order.shipping_address,
        "items": [
            {
                "variation_id": str(item.variation_id),
                "product_id": str(item.product_id),
                "sku": item.sku,
                "title": item.title,
                "price_at_purchase": item.price_at_purchase,
                "quantity": item.quantity,
                "product": _product_info(item.variation_id),
            }
            for item in order.items
        ],
        "total_price": order.total_price,
        "shipping_fee": order.shipping_fee,
        "shipping_fee_percentage": order.shipping_fee_percentage,
        "total_amount": order.total_amount,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }
    if include_customer:
        try:
            data["customer"] = get_customer_directory().get_customer(order.customer_id).public_dict()
        except CustomerNotFound:
            data["customer"] = None
    return data


def get_order(order_id, customer_id=None) -> dict:
    """Return one order. With ``customer_id`` only that customer's order is visible."""
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound(order_id) from None

    if customer_id is not None and not order.is_owned_by(customer_id):
        raise OrderNotFound(order_id)
    return serialize_order(order)


def status_matches(history, status) -> bool:
    """Listing filter on a status history.

    ``Cancelled`` matches any history that contains it. Any other status
    matches a history that is exactly the linear path up to that status.
    """
    target = OrderStatus(status)
    if target == OrderStatus.CANCELLED:
        return OrderStatus.CANCELLED.value in history

    path = [s.value for s in LINEAR_PATH]
    return history == path[: path.index(target.value) + 1]


def list_orders(
    customer_id=None,
    order_code=None,
    status=None,
    sort_by="created_at",
    descending=True,
    page=1,
    limit=10,
) -> OrderPage:
    """Filtered, sorted, paged order listing.

    ``customer_id`` restricts the listing to one customer's orders; leave it
    out for the admin view. ``order_code`` is a case-insensitive substring.
    """
    if sort_by not in SORT_KEYS:
        raise ValidationError({"sort_by": [f"Cannot sort by {sort_by}"]})
    if page < 1 or limit < 1:
        raise ValidationError({"page": ["Page and limit must be positive"]})
    if status is not None and status not in {s.value for s in OrderStatus}:
        raise ValidationError({"status": [f"Unknown order status {status}"]})

    filters = {"customer_id": str(customer_id)} if customer_id is not None else {}
    orders = current_domain.repository_for(Order).matching(**filters)

    if order_code:
        needle = order_code.lower()
        orders = (o for o in orders if needle in o.order_code.lower())
    if status is not None:
        orders = (o for o in orders if status_matches(o.history, status))

    ordered = sorted(orders, key=lambda o: getattr(o, sort_by), reverse=descending)
    total_docs = len(ordered)
    start = (page - 1) * limit

    return OrderPage(
        orders=[serialize_order(o) for o in ordered[start : start + limit]],
        total_docs=total_docs,
        total_pages=math.ceil(total_docs / limit),
    )
