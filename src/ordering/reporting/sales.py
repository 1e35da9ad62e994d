"""Sales reports over committed orders.

Read-only: nothing here touches stock or order state. Only Delivered orders
count as sales. Date bounds are inclusive; naive datetimes are taken as
local time, and a plain date covers its whole local day.
"""

import math
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta

from catalogue.store import get_variation_store
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from shared.errors import ProductNotFound, VariationNotFound

from ordering.order.order import Order, OrderStatus


@dataclass(frozen=True)
class VariationSales:
    variation_id: str
    sku: str
    variation_name: str
    product_id: str
    product_name: str
    total_quantity: int
    price_at_purchase: float
    revenue: float


@dataclass(frozen=True)
class VariationSalesPage:
    items: list[VariationSales] = field(default_factory=list)
    total_docs: int = 0
    total_pages: int = 0


def _aware(value, day_end=False):
    """Local-aware datetime for ``value``.

    A plain ``date`` stands for the whole local day: its first instant, or
    its last when ``day_end`` is set.
    """
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.max if day_end else time.min)
    return value if value.tzinfo is not None else value.astimezone()


def _in_range(created_at, start, end):
    created_at = _aware(created_at)
    if start is not None and created_at < start:
        return False
    if end is not None and created_at > end:
        return False
    return True


def _delivered_orders(start=None, end=None):
    start, end = _aware(start), _aware(end, day_end=True)
    orders = current_domain.repository_for(Order).matching(status=OrderStatus.DELIVERED.value)
    return (o for o in orders if _in_range(o.created_at, start, end))


def total_revenue(start=None, end=None) -> float:
    """Sum of ``total_price`` over Delivered orders created in ``[start, end]``."""
    return sum(order.total_price for order in _delivered_orders(start, end))


def orders_today(now=None) -> int:
    """Orders of any status created during ``now``'s local calendar day."""
    now = _aware(now) if now is not None else datetime.now().astimezone()
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=1)

    orders = current_domain.repository_for(Order).matching()
    return sum(1 for o in orders if start <= _aware(o.created_at) < end)


def top_variation_sales(page=1, limit=5, start=None, end=None) -> VariationSalesPage:
    """Best-selling variations by units sold in Delivered orders.

    Variations or products no longer in the catalogue are left out before
    counting. Ties on quantity are broken by variation id.
    """
    if page < 1 or limit < 1:
        raise ValidationError({"page": ["Page and limit must be positive"]})

    groups = OrderedDict()
    for order in _delivered_orders(start, end):
        for item in order.items:
            key = str(item.variation_id)
            group = groups.setdefault(
                key, {"quantity": 0, "revenue": 0.0, "price_at_purchase": item.price_at_purchase}
            )
            group["quantity"] += item.quantity
            group["revenue"] += item.sub_total

    store = get_variation_store()
    rows = []
    for variation_id, group in groups.items():
        try:
            variation = store.get_variation(variation_id)
            product = store.get_product_for_variation(variation_id)
        except (VariationNotFound, ProductNotFound):
            continue
        rows.append(
            VariationSales(
                variation_id=variation_id,
                sku=variation.sku,
                variation_name=variation.name,
                product_id=product.product_id,
                product_name=product.name,
                total_quantity=group["quantity"],
                price_at_purchase=group["price_at_purchase"],
                revenue=group["revenue"],
            )
        )

    rows.sort(key=lambda row: (-row.total_quantity, row.variation_id))
    total_docs = len(rows)
    offset = (page - 1) * limit

    return VariationSalesPage(
        items=rows[offset : offset + limit],
        total_docs=total_docs,
        total_pages=math.ceil(total_docs / limit),
    )
