"""Cart price snapshot — the cart priced against live catalogue data.

The snapshot is rebuilt on every call and never stored. Each line is clamped
to the variation's current ``available_quantity``; lines that clamp to zero,
or whose variation has left the catalogue, are dropped from the snapshot
while the stored cart keeps them.
"""

from dataclasses import asdict, dataclass, field

from catalogue.store import get_variation_store
from protean.utils.globals import current_domain
from shared.errors import ProductNotFound, VariationNotFound

from ordering.cart.cart import ShoppingCart
from ordering.cart.shipping import calculate_shipping_fee


@dataclass(frozen=True)
class CartLine:
    variation_id: str
    product_id: str
    product_name: str
    product_slug: str
    sku: str
    name: str
    unit_price: float
    sale_price: float | None
    effective_price: float
    quantity: int
    cart_quantity: int
    available_quantity: int
    sub_total: float


@dataclass(frozen=True)
class CartSnapshot:
    customer_id: str
    items: list[CartLine] = field(default_factory=list)
    total_price: float = 0
    shipping_fee: float = 0
    shipping_fee_percentage: float = 0
    total_amount: float = 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> dict:
        return asdict(self)


def price_lines(lines, store=None) -> list[CartLine]:
    """Price ``(variation_id, quantity)`` pairs against the catalogue."""
    store = store or get_variation_store()
    priced = []
    for variation_id, cart_quantity in lines:
        try:
            variation = store.get_variation(variation_id)
            product = store.get_product_for_variation(variation_id)
        except (VariationNotFound, ProductNotFound):
            continue

        quantity = min(cart_quantity, variation.available_quantity)
        if quantity <= 0:
            continue

        priced.append(
            CartLine(
                variation_id=variation.variation_id,
                product_id=product.product_id,
                product_name=product.name,
                product_slug=product.slug,
                sku=variation.sku,
                name=variation.name,
                unit_price=variation.unit_price,
                sale_price=variation.sale_price,
                effective_price=variation.effective_price,
                quantity=quantity,
                cart_quantity=cart_quantity,
                available_quantity=variation.available_quantity,
                sub_total=quantity * variation.effective_price,
            )
        )
    return priced


def snapshot_for(customer_id, lines, store=None, tiers=None) -> CartSnapshot:
    items = price_lines(lines, store=store)
    total_price = sum(line.sub_total for line in items)
    shipping = calculate_shipping_fee(total_price, tiers)

    return CartSnapshot(
        customer_id=str(customer_id),
        items=items,
        total_price=total_price,
        shipping_fee=shipping.fee,
        shipping_fee_percentage=shipping.percentage,
        total_amount=total_price + shipping.fee,
    )


def price_snapshot(customer_id, tiers=None) -> CartSnapshot:
    """Live snapshot of the customer's cart. A customer without a cart gets an empty one."""
    cart = current_domain.repository_for(ShoppingCart).for_customer(customer_id)
    if cart is None:
        return CartSnapshot(customer_id=str(customer_id))
    return snapshot_for(customer_id, cart.lines(), tiers=tiers)
