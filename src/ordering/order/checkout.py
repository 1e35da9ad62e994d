"""Checkout — turns the customer's cart into a Pending order.

The whole conversion succeeds or leaves nothing behind. Stock is reserved
all-or-nothing inside the handler, and the handler releases it again if
anything after the reservation fails. ``checkout`` commits the order and
the emptied cart together and releases the stock a second way: when that
commit fails, including when a concurrent write to the cart wins.
"""

import structlog
from catalogue.store import get_variation_store
from identity.directory import get_customer_directory
from inventory.ledger import InventoryLedger, Reservation
from payments.methods import get_payment_methods
from payments.methods.port import PaymentMethod
from protean import UnitOfWork, handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from shared.errors import (
    CartConflict,
    OrderCodeUnavailable,
    PaymentMethodDisabled,
    ProductNotFound,
    StockChanged,
    VariationNotFound,
)
from shared.settings import gateway_payment_methods, order_code_max_attempts

from ordering.cart.cart import ShoppingCart
from ordering.cart.pricing import snapshot_for
from ordering.domain import ordering
from ordering.order.codes import generate_order_code
from ordering.order.order import Order
from ordering.order.queries import serialize_order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH_ON_DELIVERY.value)
    receiver_name = String(max_length=255)
    phone_number = String(max_length=50)
    shipping_address = String(max_length=500)


def _check_payment_method(method):
    method = PaymentMethod(method or PaymentMethod.CASH_ON_DELIVERY.value)
    if method.value in gateway_payment_methods() and not get_payment_methods().is_enabled(method.value):
        raise PaymentMethodDisabled(method.value)
    return method


def _stock_conflicts(lines, store):
    conflicts = []
    for variation_id, quantity in lines:
        try:
            available = store.get_variation(variation_id).available_quantity
            store.get_product_for_variation(variation_id)
        except (VariationNotFound, ProductNotFound):
            available = 0
        if quantity > available:
            conflicts.append({"variation_id": variation_id, "requested": quantity, "available": available})
    return conflicts


def _add_under_fresh_code(order_repo, build_order):
    """Store ``build_order(code)`` under an order code no other order holds.

    ``order_code`` is unique, so a code claimed between generation and write
    is refused by the repository. The order is then rebuilt under a new code.
    """
    attempts = order_code_max_attempts()
    for attempt in range(1, attempts + 1):
        order = build_order(generate_order_code(order_repo.code_taken))
        try:
            return order_repo.add(order)
        except ValidationError as exc:
            if "order_code" not in exc.messages:
                raise
            logger.warning("Order code taken at write", order_code=order.order_code, attempt=attempt)
    raise OrderCodeUnavailable(attempts)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        method = _check_payment_method(command.payment_method)

        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.for_customer(command.customer_id)
        if cart is None or not cart.items:
            raise ValidationError({"cart": ["Cart is empty"]})

        customer = get_customer_directory().get_customer(command.customer_id)
        store = get_variation_store()
        lines = cart.lines()

        conflicts = _stock_conflicts(lines, store)
        if conflicts:
            logger.info("Checkout rejected, stock changed", customer_id=str(command.customer_id), conflicts=conflicts)
            raise StockChanged(conflicts)

        # Priced before reserving: every line is in stock, so nothing is clamped.
        snapshot = snapshot_for(cart.customer_id, lines, store=store)

        def build_order(order_code):
            return Order.place(
                customer_id=command.customer_id,
                order_code=order_code,
                items_data=[
                    {
                        "variation_id": line.variation_id,
                        "product_id": line.product_id,
                        "sku": line.sku,
                        "title": line.product_name,
                        "price_at_purchase": line.effective_price,
                        "quantity": line.quantity,
                    }
                    for line in snapshot.items
                ],
                payment_method=method.value,
                receiver_name=command.receiver_name or customer.full_name,
                phone_number=command.phone_number or customer.phone_number,
                shipping_address=command.shipping_address or customer.address,
                total_price=snapshot.total_price,
                shipping_fee=snapshot.shipping_fee,
                shipping_fee_percentage=snapshot.shipping_fee_percentage,
                total_amount=snapshot.total_amount,
            )

        ledger = InventoryLedger(store)
        reservations = ledger.reserve_all(lines)
        try:
            cart.clear()
            cart_repo.add(cart)
            order = _add_under_fresh_code(current_domain.repository_for(Order), build_order)
        except Exception as exc:
            logger.warning("Checkout failed, releasing stock", customer_id=str(command.customer_id))
            ledger.roll_back(reservations, exc)
            raise

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_code=order.order_code,
            customer_id=str(order.customer_id),
            total_amount=order.total_amount,
        )
        return str(order.id)


def _release_if_not_stored(order, cause):
    """Give back the stock held for ``order`` when its commit did not go through."""
    if order is None:
        # The handler failed before returning and has released its own stock
        return
    if current_domain.repository_for(Order).find_by_code(order.order_code) is not None:
        return

    logger.warning(
        "Order was not stored, releasing its stock",
        order_code=order.order_code,
        customer_id=str(order.customer_id),
        error=str(cause),
    )
    InventoryLedger().roll_back(
        [Reservation(variation_id=str(item.variation_id), quantity=item.quantity) for item in order.items],
        cause,
    )


def checkout(customer_id, payment_method=None, receiver_name=None, phone_number=None, shipping_address=None):
    """Place an order and return it serialized with the customer's public profile.

    Raises ``CartConflict`` when the cart changed while the order was being
    placed. No order is stored and no stock stays reserved in that case.
    """
    command = PlaceOrder(
        customer_id=customer_id,
        payment_method=payment_method or PaymentMethod.CASH_ON_DELIVERY.value,
        receiver_name=receiver_name,
        phone_number=phone_number,
        shipping_address=shipping_address,
    )

    placed = None
    try:
        with UnitOfWork():
            order_id = current_domain.process(command, asynchronous=False)
            placed = current_domain.repository_for(Order).get(order_id)
    except ExpectedVersionError as exc:
        _release_if_not_stored(placed, exc)
        logger.warning("Checkout lost a concurrent cart write", customer_id=str(customer_id))
        raise CartConflict(customer_id) from exc
    except Exception as exc:
        _release_if_not_stored(placed, exc)
        raise

    order = current_domain.repository_for(Order).get(placed.id)
    return serialize_order(order, include_customer=True)
