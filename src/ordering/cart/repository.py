"""Cart lookup by customer."""

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering


@ordering.repository(part_of=ShoppingCart)
class CartRepository:
    def for_customer(self, customer_id):
        """Return the customer's cart, or None if they have never had one."""
        carts = self._dao.query.filter(customer_id=str(customer_id)).limit(1).all().items
        return carts[0] if carts else None
