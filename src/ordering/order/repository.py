"""Order lookups used by checkout, status updates, queries and reports."""

from ordering.domain import ordering
from ordering.order.order import Order

PAGE_SIZE = 100


@ordering.repository(part_of=Order)
class OrderRepository:
    def find_by_code(self, order_code):
        orders = self._dao.query.filter(order_code=order_code).limit(1).all().items
        return orders[0] if orders else None

    def code_taken(self, order_code) -> bool:
        return self.find_by_code(order_code) is not None

    def matching(self, page_size=PAGE_SIZE, **filters):
        """Yield every order matching ``filters``, oldest first.

        Reads page by page until a short page comes back.
        """
        offset = 0
        while True:
            query = self._dao.query.order_by("created_at").offset(offset).limit(page_size)
            if filters:
                query = query.filter(**filters)
            page = query.all().items
            yield from page
            if len(page) < page_size:
                return
            offset += page_size
