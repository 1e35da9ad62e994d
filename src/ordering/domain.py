"""Ordering bounded context: shopping carts, orders and sales reporting.

Converts carts into orders against live stock, drives the order status state
machine with compensating stock release on cancellation, and reports on
committed orders.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
ordering = Domain(name="ordering")
