"""Application tests for order status updates and their compensations."""

from datetime import UTC, datetime

import pytest
from ordering.order.order import Order
from ordering.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import ValidationError
from shared.errors import InvalidStatusTransition, OrderNotFound


def _update(order_id, status, actor="Customer", customer_id="cust-001"):
    return current_domain.process(
        UpdateOrderStatus(order_id=order_id, status=status, actor=actor, customer_id=customer_id),
        asynchronous=False,
    )


def _available(store, variation_id):
    return store.get_variation(variation_id).available_quantity


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestCancellation:
    def test_cancel_releases_each_item(self, shop, place_order):
        placed = place_order([("var-tee-s", 2), ("var-mug", 1)])
        assert _available(shop, "var-tee-s") == 8
        assert _available(shop, "var-mug") == 4

        result = _update(placed["id"], "Cancelled")

        assert result["status_history"] == ["Pending", "Cancelled"]
        assert _available(shop, "var-tee-s") == 10
        assert _available(shop, "var-mug") == 5

    def test_release_happens_exactly_once(self, shop, place_order):
        placed = place_order([("var-tee-s", 2)])
        shop.calls.clear()

        _update(placed["id"], "Cancelled")
        with pytest.raises(InvalidStatusTransition):
            _update(placed["id"], "Cancelled")

        releases = [c for c in shop.calls if c["method"] == "increment_available"]
        assert releases == [{"method": "increment_available", "variation_id": "var-tee-s", "quantity": 2}]
        assert _available(shop, "var-tee-s") == 10

    def test_release_is_relative_to_current_stock(self, shop, place_order):
        placed = place_order([("var-tee-s", 2)])
        shop.decrement_available("var-tee-s", 5)  # someone else buys 5
        _update(placed["id"], "Cancelled")
        assert _available(shop, "var-tee-s") == 5

    def test_cancel_from_shipping(self, shop, place_order):
        placed = place_order([("var-mug", 3)])
        _update(placed["id"], "Processing", actor="Admin", customer_id=None)
        _update(placed["id"], "Shipping", actor="Admin", customer_id=None)
        _update(placed["id"], "Cancelled")
        assert _order(placed["id"]).history == ["Pending", "Processing", "Shipping", "Cancelled"]
        assert _available(shop, "var-mug") == 5

    def test_admin_cancel_also_releases(self, shop, place_order):
        placed = place_order([("var-mug", 3)])
        _update(placed["id"], "Cancelled", actor="Admin", customer_id=None)
        assert _available(shop, "var-mug") == 5

    def test_rejected_transition_releases_nothing(self, shop, place_order):
        placed = place_order([("var-mug", 3)])
        with pytest.raises(InvalidStatusTransition):
            _update(placed["id"], "Delivered", actor="Admin", customer_id=None)
        assert _available(shop, "var-mug") == 2
        assert _order(placed["id"]).history == ["Pending"]

    def test_failed_write_releases_nothing(self, shop, seed_order, monkeypatch):
        order = seed_order([("var-tee-s", 2, 200_000)], datetime.now(UTC))
        repo_cls = type(current_domain.repository_for(Order))
        add = repo_cls.add
        failures = [RuntimeError("store unavailable")]

        def flaky_add(repo, item):
            if failures:
                raise failures.pop()
            return add(repo, item)

        monkeypatch.setattr(repo_cls, "add", flaky_add)

        with pytest.raises(RuntimeError):
            _update(str(order.id), "Cancelled")
        assert _order(order.id).status == "Pending"
        assert _available(shop, "var-tee-s") == 10

        _update(str(order.id), "Cancelled")
        assert _order(order.id).status == "Cancelled"
        assert _available(shop, "var-tee-s") == 12


class TestDelivery:
    def test_delivered_marks_paid(self, shop, place_order):
        placed = place_order([("var-mug", 1)])
        for status in ("Processing", "Shipping", "Delivered"):
            result = _update(placed["id"], status, actor="Admin", customer_id=None)

        assert result["payment"]["status"] == "Paid"
        order = _order(placed["id"])
        assert order.is_paid
        assert order.history == ["Pending", "Processing", "Shipping", "Delivered"]

    def test_delivered_is_terminal(self, shop, place_order):
        placed = place_order([("var-mug", 1)])
        for status in ("Processing", "Shipping", "Delivered"):
            _update(placed["id"], status, actor="Admin", customer_id=None)
        with pytest.raises(InvalidStatusTransition):
            _update(placed["id"], "Cancelled")
        assert _available(shop, "var-mug") == 4

    def test_history_only_grows(self, shop, place_order):
        placed = place_order([("var-mug", 1)])
        lengths = [len(_order(placed["id"]).history)]
        for status in ("Processing", "Shipping", "Delivered"):
            _update(placed["id"], status, actor="Admin", customer_id=None)
            lengths.append(len(_order(placed["id"]).history))
        assert lengths == [1, 2, 3, 4]


class TestOwnership:
    def test_other_customer_cannot_update(self, shop, place_order):
        placed = place_order([("var-mug", 1)])
        with pytest.raises(OrderNotFound):
            _update(placed["id"], "Cancelled", customer_id="cust-002")
        assert _order(placed["id"]).status == "Pending"
        assert _available(shop, "var-mug") == 4

    def test_customer_required_for_customer_actor(self, shop, place_order):
        placed = place_order([("var-mug", 1)])
        with pytest.raises(ValidationError):
            _update(placed["id"], "Cancelled", customer_id=None)

    def test_admin_bypasses_ownership(self, shop, place_order):
        placed = place_order([("var-mug", 1)])
        result = _update(placed["id"], "Processing", actor="Admin", customer_id="cust-002")
        assert result["status"] == "Processing"

    def test_unknown_order(self, shop):
        with pytest.raises(OrderNotFound):
            _update("ord-404", "Cancelled", actor="Admin", customer_id=None)

    def test_unknown_status_rejected(self, shop):
        with pytest.raises(ValidationError):
            UpdateOrderStatus(order_id="ord-1", status="Returned", actor="Admin")
