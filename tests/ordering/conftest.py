import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def customers():
    """Customer directory with two registered customers."""
    from identity.directory import set_customer_directory
    from identity.directory.fake_adapter import FakeCustomerDirectory
    from identity.directory.port import CustomerProfile

    directory = FakeCustomerDirectory()
    directory.register(
        CustomerProfile(
            customer_id="cust-001",
            first_name="Linh",
            last_name="Tran",
            email="linh@example.com",
            phone_number="0901234567",
            address="12 Hang Bac, Hanoi",
            password_hash="pbkdf2$secret",
        )
    )
    directory.register(
        CustomerProfile(
            customer_id="cust-002",
            first_name="Minh",
            last_name="Pham",
            email="minh@example.com",
            phone_number="0907654321",
            address="8 Le Loi, Da Nang",
            password_hash="pbkdf2$other",
        )
    )
    set_customer_directory(directory)
    return directory


@pytest.fixture()
def payment_methods():
    from payments.methods import set_payment_methods
    from payments.methods.fake_adapter import FakePaymentMethods

    registry = FakePaymentMethods()
    set_payment_methods(registry)
    return registry


@pytest.fixture()
def shop(seeded_store, customers, payment_methods):
    """Seeded catalogue, customers and payment methods, all installed."""
    return seeded_store


@pytest.fixture()
def place_order(shop):
    """Fill the customer's cart with ``lines`` and check out. Returns the serialized order."""
    from ordering.cart.items import AddToCart
    from ordering.order.checkout import checkout
    from protean import current_domain

    def _place(lines, customer_id="cust-001", **checkout_kwargs):
        for variation_id, quantity in lines:
            current_domain.process(
                AddToCart(customer_id=customer_id, variation_id=variation_id, quantity=quantity),
                asynchronous=False,
            )
        return checkout(customer_id, **checkout_kwargs)

    return _place


@pytest.fixture()
def seed_order(shop):
    """Persist an order directly, backdated and advanced along ``statuses``.

    Stock is not reserved, though a seeded cancellation returns its items to
    stock like any committed one. Returns the Order aggregate.
    """
    import itertools

    from ordering.order.order import Order
    from protean import current_domain

    codes = itertools.count(1)

    def _seed(items, placed_at, statuses=(), customer_id="cust-001"):
        items_data = []
        for variation_id, quantity, price in items:
            variation = shop.get_variation(variation_id)
            items_data.append(
                {
                    "variation_id": variation_id,
                    "product_id": variation.product_id,
                    "sku": variation.sku,
                    "title": variation.name,
                    "price_at_purchase": price,
                    "quantity": quantity,
                }
            )
        total_price = sum(quantity * price for _, quantity, price in items)
        order = Order.place(
            customer_id=customer_id,
            order_code=f"ORDER-SEED{next(codes):06d}",
            items_data=items_data,
            payment_method="Cash_On_Delivery",
            receiver_name="Linh Tran",
            phone_number="0901234567",
            shipping_address="12 Hang Bac, Hanoi",
            total_price=total_price,
            shipping_fee=0,
            shipping_fee_percentage=0,
            total_amount=total_price,
            placed_at=placed_at,
        )
        for status in statuses:
            order.transition_to(status, actor="Admin")
        current_domain.repository_for(Order).add(order)
        return order

    return _seed
