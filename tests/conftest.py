import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Select the config environment before any domain module is imported.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


# ---------------------------------------------------------------------------
# Collaborator ports
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _reset_ports():
    """Every test starts with fresh in-memory adapters."""
    yield

    from catalogue.store import reset_variation_store
    from identity.directory import reset_customer_directory
    from payments.methods import reset_payment_methods

    reset_variation_store()
    reset_customer_directory()
    reset_payment_methods()


@pytest.fixture()
def store():
    """An empty in-memory catalogue store installed as the active store."""
    from catalogue.store import set_variation_store
    from catalogue.store.memory_adapter import InMemoryVariationStore

    store = InMemoryVariationStore()
    set_variation_store(store)
    return store


@pytest.fixture()
def seeded_store(store):
    """A small seeded catalogue.

    - ``var-tee-s``: 200,000 each, 10 in stock
    - ``var-tee-m``: 250,000, on sale at 180,000, 3 in stock
    - ``var-mug``:    50,000 each, 5 in stock
    """
    from catalogue.store.port import Product, Variation

    store.add_product(Product(product_id="prod-tee", name="Linen Tee", slug="linen-tee"))
    store.add_product(Product(product_id="prod-mug", name="Stone Mug", slug="stone-mug"))
    store.add_variation(
        Variation(
            variation_id="var-tee-s",
            product_id="prod-tee",
            sku="TEE-S",
            name="Linen Tee / S",
            unit_price=200_000,
            available_quantity=10,
        )
    )
    store.add_variation(
        Variation(
            variation_id="var-tee-m",
            product_id="prod-tee",
            sku="TEE-M",
            name="Linen Tee / M",
            unit_price=250_000,
            sale_price=180_000,
            available_quantity=3,
        )
    )
    store.add_variation(
        Variation(
            variation_id="var-mug",
            product_id="prod-mug",
            sku="MUG",
            name="Stone Mug",
            unit_price=50_000,
            available_quantity=5,
        )
    )
    return store
