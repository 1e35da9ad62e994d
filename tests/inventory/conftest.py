import pytest


@pytest.fixture()
def ledger(store):
    from catalogue.store.port import Product, Variation
    from inventory.ledger import InventoryLedger

    store.add_product(Product(product_id="prod-a", name="Product A"))
    store.add_variation(
        Variation(
            variation_id="var-a",
            product_id="prod-a",
            sku="A",
            name="A",
            unit_price=100,
            available_quantity=5,
        )
    )
    store.add_variation(
        Variation(
            variation_id="var-b",
            product_id="prod-a",
            sku="B",
            name="B",
            unit_price=150,
            available_quantity=2,
        )
    )
    return InventoryLedger(store)
