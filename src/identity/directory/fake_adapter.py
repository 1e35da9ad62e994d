"""In-memory customer directory for development and testing."""

from shared.errors import CustomerNotFound

from identity.directory.port import CustomerDirectory, CustomerProfile


class FakeCustomerDirectory(CustomerDirectory):
    def __init__(self) -> None:
        self.customers: dict[str, CustomerProfile] = {}

    def register(self, profile: CustomerProfile) -> CustomerProfile:
        self.customers[str(profile.customer_id)] = profile
        return profile

    def get_customer(self, customer_id: str) -> CustomerProfile:
        profile = self.customers.get(str(customer_id))
        if profile is None:
            raise CustomerNotFound(customer_id)
        return profile
