"""Customer directory port (abstract interface).

Authentication lives elsewhere; the ordering engine only needs a customer's
profile to default shipping details at checkout and to embed the owner in
order responses.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CustomerProfile:
    customer_id: str
    first_name: str
    last_name: str
    email: str
    phone_number: str = ""
    address: str = ""
    password_hash: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def public_dict(self) -> dict:
        """Profile fields safe to return to clients (the password hash is elided)."""
        return {
            "customer_id": self.customer_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone_number": self.phone_number,
            "address": self.address,
        }


class CustomerDirectory(ABC):
    """Abstract customer lookup interface."""

    @abstractmethod
    def get_customer(self, customer_id: str) -> CustomerProfile:
        """Return the profile or raise ``CustomerNotFound``."""
        ...
