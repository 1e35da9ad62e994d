"""Customer directory factory.

Provides get_customer_directory() / set_customer_directory() to swap implementations.
"""

from identity.directory.fake_adapter import FakeCustomerDirectory
from identity.directory.port import CustomerDirectory

_current_directory: CustomerDirectory | None = None


def get_customer_directory() -> CustomerDirectory:
    """Return the current customer directory. Defaults to FakeCustomerDirectory."""
    global _current_directory
    if _current_directory is None:
        _current_directory = FakeCustomerDirectory()
    return _current_directory


def set_customer_directory(directory: CustomerDirectory) -> None:
    """Override the active directory (useful for tests)."""
    global _current_directory
    _current_directory = directory


def reset_customer_directory() -> None:
    """Reset to default directory."""
    global _current_directory
    _current_directory = None
