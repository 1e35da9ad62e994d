"""Catalogue store factory.

Provides get_variation_store() / set_variation_store() to swap implementations:
- InMemoryVariationStore for development and testing
- a database-backed adapter in deployments
"""

from catalogue.store.memory_adapter import InMemoryVariationStore
from catalogue.store.port import VariationStore

_current_store: VariationStore | None = None


def get_variation_store() -> VariationStore:
    """Return the current catalogue store. Defaults to InMemoryVariationStore."""
    global _current_store
    if _current_store is None:
        _current_store = InMemoryVariationStore()
    return _current_store


def set_variation_store(store: VariationStore) -> None:
    """Override the active catalogue store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_variation_store() -> None:
    """Reset to default store."""
    global _current_store
    _current_store = None
