"""Inventory ledger — reserves and releases available stock per variation.

The ledger never reads a quantity and writes it back. Every change is a
single conditional update on the catalogue store (``decrement_available`` /
``increment_available``), so two concurrent checkouts cannot jointly
overdraw a variation.

The ledger does not remember which release belongs to which reservation.
Callers release each reserved quantity exactly once.
"""

from dataclasses import dataclass

import structlog
from catalogue.store import get_variation_store
from catalogue.store.port import VariationStore
from protean.exceptions import ValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Reservation:
    """Stock held for an order line.

    ``remaining`` is the quantity left right after the hold, when known.
    """

    variation_id: str
    quantity: int
    remaining: int | None = None


class InventoryLedger:
    def __init__(self, store: VariationStore | None = None) -> None:
        self._store = store

    @property
    def store(self) -> VariationStore:
        return self._store or get_variation_store()

    @staticmethod
    def _validate_quantity(quantity):
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be a positive integer"]})

    def reserve(self, variation_id, quantity) -> Reservation:
        """Hold ``quantity`` units or fail with ``InsufficientStock``."""
        self._validate_quantity(quantity)

        remaining = self.store.decrement_available(str(variation_id), quantity)
        logger.info(
            "Stock reserved",
            variation_id=str(variation_id),
            quantity=quantity,
            remaining=remaining,
        )
        return Reservation(variation_id=str(variation_id), quantity=quantity, remaining=remaining)

    def release(self, variation_id, quantity) -> int:
        """Return ``quantity`` units to available stock."""
        self._validate_quantity(quantity)

        available = self.store.increment_available(str(variation_id), quantity)
        logger.info(
            "Stock released",
            variation_id=str(variation_id),
            quantity=quantity,
            available=available,
        )
        return available

    def reserve_all(self, lines) -> list[Reservation]:
        """Reserve every ``(variation_id, quantity)`` line, all or nothing.

        If any line fails, the lines already reserved are released before the
        error propagates, leaving every quantity as it was.
        """
        reservations: list[Reservation] = []
        try:
            for variation_id, quantity in lines:
                reservations.append(self.reserve(variation_id, quantity))
        except Exception as exc:
            logger.warning(
                "Reservation failed, rolling back",
                reserved=[(r.variation_id, r.quantity) for r in reservations],
            )
            self.roll_back(reservations, exc)
            raise
        return reservations

    def release_all(self, reservations) -> None:
        """Release every reservation, even when some releases fail.

        Each failure is logged. Once every release has been attempted, the
        first failure is raised.
        """
        failures = []
        for reservation in reservations:
            try:
                self.release(reservation.variation_id, reservation.quantity)
            except Exception as exc:
                logger.error(
                    "Stock release failed",
                    variation_id=str(reservation.variation_id),
                    quantity=reservation.quantity,
                    error=str(exc),
                    exc_info=True,
                )
                failures.append(exc)
        if failures:
            raise failures[0]

    def roll_back(self, reservations, cause: Exception) -> None:
        """Release ``reservations`` after ``cause`` aborted the work they were held for.

        ``cause`` stays the error the caller sees. A failed release is added
        to it as a note.
        """
        try:
            self.release_all(reservations)
        except Exception as exc:
            cause.add_note(f"Releasing reserved stock also failed: {exc!r}")
