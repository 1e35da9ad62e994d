"""Shipping-fee tiers.

A tier table is an ordered list of ``(min_total, percentage)`` breakpoints.
The tier with the largest ``min_total`` not above the order total applies.
"""

from dataclasses import dataclass

from protean.exceptions import ValidationError
from shared.settings import shipping_fee_tiers_spec


@dataclass(frozen=True)
class ShippingFeeTier:
    min_total: float
    percentage: float


@dataclass(frozen=True)
class ShippingFee:
    percentage: float
    fee: float


DEFAULT_SHIPPING_FEE_TIERS = (
    ShippingFeeTier(min_total=0, percentage=10),
    ShippingFeeTier(min_total=1_000_000, percentage=5),
    ShippingFeeTier(min_total=5_000_000, percentage=2),
    ShippingFeeTier(min_total=10_000_000, percentage=0),
)


def parse_tiers(raw: str) -> tuple[ShippingFeeTier, ...]:
    """Parse ``"0:10,1000000:5"`` into a sorted tier table."""
    tiers = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            min_total, percentage = chunk.split(":")
            tier = ShippingFeeTier(min_total=float(min_total), percentage=float(percentage))
        except ValueError:
            raise ValidationError(
                {"shipping_fee_tiers": [f"Invalid tier '{chunk}', expected 'min_total:percentage'"]}
            ) from None
        if tier.min_total < 0 or tier.percentage < 0:
            raise ValidationError({"shipping_fee_tiers": [f"Tier '{chunk}' must not be negative"]})
        tiers.append(tier)

    if not tiers:
        raise ValidationError({"shipping_fee_tiers": ["At least one tier is required"]})
    return tuple(sorted(tiers, key=lambda t: t.min_total))


def configured_tiers() -> tuple[ShippingFeeTier, ...]:
    raw = shipping_fee_tiers_spec()
    return parse_tiers(raw) if raw else DEFAULT_SHIPPING_FEE_TIERS


def calculate_shipping_fee(total_price, tiers=None) -> ShippingFee:
    """Return the shipping percentage and fee for ``total_price``.

    A total below every breakpoint pays no shipping.
    """
    tiers = configured_tiers() if tiers is None else tiers

    percentage = 0
    for tier in sorted(tiers, key=lambda t: t.min_total):
        if tier.min_total <= total_price:
            percentage = tier.percentage
        else:
            break

    return ShippingFee(percentage=percentage, fee=round(total_price * percentage / 100, 2))
