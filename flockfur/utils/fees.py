"""
Payment split calculation.

The platform keeps 20% of the agreed price, rounded half away from zero to
the cent; the cleaner receives the remainder, so fee + payout always equals
the agreed price exactly. The same function prices a job at acceptance and
again when the checkout session is created.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union


PLATFORM_FEE_PERCENT = Decimal("20")

CENT = Decimal("0.01")

Amount = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class PaymentSplit:
    """Agreed price divided between the platform and the cleaner."""

    agreed_price: Decimal
    platform_fee: Decimal
    cleaner_payout: Decimal


def to_money(amount: Amount) -> Decimal:
    """
    Convert an amount to a Decimal rounded to cents.

    Floats are converted through ``str`` so 19.99 stays 19.99.

    Raises:
        ValueError: If the amount is not a finite number
    """
    try:
        value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e

    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")

    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_split(agreed_price: Amount) -> PaymentSplit:
    """
    Split an agreed price into platform fee and cleaner payout.

    Args:
        agreed_price: Positive price in dollars

    Returns:
        PaymentSplit with fee = round(price * 20%) and payout = price - fee

    Raises:
        ValueError: If the price is not positive

    Example:
        >>> calculate_split("90.00")
        PaymentSplit(agreed_price=Decimal('90.00'), platform_fee=Decimal('18.00'), cleaner_payout=Decimal('72.00'))
    """
    price = to_money(agreed_price)
    if price <= 0:
        raise ValueError(f"Agreed price must be positive, got {price}")

    platform_fee = (price * PLATFORM_FEE_PERCENT / Decimal("100")).quantize(
        CENT, rounding=ROUND_HALF_UP
    )

    return PaymentSplit(
        agreed_price=price,
        platform_fee=platform_fee,
        cleaner_payout=price - platform_fee,
    )


def to_minor_units(amount: Amount) -> int:
    """Convert a dollar amount to integer cents for the payment processor."""
    return int(to_money(amount) * 100)
