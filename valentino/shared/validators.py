"""Shared validation utilities"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

# Local part, "@", domain containing a dot
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Largest amount a signed 64-bit INTEGER column can hold
MAX_CENTS = 2**63 - 1


def is_valid_email(email: Optional[str]) -> bool:
    """Simple shape check for an email address, not full RFC validation"""
    if not email or not isinstance(email, str):
        return False
    return EMAIL_PATTERN.match(email) is not None


def missing_fields(data: Any, fields: tuple[str, ...]) -> list[str]:
    """Return the names of required fields that are absent or empty"""
    missing = []
    for field in fields:
        value = getattr(data, field, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing


def dollars_to_cents(price: Any) -> int:
    """
    Convert a dollar amount (number or numeric string) to integer cents.

    Raises:
        ValueError: If the price is not numeric, is negative or is too large
    """
    if price is None or isinstance(price, bool):
        raise ValueError("Price must be a number")
    try:
        amount = Decimal(str(price).strip())
    except (InvalidOperation, ValueError):
        raise ValueError("Price must be a number") from None
    if not amount.is_finite():
        raise ValueError("Price must be a number")
    if amount < 0:
        raise ValueError("Price must not be negative")
    if amount > Decimal(MAX_CENTS) / 100:
        raise ValueError("Price is too large")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_dollars(cents: Optional[int]) -> Optional[float]:
    """Convert integer cents to a decimal currency amount for API responses"""
    if cents is None:
        return None
    return cents / 100
