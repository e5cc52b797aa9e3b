"""Helpers for Decimal normalization."""

from decimal import Decimal, InvalidOperation


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from SQL or adapters.

    Returns:
        Decimal: Normalized numeric value.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def safe_decimal(value) -> Decimal | None:
    """Return a Decimal or None when the value cannot be parsed.

    Args:
        value: Raw numeric value from SQL or adapters.

    Returns:
        Decimal | None: Parsed value, or None for unparseable input.
    """
    if value is None:
        return None
    try:
        return coerce_decimal(value)
    except (InvalidOperation, ValueError):
        return None


__all__ = ["coerce_decimal", "safe_decimal"]
