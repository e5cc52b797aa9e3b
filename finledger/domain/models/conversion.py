"""Domain models for currency conversion."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class ConversionItem:
    """Amount waiting to be converted."""

    amount: Decimal
    currency: str


@dataclass(frozen=True)
class ResolvedRate:
    """Exchange rate resolved for a currency pair and as-of date.

    Attributes:
        from_currency: Source currency code.
        to_currency: Target currency code.
        rate: Multiplier turning source amounts into target amounts.
        effective_date: Effective date of the oldest stored rate used.
        method: identity, direct, inverse or bridge.
        via: Intermediate currency for bridged rates.
    """

    from_currency: str
    to_currency: str
    rate: Decimal
    effective_date: date | None
    method: str
    via: str | None = None


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one amount."""

    original_amount: Decimal
    original_currency: str
    converted_amount: Decimal
    target_currency: str
    exchange_rate: Decimal | None
    success: bool
    rate_date: date | None = None
    method: str | None = None
    via: str | None = None
    error: str | None = None


__all__ = ["ConversionItem", "ResolvedRate", "ConversionResult"]
