"""Domain models for ledger records supplied by the external store."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from finledger.domain.constants import RATE_SOURCE_USER


@dataclass(frozen=True)
class CurrencyRef:
    """Currency attached to an account or transaction."""

    code: str
    symbol: str = ""
    name: str = ""
    decimal_places: int = 2
    is_custom: bool = False


@dataclass(frozen=True)
class Category:
    """Account category.

    Attributes:
        id: Category identifier.
        name: Display name.
        account_type: ASSET, LIABILITY, INCOME, EXPENSE or None when unset.
        parent_id: Parent category identifier for subcategories.
        order: Optional display order.
    """

    id: str
    name: str
    account_type: str | None
    parent_id: str | None = None
    order: int | None = None


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction recorded against one account."""

    id: str
    account_id: str
    currency: CurrencyRef
    transaction_type: str
    amount: Decimal
    date: date | None
    description: str = ""
    notes: str | None = None
    tag_ids: tuple[str, ...] = ()

    @property
    def currency_code(self) -> str:
        return self.currency.code


@dataclass(frozen=True)
class Account:
    """Account with its category and transactions."""

    id: str
    name: str
    category: Category
    currency: CurrencyRef
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)

    @property
    def account_type(self) -> str | None:
        return self.category.account_type


@dataclass(frozen=True)
class ExchangeRateRow:
    """Stored exchange rate effective from a given date."""

    from_currency: str
    to_currency: str
    rate: Decimal
    effective_date: date
    source: str = RATE_SOURCE_USER
    id: str | None = None


__all__ = [
    "CurrencyRef",
    "Category",
    "Transaction",
    "Account",
    "ExchangeRateRow",
]
