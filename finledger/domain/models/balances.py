"""Domain models for computed balances."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from finledger.domain.models.ledger import CurrencyRef


@dataclass(frozen=True)
class AccountBalance:
    """Balance of one account in one currency."""

    currency_code: str
    amount: Decimal
    currency: CurrencyRef


@dataclass(frozen=True)
class BalanceOptions:
    """Options for a balance computation.

    Attributes:
        as_of_date: Cutoff date; later transactions are ignored.
        period_start: Inclusive start of a flow period.
        period_end: Inclusive end of a flow period.
        use_period_calculation: When False, flow accounts ignore the period
            and sum everything up to ``as_of_date``.
    """

    as_of_date: date | None = None
    period_start: date | None = None
    period_end: date | None = None
    use_period_calculation: bool = True


__all__ = ["AccountBalance", "BalanceOptions"]
