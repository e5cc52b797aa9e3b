"""Domain models for financial aggregates."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from finledger.domain.models.balances import AccountBalance
from finledger.domain.models.conversion import ConversionResult
from finledger.domain.models.validation import ValidationReport


@dataclass(frozen=True)
class CurrencyBreakdown:
    """Per original currency contribution to a rollup."""

    original_amount: Decimal
    converted_amount: Decimal
    exchange_rate: Decimal | None
    account_count: int
    success: bool


@dataclass(frozen=True)
class AccountBalanceLine:
    """Balance of one account in one currency, converted to the base currency.

    Attributes:
        account_id: Account identifier.
        account_name: Account display name.
        category_id: Owning category identifier.
        account_type: Effective account type.
        balance: Balance in the original currency.
        conversion: Conversion outcome for the balance.
        contribution: Amount this line adds to base currency totals.
    """

    account_id: str
    account_name: str
    category_id: str
    account_type: str | None
    balance: AccountBalance
    conversion: ConversionResult
    contribution: Decimal


@dataclass(frozen=True)
class Rollup:
    """Totals of one account type in the base currency.

    Attributes:
        account_type: Account type aggregated by this rollup.
        currency_code: Base currency code.
        total_in_base_currency: Sum of all contributions.
        totals_by_original_currency: Raw totals per original currency.
        by_currency: Breakdown per original currency, largest first.
        has_conversion_errors: True when any conversion failed.
        conversion_details: Conversion results in input order.
        account_count: Accounts with a non-zero balance.
    """

    account_type: str
    currency_code: str
    total_in_base_currency: Decimal
    totals_by_original_currency: dict[str, AccountBalance]
    by_currency: dict[str, CurrencyBreakdown]
    has_conversion_errors: bool
    conversion_details: list[ConversionResult] = field(default_factory=list)
    account_count: int = 0


@dataclass(frozen=True)
class CategoryTotal:
    """Category total in the base currency including descendants."""

    category_id: str
    name: str
    account_type: str | None
    direct_total: Decimal
    total: Decimal
    account_count: int
    has_conversion_errors: bool
    parent_id: str | None = None
    children: list["CategoryTotal"] = field(default_factory=list)


@dataclass(frozen=True)
class NetWorthSummary:
    """Summary of net worth figures.

    Attributes:
        total_assets: Converted asset total.
        total_liabilities: Converted liability total as a positive magnitude.
        net_worth: Assets minus liabilities.
    """

    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    currency_code: str
    as_of_date: date
    assets: Rollup
    liabilities: Rollup

    @property
    def has_conversion_errors(self) -> bool:
        return (
            self.assets.has_conversion_errors
            or self.liabilities.has_conversion_errors
        )


@dataclass(frozen=True)
class CashflowSummary:
    """Summary of income and expense totals for a period."""

    total_income: Decimal
    total_expense: Decimal
    currency_code: str
    period_start: date | None
    period_end: date
    income: Rollup
    expense: Rollup

    @property
    def net_cash_flow(self) -> Decimal:
        """Return total_income minus total_expense."""
        return self.total_income - self.total_expense

    @property
    def has_conversion_errors(self) -> bool:
        return (
            self.income.has_conversion_errors
            or self.expense.has_conversion_errors
        )


@dataclass(frozen=True)
class BalanceSheet:
    """Point-in-time statement of assets and liabilities."""

    summary: NetWorthSummary
    asset_categories: list[CategoryTotal]
    liability_categories: list[CategoryTotal]
    accounts: list[AccountBalanceLine]
    validation: ValidationReport


@dataclass(frozen=True)
class CashFlowStatement:
    """Income and expense statement for a period."""

    summary: CashflowSummary
    income_categories: list[CategoryTotal]
    expense_categories: list[CategoryTotal]
    accounts: list[AccountBalanceLine]
    validation: ValidationReport


@dataclass(frozen=True)
class DashboardSummary:
    """Headline figures for the dashboard."""

    net_worth: NetWorthSummary
    cash_flow: CashflowSummary
    account_counts: dict[str, int]
    validation: ValidationReport
    missing_rates: tuple[tuple[str, str], ...] = ()

    @property
    def net_cash_flow(self) -> Decimal:
        return self.cash_flow.net_cash_flow

    @property
    def has_conversion_errors(self) -> bool:
        return (
            self.net_worth.has_conversion_errors
            or self.cash_flow.has_conversion_errors
        )


@dataclass(frozen=True)
class MonthlyDataPoint:
    """Net worth at month end and cash flow within the month."""

    month: str
    net_worth: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    monthly_income: Decimal
    monthly_expense: Decimal
    net_cash_flow: Decimal
    has_conversion_errors: bool


__all__ = [
    "CurrencyBreakdown",
    "AccountBalanceLine",
    "Rollup",
    "CategoryTotal",
    "NetWorthSummary",
    "CashflowSummary",
    "BalanceSheet",
    "CashFlowStatement",
    "DashboardSummary",
    "MonthlyDataPoint",
]
