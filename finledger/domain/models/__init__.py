"""Domain models package."""

from .balances import AccountBalance, BalanceOptions
from .conversion import ConversionItem, ConversionResult, ResolvedRate
from .finance import (
    AccountBalanceLine,
    BalanceSheet,
    CashFlowStatement,
    CashflowSummary,
    CategoryTotal,
    CurrencyBreakdown,
    DashboardSummary,
    MonthlyDataPoint,
    NetWorthSummary,
    Rollup,
)
from .ledger import (
    Account,
    Category,
    CurrencyRef,
    ExchangeRateRow,
    Transaction,
)
from .validation import ValidationIssue, ValidationReport

__all__ = [
    "Account",
    "AccountBalance",
    "AccountBalanceLine",
    "BalanceOptions",
    "BalanceSheet",
    "CashFlowStatement",
    "CashflowSummary",
    "Category",
    "CategoryTotal",
    "ConversionItem",
    "ConversionResult",
    "CurrencyBreakdown",
    "CurrencyRef",
    "DashboardSummary",
    "ExchangeRateRow",
    "MonthlyDataPoint",
    "NetWorthSummary",
    "ResolvedRate",
    "Rollup",
    "Transaction",
    "ValidationIssue",
    "ValidationReport",
]
