"""Application use cases package."""

from .get_account_balances import GetAccountBalancesUseCase
from .get_balance_sheet import GetBalanceSheetUseCase
from .get_cashflow import GetCashflowUseCase
from .get_dashboard_summary import GetDashboardSummaryUseCase
from .get_monthly_history import GetMonthlyHistoryUseCase
from .get_net_worth_summary import GetNetWorthSummaryUseCase
from .ledger_snapshot import LedgerSnapshot, load_ledger_snapshot

__all__ = [
    "GetAccountBalancesUseCase",
    "GetBalanceSheetUseCase",
    "GetCashflowUseCase",
    "GetDashboardSummaryUseCase",
    "GetMonthlyHistoryUseCase",
    "GetNetWorthSummaryUseCase",
    "LedgerSnapshot",
    "load_ledger_snapshot",
]
