"""Domain services package."""

from .balances import (
    calculate_account_balance,
    calculate_flow_balance,
    calculate_stock_balance,
    calculate_total_balance,
    has_balance,
    is_effectively_zero,
)
from .categories import (
    build_category_totals,
    flatten_category_totals,
    resolve_category_types,
)
from .finance import (
    compute_cashflow_summary,
    compute_net_worth_summary,
    summarize_rollup,
)
from .fx import RateTable, resolve_rate
from .normalization import normalize_currency_code, require_currency_code
from .validation import validate_accounts, validate_balance_sign

__all__ = [
    "RateTable",
    "build_category_totals",
    "calculate_account_balance",
    "calculate_flow_balance",
    "calculate_stock_balance",
    "calculate_total_balance",
    "compute_cashflow_summary",
    "compute_net_worth_summary",
    "flatten_category_totals",
    "has_balance",
    "is_effectively_zero",
    "normalize_currency_code",
    "require_currency_code",
    "resolve_category_types",
    "resolve_rate",
    "summarize_rollup",
    "validate_accounts",
    "validate_balance_sign",
]
