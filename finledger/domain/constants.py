"""Domain constants for ledger balances and conversions."""

from decimal import Decimal

ASSET = "ASSET"
LIABILITY = "LIABILITY"
INCOME = "INCOME"
EXPENSE = "EXPENSE"

ACCOUNT_TYPES = (ASSET, LIABILITY, INCOME, EXPENSE)
STOCK_ACCOUNT_TYPES = (ASSET, LIABILITY)
FLOW_ACCOUNT_TYPES = (INCOME, EXPENSE)

TRANSACTION_INCOME = "INCOME"
TRANSACTION_EXPENSE = "EXPENSE"
TRANSACTION_BALANCE = "BALANCE"

TRANSACTION_TYPES = (
    TRANSACTION_INCOME,
    TRANSACTION_EXPENSE,
    TRANSACTION_BALANCE,
)

RATE_SOURCE_USER = "USER"
RATE_SOURCE_AUTO = "AUTO"
RATE_SOURCES = (RATE_SOURCE_USER, RATE_SOURCE_AUTO)

# Balances below one minor unit are treated as zero.
BALANCE_EPSILON = Decimal("0.01")

MAX_HISTORY_MONTHS = 60


__all__ = [
    "ASSET",
    "LIABILITY",
    "INCOME",
    "EXPENSE",
    "ACCOUNT_TYPES",
    "STOCK_ACCOUNT_TYPES",
    "FLOW_ACCOUNT_TYPES",
    "TRANSACTION_INCOME",
    "TRANSACTION_EXPENSE",
    "TRANSACTION_BALANCE",
    "TRANSACTION_TYPES",
    "RATE_SOURCE_USER",
    "RATE_SOURCE_AUTO",
    "RATE_SOURCES",
    "BALANCE_EPSILON",
    "MAX_HISTORY_MONTHS",
]
