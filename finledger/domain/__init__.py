"""Domain package for business rules and core models."""

from .constants import (
    ACCOUNT_TYPES,
    BALANCE_EPSILON,
    FLOW_ACCOUNT_TYPES,
    STOCK_ACCOUNT_TYPES,
)

__all__ = [
    "ACCOUNT_TYPES",
    "BALANCE_EPSILON",
    "FLOW_ACCOUNT_TYPES",
    "STOCK_ACCOUNT_TYPES",
]
