"""Application services package."""

from .aggregation import AggregationEngine
from .currency_conversion import CurrencyConversionService

__all__ = ["AggregationEngine", "CurrencyConversionService"]
