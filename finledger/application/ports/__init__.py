"""Application ports package."""

from .database import DatabaseEnginePort
from .exchange_rate_repository import ExchangeRateRepositoryPort
from .ledger_repository import LedgerRepositoryPort

__all__ = [
    "DatabaseEnginePort",
    "ExchangeRateRepositoryPort",
    "LedgerRepositoryPort",
]
