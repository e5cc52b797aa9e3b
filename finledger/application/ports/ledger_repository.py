"""Port for reading ledger accounts, categories and user settings."""

from datetime import date
from typing import Protocol

from finledger.domain.models import Account, Category, CurrencyRef


class LedgerRepositoryPort(Protocol):
    """Port exposing already validated ledger records."""

    def fetch_accounts(
        self,
        user_id: str,
        end_date: date | None = None,
    ) -> list[Account]:
        """Return the user's accounts with their transactions.

        Transactions dated after ``end_date`` may be omitted by the store.
        """

    def fetch_categories(self, user_id: str) -> list[Category]:
        """Return the user's categories with their effective types."""

    def fetch_base_currency(self, user_id: str) -> CurrencyRef:
        """Return the user's configured base currency."""


__all__ = ["LedgerRepositoryPort"]
