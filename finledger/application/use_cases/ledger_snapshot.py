"""Loading of the ledger records a report is computed from."""

import asyncio
from dataclasses import dataclass
from datetime import date

from finledger.application.ports.ledger_repository import LedgerRepositoryPort
from finledger.domain.models import Account, Category, CurrencyRef


@dataclass(frozen=True)
class LedgerSnapshot:
    """Records of one user read for a single report.

    Attributes:
        accounts: Accounts with their transactions.
        categories: Categories, empty when not requested.
        base_currency: User's base currency.
    """

    accounts: list[Account]
    categories: list[Category]
    base_currency: CurrencyRef


async def load_ledger_snapshot(
    ledger_repository: LedgerRepositoryPort,
    user_id: str,
    end_date: date | None = None,
    include_categories: bool = False,
) -> LedgerSnapshot:
    """Read accounts, categories and base currency concurrently.

    Args:
        ledger_repository: Port providing ledger records.
        user_id: Owner of the records.
        end_date: Optional upper bound passed to the account query.
        include_categories: Whether categories are read too.

    Returns:
        LedgerSnapshot: Records needed by the report.
    """
    reads = [
        asyncio.to_thread(ledger_repository.fetch_accounts, user_id, end_date),
        asyncio.to_thread(ledger_repository.fetch_base_currency, user_id),
    ]
    if include_categories:
        reads.append(
            asyncio.to_thread(ledger_repository.fetch_categories, user_id)
        )
    results = await asyncio.gather(*reads)
    return LedgerSnapshot(
        accounts=list(results[0]),
        categories=list(results[2]) if include_categories else [],
        base_currency=results[1],
    )


__all__ = ["LedgerSnapshot", "load_ledger_snapshot"]
