"""Use case to list account balances converted to the base currency."""

from datetime import date

from finledger.application.ports.ledger_repository import LedgerRepositoryPort
from finledger.application.services.aggregation import AggregationEngine
from finledger.application.use_cases.ledger_snapshot import (
    load_ledger_snapshot,
)
from finledger.domain.models import AccountBalanceLine
from finledger.infrastructure.logging.logger import get_app_logger


class GetAccountBalancesUseCase:
    """Return every account balance with its base currency value."""

    def __init__(
        self,
        ledger_repository: LedgerRepositoryPort,
        aggregation_engine: AggregationEngine,
        logger=None,
    ) -> None:
        self._ledger_repository = ledger_repository
        self._aggregation_engine = aggregation_engine
        self._logger = logger or get_app_logger()

    async def execute(
        self,
        user_id: str,
        as_of_date: date | None = None,
    ) -> list[AccountBalanceLine]:
        """Return converted balances in account order.

        Args:
            user_id: Owner of the ledger.
            as_of_date: Balance cutoff, today when None.

        Returns:
            list[AccountBalanceLine]: One line per account and currency.
        """
        as_of = as_of_date or date.today()
        snapshot = await load_ledger_snapshot(
            self._ledger_repository,
            user_id,
            end_date=as_of,
        )
        lines = await self._aggregation_engine.account_balances(
            user_id,
            snapshot.accounts,
            snapshot.base_currency.code,
            as_of,
        )
        self._logger.info(
            f"Fetched {len(lines)} account balances for {user_id}"
        )
        return lines


__all__ = ["GetAccountBalancesUseCase"]
