"""Use case to build the balance sheet of a user."""

from datetime import date

from finledger.application.ports.ledger_repository import LedgerRepositoryPort
from finledger.application.services.aggregation import AggregationEngine
from finledger.application.use_cases.ledger_snapshot import (
    load_ledger_snapshot,
)
from finledger.domain.models import BalanceSheet
from finledger.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)


class GetBalanceSheetUseCase:
    """Build asset and liability category trees as of a date."""

    def __init__(
        self,
        ledger_repository: LedgerRepositoryPort,
        aggregation_engine: AggregationEngine,
        logger=None,
        usage_logger=None,
    ) -> None:
        self._ledger_repository = ledger_repository
        self._aggregation_engine = aggregation_engine
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()

    async def execute(
        self,
        user_id: str,
        as_of_date: date | None = None,
        base_currency: str | None = None,
    ) -> BalanceSheet:
        """Return the balance sheet.

        Args:
            user_id: Owner of the ledger.
            as_of_date: Balance cutoff, today when None.
            base_currency: Optional override of the user's base currency.

        Returns:
            BalanceSheet: Net worth summary with category trees.
        """
        as_of = as_of_date or date.today()
        self._usage_logger.info(
            f"balance_sheet requested by {user_id} as of {as_of}"
        )
        snapshot = await load_ledger_snapshot(
            self._ledger_repository,
            user_id,
            end_date=as_of,
            include_categories=True,
        )
        currency = base_currency or snapshot.base_currency.code
        self._logger.info(
            f"Fetched {len(snapshot.accounts)} accounts and "
            f"{len(snapshot.categories)} categories for balance sheet of "
            f"{user_id}"
        )
        return await self._aggregation_engine.balance_sheet(
            user_id,
            snapshot.accounts,
            snapshot.categories,
            currency,
            as_of,
        )


__all__ = ["GetBalanceSheetUseCase"]
