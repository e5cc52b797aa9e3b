"""Use case to compute the net worth of a user."""

from datetime import date

from finledger.application.ports.ledger_repository import LedgerRepositoryPort
from finledger.application.services.aggregation import AggregationEngine
from finledger.application.use_cases.ledger_snapshot import (
    load_ledger_snapshot,
)
from finledger.domain.models import NetWorthSummary
from finledger.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)


class GetNetWorthSummaryUseCase:
    """Compute assets, liabilities and net worth in the base currency."""

    def __init__(
        self,
        ledger_repository: LedgerRepositoryPort,
        aggregation_engine: AggregationEngine,
        logger=None,
        usage_logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            ledger_repository: Port providing ledger records.
            aggregation_engine: Engine building the rollups.
            logger: Optional logger compatible with logging.Logger-like API.
            usage_logger: Optional logger recording report requests.
        """
        self._ledger_repository = ledger_repository
        self._aggregation_engine = aggregation_engine
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()

    async def execute(
        self,
        user_id: str,
        as_of_date: date | None = None,
        base_currency: str | None = None,
    ) -> NetWorthSummary:
        """Return the net worth summary.

        Args:
            user_id: Owner of the ledger.
            as_of_date: Balance cutoff, today when None.
            base_currency: Optional override of the user's base currency.

        Returns:
            NetWorthSummary: Asset, liability and net worth totals.
        """
        as_of = as_of_date or date.today()
        self._usage_logger.info(f"net_worth requested by {user_id} as of {as_of}")
        snapshot = await load_ledger_snapshot(
            self._ledger_repository,
            user_id,
            end_date=as_of,
        )
        currency = base_currency or snapshot.base_currency.code
        self._logger.info(
            f"Fetched {len(snapshot.accounts)} accounts for net worth of "
            f"{user_id}"
        )
        return await self._aggregation_engine.net_worth(
            user_id,
            snapshot.accounts,
            currency,
            as_of,
        )


__all__ = ["GetNetWorthSummaryUseCase"]
