"""Use case to compute the cash flow statement for a period."""

from datetime import date

from finledger.application.ports.ledger_repository import LedgerRepositoryPort
from finledger.application.services.aggregation import AggregationEngine
from finledger.application.use_cases.ledger_snapshot import (
    load_ledger_snapshot,
)
from finledger.domain.models import CashFlowStatement
from finledger.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)


class GetCashflowUseCase:
    """Compute income and expense totals with their category trees."""

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
        start_date: date | None = None,
        end_date: date | None = None,
        base_currency: str | None = None,
        today: date | None = None,
    ) -> CashFlowStatement:
        """Return the cash flow statement for the period.

        Args:
            user_id: Owner of the ledger.
            start_date: Optional inclusive period start.
            end_date: Optional inclusive period end.
            base_currency: Optional override of the user's base currency.
            today: Reference date, the current date when None.

        Returns:
            CashFlowStatement: Summary totals and category trees.
        """
        reference = today or date.today()
        self._usage_logger.info(
            f"cash_flow requested by {user_id} for {start_date}..{end_date}"
        )
        snapshot = await load_ledger_snapshot(
            self._ledger_repository,
            user_id,
            end_date=min(end_date or reference, reference),
            include_categories=True,
        )
        currency = base_currency or snapshot.base_currency.code
        self._logger.info(
            f"Fetched {len(snapshot.accounts)} accounts for cash flow of "
            f"{user_id} in {currency}"
        )
        return await self._aggregation_engine.cash_flow_statement(
            user_id,
            snapshot.accounts,
            snapshot.categories,
            currency,
            period_start=start_date,
            period_end=end_date,
            today=reference,
        )


__all__ = ["GetCashflowUseCase"]
