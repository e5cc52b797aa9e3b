"""Use case to compute the dashboard summary."""

from datetime import date

from finledger.application.ports.ledger_repository import LedgerRepositoryPort
from finledger.application.services.aggregation import AggregationEngine
from finledger.application.use_cases.ledger_snapshot import (
    load_ledger_snapshot,
)
from finledger.domain.models import DashboardSummary
from finledger.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)


class GetDashboardSummaryUseCase:
    """Combine current net worth with the cash flow of the current month."""

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
        today: date | None = None,
    ) -> DashboardSummary:
        """Return the dashboard summary in the user's base currency."""
        reference = today or date.today()
        self._usage_logger.info(f"dashboard requested by {user_id}")
        snapshot = await load_ledger_snapshot(
            self._ledger_repository,
            user_id,
            end_date=reference,
        )
        summary = await self._aggregation_engine.dashboard_summary(
            user_id,
            snapshot.accounts,
            snapshot.base_currency.code,
            today=reference,
        )
        self._logger.info(
            f"Dashboard computed for {user_id}: "
            f"net_worth={summary.net_worth.net_worth}, "
            f"net_cash_flow={summary.net_cash_flow}"
        )
        return summary


__all__ = ["GetDashboardSummaryUseCase"]
