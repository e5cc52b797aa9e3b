"""Use case to compute the monthly net worth and cash flow series."""

from datetime import date

from finledger.application.ports.ledger_repository import LedgerRepositoryPort
from finledger.application.services.aggregation import AggregationEngine
from finledger.application.use_cases.ledger_snapshot import (
    load_ledger_snapshot,
)
from finledger.domain.models import MonthlyDataPoint
from finledger.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)

DEFAULT_HISTORY_MONTHS = 12


class GetMonthlyHistoryUseCase:
    """Compute one data point per month, oldest first."""

    def __init__(
        self,
        ledger_repository: LedgerRepositoryPort,
        aggregation_engine: AggregationEngine,
        logger=None,
        usage_logger=None,
        default_months: int = DEFAULT_HISTORY_MONTHS,
    ) -> None:
        """Initialize the use case.

        Args:
            ledger_repository: Port providing ledger records.
            aggregation_engine: Engine building the rollups.
            logger: Optional logger compatible with logging.Logger-like API.
            usage_logger: Optional logger recording report requests.
            default_months: Series length used when none is requested.
        """
        self._ledger_repository = ledger_repository
        self._aggregation_engine = aggregation_engine
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()
        self._default_months = default_months

    async def execute(
        self,
        user_id: str,
        months: int | None = None,
        today: date | None = None,
    ) -> list[MonthlyDataPoint]:
        """Return the monthly series.

        Args:
            user_id: Owner of the ledger.
            months: Requested number of months.
            today: Reference date, the current date when None.

        Returns:
            list[MonthlyDataPoint]: Month-end figures, oldest first.
        """
        reference = today or date.today()
        requested = months or self._default_months
        self._usage_logger.info(
            f"monthly_history requested by {user_id} for {requested} months"
        )
        snapshot = await load_ledger_snapshot(
            self._ledger_repository,
            user_id,
            end_date=reference,
        )
        points = await self._aggregation_engine.monthly_history(
            user_id,
            snapshot.accounts,
            snapshot.base_currency.code,
            requested,
            today=reference,
        )
        flagged = sum(1 for point in points if point.has_conversion_errors)
        self._logger.info(
            f"Monthly history computed for {user_id}: {len(points)} months, "
            f"{flagged} with conversion errors"
        )
        return points


__all__ = ["GetMonthlyHistoryUseCase", "DEFAULT_HISTORY_MONTHS"]
