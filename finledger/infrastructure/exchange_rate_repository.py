"""SQLAlchemy-backed repository for stored exchange rates."""

from datetime import date

from sqlalchemy import text

from finledger.application.ports.database import DatabaseEnginePort
from finledger.application.ports.exchange_rate_repository import (
    ExchangeRateRepositoryPort,
)
from finledger.domain.constants import RATE_SOURCE_USER, RATE_SOURCES
from finledger.domain.models import ExchangeRateRow
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.date_utils import coerce_date
from finledger.utils.decimal_utils import safe_decimal


class SqlAlchemyExchangeRateRepository(ExchangeRateRepositoryPort):
    """Repository reading a user's exchange rate table."""

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the ledger engine.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._db_port = db_port
        self._logger = logger or get_app_logger()

    def fetch_rates(
        self,
        user_id: str,
        as_of_date: date,
    ) -> list[ExchangeRateRow]:
        """Return every rate effective on or before ``as_of_date``.

        Args:
            user_id: Owner of the rates.
            as_of_date: Inclusive upper bound for effective dates.

        Returns:
            list[ExchangeRateRow]: Rates, most recent first.
        """
        query = text(
            """
            SELECT r.id, r.rate, r.effective_date, r.type,
                   f.code AS from_code, t.code AS to_code
            FROM exchange_rates r
            JOIN currencies f ON f.id = r.from_currency_id
            JOIN currencies t ON t.id = r.to_currency_id
            WHERE r.user_id = :user_id
              AND r.effective_date <= :as_of_date
            ORDER BY r.effective_date DESC, r.id
            """
        )
        engine = self._db_port.get_engine()
        with engine.connect() as conn:
            rows = conn.execute(
                query,
                {"user_id": user_id, "as_of_date": as_of_date},
            ).all()

        rates = []
        for row in rows:
            rate = safe_decimal(row.rate)
            effective_date = coerce_date(row.effective_date)
            if rate is None or effective_date is None:
                self._logger.warning(
                    f"Skipping unreadable exchange rate {row.id} "
                    f"({row.from_code} to {row.to_code})"
                )
                continue
            rates.append(
                ExchangeRateRow(
                    from_currency=row.from_code,
                    to_currency=row.to_code,
                    rate=rate,
                    effective_date=effective_date,
                    source=self._to_source(row),
                    id=str(row.id),
                )
            )
        self._logger.info(
            f"Loaded {len(rates)} exchange rates for user {user_id} "
            f"as of {as_of_date}"
        )
        return rates

    def _to_source(self, row) -> str:
        source = (row.type or RATE_SOURCE_USER).strip().upper()
        if source not in RATE_SOURCES:
            self._logger.warning(
                f"Exchange rate {row.id} has unknown source {row.type!r}, "
                f"treating it as {RATE_SOURCE_USER}"
            )
            return RATE_SOURCE_USER
        return source


__all__ = ["SqlAlchemyExchangeRateRepository"]
