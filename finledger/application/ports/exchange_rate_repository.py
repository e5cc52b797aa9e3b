"""Port for reading stored exchange rates."""

from datetime import date
from typing import Protocol

from finledger.domain.models import ExchangeRateRow


class ExchangeRateRepositoryPort(Protocol):
    """Port exposing a user's exchange rate table."""

    def fetch_rates(
        self,
        user_id: str,
        as_of_date: date,
    ) -> list[ExchangeRateRow]:
        """Return every rate effective on or before ``as_of_date``."""


__all__ = ["ExchangeRateRepositoryPort"]
