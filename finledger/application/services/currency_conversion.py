"""Currency conversion against the user's stored exchange rates."""

import asyncio
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from finledger.application.ports.exchange_rate_repository import (
    ExchangeRateRepositoryPort,
)
from finledger.domain.models import (
    ConversionItem,
    ConversionResult,
    ResolvedRate,
)
from finledger.domain.services.fx import RateTable, resolve_rate
from finledger.domain.services.normalization import require_currency_code
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.date_utils import coerce_date
from finledger.utils.decimal_utils import coerce_decimal


class CurrencyConversionService:
    """Convert amounts between currencies as of a date.

    Rates are read once per batch and resolved once per distinct
    ``(from, to, as_of)`` tuple. The service is read-only and keeps no state
    between calls.
    """

    def __init__(
        self,
        rate_repository: ExchangeRateRepositoryPort,
        logger=None,
        bridge_currencies: Iterable[str] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            rate_repository: Port providing the stored exchange rates.
            logger: Optional logger compatible with logging.Logger-like API.
            bridge_currencies: Intermediate currencies tried first when no
                direct or inverse rate exists.
        """
        self._rate_repository = rate_repository
        self._logger = logger or get_app_logger()
        self._bridge_currencies = tuple(
            require_currency_code(code) for code in (bridge_currencies or ())
        )

    async def convert(
        self,
        user_id: str,
        amount,
        from_currency: str,
        to_currency: str,
        as_of_date: date | None = None,
        *,
        bridge_currencies: Sequence[str] = (),
    ) -> ConversionResult:
        """Convert one amount.

        Args:
            user_id: Owner of the exchange rate table.
            amount: Amount in ``from_currency``.
            from_currency: Source currency code.
            to_currency: Target currency code.
            as_of_date: Rate cutoff date, today when None.
            bridge_currencies: Extra intermediate currencies tried first.

        Returns:
            ConversionResult: Converted amount, or a failed result carrying
            the original amount when no rate can be resolved.

        Raises:
            Exception: Any error raised by the rate repository.
        """
        results = await self.convert_multiple(
            user_id,
            [ConversionItem(amount=amount, currency=from_currency)],
            to_currency,
            as_of_date,
            bridge_currencies=bridge_currencies,
        )
        return results[0]

    async def convert_multiple(
        self,
        user_id: str,
        items: Sequence[ConversionItem],
        to_currency: str,
        as_of_date: date | None = None,
        *,
        bridge_currencies: Sequence[str] = (),
    ) -> list[ConversionResult]:
        """Convert a batch of amounts, preserving input order.

        Args:
            user_id: Owner of the exchange rate table.
            items: Amounts with their currency codes.
            to_currency: Target currency code.
            as_of_date: Rate cutoff date, today when None.
            bridge_currencies: Extra intermediate currencies tried first.

        Returns:
            list[ConversionResult]: One result per item.

        Raises:
            Exception: Any error raised by the rate repository.
        """
        if not items:
            return []
        target = require_currency_code(to_currency)
        as_of = coerce_date(as_of_date) or date.today()
        normalized = [
            (coerce_decimal(item.amount), require_currency_code(item.currency))
            for item in items
        ]

        table = RateTable(())
        if any(code != target for _, code in normalized):
            table = await self.load_rate_table(user_id, as_of)

        bridges = self._bridges(target, bridge_currencies)
        resolved: dict[tuple[str, str, date], ResolvedRate | None] = {}
        results = []
        for amount, code in normalized:
            key = (code, target, as_of)
            if key not in resolved:
                resolved[key] = resolve_rate(table, code, target, as_of, bridges)
                if resolved[key] is None:
                    self._logger.warning(
                        f"Missing FX rate for {code} to {target} "
                        f"as of {as_of.isoformat()}"
                    )
            results.append(
                self._build_result(amount, code, target, as_of, resolved[key])
            )
        return results

    async def find_missing_rates(
        self,
        user_id: str,
        currencies: Iterable[str],
        base_currency: str,
        as_of_date: date | None = None,
    ) -> list[tuple[str, str]]:
        """Return the currency pairs that cannot be converted to the base.

        Args:
            user_id: Owner of the exchange rate table.
            currencies: Currency codes in use.
            base_currency: Base currency code.
            as_of_date: Rate cutoff date, today when None.

        Returns:
            list[tuple[str, str]]: ``(from, to)`` pairs without a rate.
        """
        target = require_currency_code(base_currency)
        codes = sorted(
            {require_currency_code(code) for code in currencies} - {target}
        )
        if not codes:
            return []
        as_of = coerce_date(as_of_date) or date.today()
        table = await self.load_rate_table(user_id, as_of)
        bridges = self._bridges(target, ())
        return [
            (code, target)
            for code in codes
            if resolve_rate(table, code, target, as_of, bridges) is None
        ]

    async def load_rate_table(self, user_id: str, as_of_date: date) -> RateTable:
        """Read the user's rates in a worker thread and index them."""
        rows = await asyncio.to_thread(
            self._rate_repository.fetch_rates,
            user_id,
            as_of_date,
        )
        return RateTable(rows, logger=self._logger)

    def _bridges(
        self,
        target: str,
        extra: Sequence[str],
    ) -> tuple[str, ...]:
        codes = [require_currency_code(code) for code in extra]
        codes += list(self._bridge_currencies)
        codes.append(target)
        return tuple(dict.fromkeys(codes))

    @staticmethod
    def _build_result(
        amount: Decimal,
        currency: str,
        target: str,
        as_of: date,
        rate: ResolvedRate | None,
    ) -> ConversionResult:
        if rate is None:
            return ConversionResult(
                original_amount=amount,
                original_currency=currency,
                converted_amount=amount,
                target_currency=target,
                exchange_rate=None,
                success=False,
                rate_date=None,
                error=(
                    f"No exchange rate from {currency} to {target} "
                    f"on or before {as_of.isoformat()}"
                ),
            )
        return ConversionResult(
            original_amount=amount,
            original_currency=currency,
            converted_amount=amount * rate.rate,
            target_currency=target,
            exchange_rate=rate.rate,
            success=True,
            rate_date=rate.effective_date or as_of,
            method=rate.method,
            via=rate.via,
        )


__all__ = ["CurrencyConversionService"]
