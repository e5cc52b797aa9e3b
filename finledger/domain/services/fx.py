"""Domain services for exchange rate resolution.

Rates are resolved with a bounded list of strategies tried in order:
identity, direct, inverse and a two-hop bridge through one intermediate
currency. No longer paths are searched.
"""

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from logging import Logger
from typing import Callable

from finledger.domain.models import ExchangeRateRow, ResolvedRate
from finledger.domain.services.normalization import normalize_currency_code


class RateTable:
    """Stored exchange rates indexed by currency pair."""

    def __init__(
        self,
        rows: Iterable[ExchangeRateRow],
        logger: Logger | None = None,
    ) -> None:
        """Index rate rows, skipping the ones that cannot be used.

        Args:
            rows: Stored exchange rates in any order.
            logger: Logger used for warnings about skipped rows.
        """
        self._pairs: dict[tuple[str, str], list[ExchangeRateRow]] = {}
        for row in rows:
            from_code = normalize_currency_code(row.from_currency)
            to_code = normalize_currency_code(row.to_currency)
            if not from_code or not to_code or from_code == to_code:
                continue
            if row.rate is None or row.rate <= 0:
                if logger is not None:
                    logger.warning(
                        f"Skipping non-positive exchange rate {row.rate} "
                        f"for {from_code} to {to_code}"
                    )
                continue
            self._pairs.setdefault((from_code, to_code), []).append(row)
        for pair_rows in self._pairs.values():
            pair_rows.sort(key=lambda item: item.effective_date, reverse=True)

    def latest(
        self,
        from_currency: str,
        to_currency: str,
        as_of_date: date,
    ) -> ExchangeRateRow | None:
        """Return the most recent rate effective on or before the date."""
        for row in self._pairs.get((from_currency, to_currency), ()):
            if row.effective_date <= as_of_date:
                return row
        return None

    def currencies(self) -> set[str]:
        """Return every currency code present in the table."""
        codes: set[str] = set()
        for from_code, to_code in self._pairs:
            codes.add(from_code)
            codes.add(to_code)
        return codes

    def __len__(self) -> int:
        return sum(len(rows) for rows in self._pairs.values())


RateStrategy = Callable[
    [RateTable, str, str, date, Sequence[str]],
    ResolvedRate | None,
]


def identity_rate(
    table: RateTable,
    from_currency: str,
    to_currency: str,
    as_of_date: date,
    bridge_currencies: Sequence[str] = (),
) -> ResolvedRate | None:
    if from_currency != to_currency:
        return None
    return ResolvedRate(
        from_currency=from_currency,
        to_currency=to_currency,
        rate=Decimal("1"),
        effective_date=None,
        method="identity",
    )


def direct_rate(
    table: RateTable,
    from_currency: str,
    to_currency: str,
    as_of_date: date,
    bridge_currencies: Sequence[str] = (),
) -> ResolvedRate | None:
    row = table.latest(from_currency, to_currency, as_of_date)
    if row is None:
        return None
    return ResolvedRate(
        from_currency=from_currency,
        to_currency=to_currency,
        rate=row.rate,
        effective_date=row.effective_date,
        method="direct",
    )


def inverse_rate(
    table: RateTable,
    from_currency: str,
    to_currency: str,
    as_of_date: date,
    bridge_currencies: Sequence[str] = (),
) -> ResolvedRate | None:
    row = table.latest(to_currency, from_currency, as_of_date)
    if row is None:
        return None
    return ResolvedRate(
        from_currency=from_currency,
        to_currency=to_currency,
        rate=Decimal("1") / row.rate,
        effective_date=row.effective_date,
        method="inverse",
    )


def bridged_rate(
    table: RateTable,
    from_currency: str,
    to_currency: str,
    as_of_date: date,
    bridge_currencies: Sequence[str] = (),
) -> ResolvedRate | None:
    """Compose two single-hop rates through an intermediate currency.

    Preferred bridges are tried first, then every other currency of the
    table in alphabetical order.
    """
    candidates = list(dict.fromkeys(bridge_currencies))
    candidates += sorted(table.currencies() - set(candidates))
    for via in candidates:
        if via in (from_currency, to_currency):
            continue
        first_leg = _single_hop(table, from_currency, via, as_of_date)
        if first_leg is None:
            continue
        second_leg = _single_hop(table, via, to_currency, as_of_date)
        if second_leg is None:
            continue
        return ResolvedRate(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=first_leg.rate * second_leg.rate,
            effective_date=min(
                first_leg.effective_date,
                second_leg.effective_date,
            ),
            method="bridge",
            via=via,
        )
    return None


RATE_STRATEGIES: tuple[RateStrategy, ...] = (
    identity_rate,
    direct_rate,
    inverse_rate,
    bridged_rate,
)


def resolve_rate(
    table: RateTable,
    from_currency: str,
    to_currency: str,
    as_of_date: date,
    bridge_currencies: Sequence[str] = (),
) -> ResolvedRate | None:
    """Resolve the rate converting ``from_currency`` into ``to_currency``.

    Args:
        table: Stored rates.
        from_currency: Normalized source currency code.
        to_currency: Normalized target currency code.
        as_of_date: Only rates effective on or before this date are used.
        bridge_currencies: Intermediate currencies to try first.

    Returns:
        ResolvedRate | None: First rate found, or None when no strategy
        applies.
    """
    for strategy in RATE_STRATEGIES:
        resolved = strategy(
            table,
            from_currency,
            to_currency,
            as_of_date,
            bridge_currencies,
        )
        if resolved is not None:
            return resolved
    return None


def _single_hop(
    table: RateTable,
    from_currency: str,
    to_currency: str,
    as_of_date: date,
) -> ResolvedRate | None:
    return direct_rate(
        table, from_currency, to_currency, as_of_date
    ) or inverse_rate(table, from_currency, to_currency, as_of_date)


__all__ = [
    "RateTable",
    "RATE_STRATEGIES",
    "identity_rate",
    "direct_rate",
    "inverse_rate",
    "bridged_rate",
    "resolve_rate",
]
