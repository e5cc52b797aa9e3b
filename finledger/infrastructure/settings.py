"""Settings helpers for the ledger engine."""

from dataclasses import dataclass
import os

from finledger.domain.constants import MAX_HISTORY_MONTHS
from finledger.domain.services.normalization import normalize_currency_code
from finledger.infrastructure.logging.logger import get_app_logger

DEFAULT_BASE_CURRENCY = "CNY"
DEFAULT_HISTORY_MONTHS = 12


@dataclass(frozen=True)
class LedgerSettings:
    """Settings for balance aggregation.

    Attributes:
        default_base_currency: Base currency used when a user has none.
        bridge_currencies: Intermediate currencies tried first when no
            direct or inverse rate exists.
        history_months: Default length of the monthly history.
    """

    default_base_currency: str = DEFAULT_BASE_CURRENCY
    bridge_currencies: tuple[str, ...] = ()
    history_months: int = DEFAULT_HISTORY_MONTHS

    @classmethod
    def from_env(cls) -> "LedgerSettings":
        """Build settings from environment variables.

        Returns:
            LedgerSettings: Settings sourced from environment variables.
        """
        logger = get_app_logger()
        base = normalize_currency_code(
            os.getenv("FINLEDGER_DEFAULT_BASE_CURRENCY")
        )
        bridges = cls._parse_currencies(
            os.getenv("FINLEDGER_BRIDGE_CURRENCIES", "")
        )
        months = cls._parse_months(
            os.getenv("FINLEDGER_HISTORY_MONTHS"),
            logger=logger,
        )
        return cls(
            default_base_currency=base or DEFAULT_BASE_CURRENCY,
            bridge_currencies=bridges,
            history_months=months,
        )

    @staticmethod
    def _parse_currencies(raw_value: str) -> tuple[str, ...]:
        codes = (normalize_currency_code(part) for part in raw_value.split(","))
        return tuple(dict.fromkeys(code for code in codes if code))

    @staticmethod
    def _parse_months(raw_value: str | None, logger) -> int:
        """Parse the history length, bounded to the supported range.

        Args:
            raw_value: Raw environment value.
            logger: Logger used for warnings.

        Returns:
            int: Number of months between 1 and the maximum.
        """
        if not raw_value:
            return DEFAULT_HISTORY_MONTHS
        try:
            months = int(raw_value)
        except ValueError:
            logger.warning(
                f"Invalid FINLEDGER_HISTORY_MONTHS value {raw_value!r}, "
                f"using {DEFAULT_HISTORY_MONTHS}"
            )
            return DEFAULT_HISTORY_MONTHS
        if months > MAX_HISTORY_MONTHS:
            logger.warning(
                f"FINLEDGER_HISTORY_MONTHS={months} exceeds the maximum, "
                f"using {MAX_HISTORY_MONTHS}"
            )
        return max(1, min(months, MAX_HISTORY_MONTHS))


__all__ = ["LedgerSettings", "DEFAULT_BASE_CURRENCY", "DEFAULT_HISTORY_MONTHS"]
