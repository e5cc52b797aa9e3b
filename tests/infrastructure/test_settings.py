"""Tests for infrastructure settings."""

from unittest.mock import MagicMock

from finledger.infrastructure import settings as settings_module
from finledger.infrastructure.settings import LedgerSettings


def _quiet(monkeypatch) -> MagicMock:
    logger = MagicMock()
    monkeypatch.setattr(settings_module, "get_app_logger", lambda: logger)
    return logger


def test_from_env_defaults(monkeypatch) -> None:
    """Without variables the defaults apply."""
    _quiet(monkeypatch)
    for name in (
        "FINLEDGER_DEFAULT_BASE_CURRENCY",
        "FINLEDGER_BRIDGE_CURRENCIES",
        "FINLEDGER_HISTORY_MONTHS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = LedgerSettings.from_env()

    assert settings.default_base_currency == "CNY"
    assert settings.bridge_currencies == ()
    assert settings.history_months == 12


def test_from_env_normalizes_values(monkeypatch) -> None:
    """Currency codes are upper-cased and de-duplicated."""
    _quiet(monkeypatch)
    monkeypatch.setenv("FINLEDGER_DEFAULT_BASE_CURRENCY", " eur ")
    monkeypatch.setenv("FINLEDGER_BRIDGE_CURRENCIES", "usd, ,EUR,usd")
    monkeypatch.setenv("FINLEDGER_HISTORY_MONTHS", "24")

    settings = LedgerSettings.from_env()

    assert settings.default_base_currency == "EUR"
    assert settings.bridge_currencies == ("USD", "EUR")
    assert settings.history_months == 24


def test_from_env_caps_history_months(monkeypatch) -> None:
    """History longer than five years is capped with a warning."""
    logger = _quiet(monkeypatch)
    monkeypatch.setenv("FINLEDGER_HISTORY_MONTHS", "120")

    settings = LedgerSettings.from_env()

    assert settings.history_months == 60
    logger.warning.assert_called_once()


def test_from_env_ignores_invalid_months(monkeypatch) -> None:
    """Non-numeric values fall back to the default."""
    logger = _quiet(monkeypatch)
    monkeypatch.setenv("FINLEDGER_HISTORY_MONTHS", "lots")

    settings = LedgerSettings.from_env()

    assert settings.history_months == 12
    logger.warning.assert_called_once()
