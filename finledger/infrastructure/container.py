"""Composition root for wiring infrastructure adapters."""

from finledger.application.ports.database import DatabaseEnginePort
from finledger.application.ports.exchange_rate_repository import (
    ExchangeRateRepositoryPort,
)
from finledger.application.ports.ledger_repository import LedgerRepositoryPort
from finledger.application.services.aggregation import AggregationEngine
from finledger.application.services.currency_conversion import (
    CurrencyConversionService,
)
from finledger.application.use_cases import (
    GetAccountBalancesUseCase,
    GetBalanceSheetUseCase,
    GetCashflowUseCase,
    GetDashboardSummaryUseCase,
    GetMonthlyHistoryUseCase,
    GetNetWorthSummaryUseCase,
)
from finledger.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from finledger.infrastructure.exchange_rate_repository import (
    SqlAlchemyExchangeRateRepository,
)
from finledger.infrastructure.ledger_repository import (
    SqlAlchemyLedgerRepository,
)
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.infrastructure.settings import LedgerSettings


def build_database_adapter() -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter()


def build_ledger_repository(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> LedgerRepositoryPort:
    """Return the ledger repository."""
    resolved_db = db_port or build_database_adapter()
    resolved_settings = settings or LedgerSettings.from_env()
    return SqlAlchemyLedgerRepository(
        resolved_db,
        default_base_currency=resolved_settings.default_base_currency,
        logger=get_app_logger(),
    )


def build_exchange_rate_repository(
    db_port: DatabaseEnginePort | None = None,
) -> ExchangeRateRepositoryPort:
    """Return the exchange rate repository."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyExchangeRateRepository(resolved_db, logger=get_app_logger())


def build_conversion_service(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> CurrencyConversionService:
    """Return the currency conversion service."""
    resolved_settings = settings or LedgerSettings.from_env()
    return CurrencyConversionService(
        build_exchange_rate_repository(db_port),
        logger=get_app_logger(),
        bridge_currencies=resolved_settings.bridge_currencies,
    )


def build_aggregation_engine(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> AggregationEngine:
    """Return the aggregation engine."""
    return AggregationEngine(
        build_conversion_service(db_port, settings),
        logger=get_app_logger(),
    )


def build_use_cases(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> dict[str, object]:
    """Return every report use case keyed by report name.

    Args:
        db_port: Optional database adapter shared by the repositories.
        settings: Optional settings, read from the environment when None.

    Returns:
        dict[str, object]: Use cases sharing one repository and engine.
    """
    resolved_db = db_port or build_database_adapter()
    resolved_settings = settings or LedgerSettings.from_env()
    repository = build_ledger_repository(resolved_db, resolved_settings)
    engine = build_aggregation_engine(resolved_db, resolved_settings)
    return {
        "net_worth": GetNetWorthSummaryUseCase(repository, engine),
        "balance_sheet": GetBalanceSheetUseCase(repository, engine),
        "cash_flow": GetCashflowUseCase(repository, engine),
        "dashboard": GetDashboardSummaryUseCase(repository, engine),
        "monthly_history": GetMonthlyHistoryUseCase(
            repository,
            engine,
            default_months=resolved_settings.history_months,
        ),
        "account_balances": GetAccountBalancesUseCase(repository, engine),
    }


__all__ = [
    "build_database_adapter",
    "build_ledger_repository",
    "build_exchange_rate_repository",
    "build_conversion_service",
    "build_aggregation_engine",
    "build_use_cases",
]
