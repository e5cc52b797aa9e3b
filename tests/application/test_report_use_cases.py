"""Tests for the report use cases."""

import asyncio
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

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
from finledger.domain.models import (
    Account,
    Category,
    CurrencyRef,
    ExchangeRateRow,
    Transaction,
)

TODAY = date(2024, 3, 20)


class _FakeLedgerRepository:
    def __init__(self, accounts: list[Account], base: str = "CNY") -> None:
        self._accounts = accounts
        self._base = base
        self.account_calls: list[tuple[str, date | None]] = []
        self.category_calls: list[str] = []

    def fetch_accounts(self, user_id: str, end_date: date | None = None):
        self.account_calls.append((user_id, end_date))
        return self._accounts

    def fetch_categories(self, user_id: str):
        self.category_calls.append(user_id)
        return list({account.category.id: account.category for account in self._accounts}.values())

    def fetch_base_currency(self, user_id: str) -> CurrencyRef:
        return CurrencyRef(code=self._base)


class _FakeRateRepository:
    def fetch_rates(self, user_id: str, as_of_date: date):
        return [
            ExchangeRateRow(
                from_currency="USD",
                to_currency="CNY",
                rate=Decimal("7"),
                effective_date=date(2024, 1, 1),
            ),
            ExchangeRateRow(
                from_currency="USD",
                to_currency="EUR",
                rate=Decimal("0.5"),
                effective_date=date(2024, 1, 1),
            ),
        ]


def _accounts() -> list[Account]:
    def tx(account_id, kind, amount, day, currency="CNY"):
        return Transaction(
            id=f"{account_id}-{kind}-{day}",
            account_id=account_id,
            currency=CurrencyRef(code=currency),
            transaction_type=kind,
            amount=Decimal(amount),
            date=day,
            description="entry",
        )

    return [
        Account(
            id="wallet",
            name="Wallet",
            category=Category(id="assets", name="Assets", account_type="ASSET"),
            currency=CurrencyRef(code="USD"),
            transactions=(tx("wallet", "BALANCE", "100", date(2024, 1, 2), "USD"),),
        ),
        Account(
            id="salary",
            name="Salary",
            category=Category(id="income", name="Income", account_type="INCOME"),
            currency=CurrencyRef(code="CNY"),
            transactions=(tx("salary", "INCOME", "3000", date(2024, 3, 5)),),
        ),
    ]


def _engine() -> AggregationEngine:
    logger = MagicMock()
    return AggregationEngine(
        CurrencyConversionService(_FakeRateRepository(), logger=logger),
        logger=logger,
    )


def test_net_worth_use_case_uses_user_base_currency() -> None:
    """The base currency comes from the repository by default."""
    repository = _FakeLedgerRepository(_accounts())
    usage_logger = MagicMock()
    use_case = GetNetWorthSummaryUseCase(
        repository,
        _engine(),
        logger=MagicMock(),
        usage_logger=usage_logger,
    )

    summary = asyncio.run(use_case.execute("user-1", as_of_date=TODAY))

    assert summary.currency_code == "CNY"
    assert summary.net_worth == Decimal("700")
    assert repository.account_calls == [("user-1", TODAY)]
    usage_logger.info.assert_called_once()


def test_net_worth_use_case_accepts_currency_override() -> None:
    """An explicit base currency overrides the user setting."""
    use_case = GetNetWorthSummaryUseCase(
        _FakeLedgerRepository(_accounts()),
        _engine(),
        logger=MagicMock(),
        usage_logger=MagicMock(),
    )

    summary = asyncio.run(
        use_case.execute("user-1", as_of_date=TODAY, base_currency="eur")
    )

    assert summary.currency_code == "EUR"
    assert summary.total_assets == Decimal("50")


def test_balance_sheet_use_case_reads_categories() -> None:
    """The balance sheet needs the category tree."""
    repository = _FakeLedgerRepository(_accounts())
    use_case = GetBalanceSheetUseCase(
        repository,
        _engine(),
        logger=MagicMock(),
        usage_logger=MagicMock(),
    )

    sheet = asyncio.run(use_case.execute("user-1", as_of_date=TODAY))

    assert repository.category_calls == ["user-1"]
    assert sheet.asset_categories[0].total == Decimal("700")


def test_cashflow_use_case_delegates_period() -> None:
    """The requested period is passed to the engine."""
    repository = _FakeLedgerRepository(_accounts())
    engine = MagicMock()
    engine.cash_flow_statement = AsyncMock(return_value="statement")
    use_case = GetCashflowUseCase(
        repository,
        engine,
        logger=MagicMock(),
        usage_logger=MagicMock(),
    )

    result = asyncio.run(
        use_case.execute(
            "user-1",
            start_date=date(2024, 2, 1),
            end_date=date(2024, 2, 29),
            today=TODAY,
        )
    )

    assert result == "statement"
    assert repository.account_calls == [("user-1", date(2024, 2, 29))]
    kwargs = engine.cash_flow_statement.call_args.kwargs
    assert kwargs["period_start"] == date(2024, 2, 1)
    assert kwargs["period_end"] == date(2024, 2, 29)
    assert kwargs["today"] == TODAY


def test_dashboard_use_case_returns_summary() -> None:
    """The dashboard combines net worth and this month's cash flow."""
    use_case = GetDashboardSummaryUseCase(
        _FakeLedgerRepository(_accounts()),
        _engine(),
        logger=MagicMock(),
        usage_logger=MagicMock(),
    )

    summary = asyncio.run(use_case.execute("user-1", today=TODAY))

    assert summary.net_worth.net_worth == Decimal("700")
    assert summary.cash_flow.total_income == Decimal("3000")
    assert summary.account_counts["TOTAL"] == 2


def test_monthly_history_use_case_uses_default_length() -> None:
    """Without a requested length the configured default is used."""
    use_case = GetMonthlyHistoryUseCase(
        _FakeLedgerRepository(_accounts()),
        _engine(),
        logger=MagicMock(),
        usage_logger=MagicMock(),
        default_months=2,
    )

    points = asyncio.run(use_case.execute("user-1", today=TODAY))

    assert [point.month for point in points] == ["2024-02", "2024-03"]
    assert points[-1].monthly_income == Decimal("3000")


def test_account_balances_use_case_lists_lines() -> None:
    """Every account balance is returned with its conversion."""
    use_case = GetAccountBalancesUseCase(
        _FakeLedgerRepository(_accounts()),
        _engine(),
        logger=MagicMock(),
    )

    lines = asyncio.run(use_case.execute("user-1", as_of_date=TODAY))

    assert [line.account_id for line in lines] == ["wallet", "salary"]
    assert lines[0].contribution == Decimal("700")
