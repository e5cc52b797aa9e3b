"""Tests for the AggregationEngine."""

import asyncio
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

from finledger.application.services.aggregation import AggregationEngine
from finledger.application.services.currency_conversion import (
    CurrencyConversionService,
)
from finledger.domain.models import (
    Account,
    Category,
    CurrencyRef,
    ExchangeRateRow,
    Transaction,
)
from finledger.utils.serialization import to_payload

TODAY = date(2024, 3, 20)
CATEGORIES = {
    "ASSET": Category(id="assets", name="Assets", account_type="ASSET"),
    "LIABILITY": Category(
        id="liabilities", name="Liabilities", account_type="LIABILITY"
    ),
    "INCOME": Category(id="income", name="Income", account_type="INCOME"),
    "EXPENSE": Category(id="expense", name="Expense", account_type="EXPENSE"),
}


class _FakeRateRepository:
    def __init__(self, rows: list[ExchangeRateRow]) -> None:
        self._rows = rows
        self.calls = 0

    def fetch_rates(self, user_id: str, as_of_date: date):
        self.calls += 1
        return [row for row in self._rows if row.effective_date <= as_of_date]


class _FailingRateRepository:
    def fetch_rates(self, user_id: str, as_of_date: date):
        raise RuntimeError("rate store down")


def _rates() -> list[ExchangeRateRow]:
    return [
        ExchangeRateRow(
            from_currency="USD",
            to_currency="CNY",
            rate=Decimal("7"),
            effective_date=date(2024, 1, 1),
        )
    ]


def _account(
    account_id: str,
    account_type: str | None,
    entries: list[tuple[str, str, date, str]],
    category: Category | None = None,
) -> Account:
    transactions = tuple(
        Transaction(
            id=f"{account_id}-{index}",
            account_id=account_id,
            currency=CurrencyRef(code=currency),
            transaction_type=kind,
            amount=Decimal(amount),
            date=day,
            description="entry",
        )
        for index, (kind, amount, day, currency) in enumerate(entries)
    )
    if category is None:
        category = (
            CATEGORIES[account_type]
            if account_type
            else Category(id="misc", name="Misc", account_type=None)
        )
    return Account(
        id=account_id,
        name=account_id.title(),
        category=category,
        currency=CurrencyRef(code=entries[0][3] if entries else "CNY"),
        transactions=transactions,
    )


def _ledger() -> list[Account]:
    return [
        _account("bank", "ASSET", [("BALANCE", "1000", date(2024, 1, 1), "CNY")]),
        _account("broker", "ASSET", [("BALANCE", "100", date(2024, 1, 1), "USD")]),
        _account("empty", "ASSET", [("BALANCE", "0", date(2024, 1, 1), "CNY")]),
        _account("card", "LIABILITY", [("BALANCE", "300", date(2024, 2, 1), "CNY")]),
        _account(
            "salary",
            "INCOME",
            [
                ("INCOME", "4000", date(2024, 2, 28), "CNY"),
                ("INCOME", "5000", date(2024, 3, 1), "CNY"),
                ("EXPENSE", "120", date(2024, 3, 2), "CNY"),
                ("INCOME", "999", date(2024, 3, 25), "CNY"),
            ],
        ),
        _account(
            "food",
            "EXPENSE",
            [
                ("EXPENSE", "200", date(2024, 3, 3), "CNY"),
                ("EXPENSE", "10", date(2024, 3, 4), "USD"),
            ],
        ),
    ]


def _engine(repository=None) -> AggregationEngine:
    logger = MagicMock()
    service = CurrencyConversionService(
        repository or _FakeRateRepository(_rates()),
        logger=logger,
    )
    return AggregationEngine(service, logger=logger)


def test_net_worth_converts_and_drops_zero_accounts() -> None:
    """Assets are converted, zero accounts ignored, liabilities subtracted."""
    summary = asyncio.run(
        _engine().net_worth("user-1", _ledger(), "CNY", TODAY)
    )

    assert summary.total_assets == Decimal("1700")
    assert summary.total_liabilities == Decimal("300")
    assert summary.net_worth == Decimal("1400")
    assert summary.assets.account_count == 2
    assert list(summary.assets.by_currency) == ["CNY", "USD"]
    assert summary.assets.by_currency["USD"].exchange_rate == Decimal("7")
    assert not summary.has_conversion_errors


def test_net_worth_identity_holds_with_missing_rate() -> None:
    """A missing rate flags the rollup and keeps the original amount."""
    accounts = _ledger() + [
        _account("pounds", "ASSET", [("BALANCE", "10", date(2024, 1, 1), "GBP")])
    ]

    summary = asyncio.run(_engine().net_worth("user-1", accounts, "CNY", TODAY))

    assert summary.has_conversion_errors
    assert summary.assets.by_currency["GBP"].success is False
    assert summary.total_assets == Decimal("1710")
    assert summary.net_worth == summary.total_assets - summary.total_liabilities


def test_conversion_exception_keeps_base_currency_balances() -> None:
    """A failing batch keeps base balances and zeroes foreign ones."""
    engine = _engine(_FailingRateRepository())

    summary = asyncio.run(engine.net_worth("user-1", _ledger(), "CNY", TODAY))

    assert summary.total_assets == Decimal("1000")
    assert summary.assets.has_conversion_errors
    assert summary.assets.by_currency["USD"].converted_amount == Decimal("0")
    assert summary.assets.by_currency["CNY"].success
    assert summary.total_liabilities == Decimal("300")
    assert not summary.liabilities.has_conversion_errors
    assert summary.net_worth == Decimal("700")


def test_cash_flow_defaults_to_current_month() -> None:
    """Only this month's matching transactions up to today count."""
    summary = asyncio.run(
        _engine().cash_flow("user-1", _ledger(), "CNY", today=TODAY)
    )

    assert summary.period_start == date(2024, 3, 1)
    assert summary.period_end == TODAY
    assert summary.total_income == Decimal("5000")
    assert summary.total_expense == Decimal("270")
    assert summary.net_cash_flow == Decimal("4730")


def test_cash_flow_with_explicit_period() -> None:
    """Explicit bounds override the default month."""
    summary = asyncio.run(
        _engine().cash_flow(
            "user-1",
            _ledger(),
            "CNY",
            period_start=date(2024, 2, 1),
            period_end=date(2024, 2, 29),
            today=TODAY,
        )
    )

    assert summary.total_income == Decimal("4000")
    assert summary.total_expense == Decimal("0")


def test_balance_sheet_builds_category_trees() -> None:
    """Category totals match the rollups they come from."""
    bank_category = Category(
        id="banks", name="Banks", account_type=None, parent_id="assets"
    )
    categories = list(CATEGORIES.values()) + [bank_category]
    accounts = _ledger() + [
        _account(
            "savings",
            "ASSET",
            [("BALANCE", "50", date(2024, 1, 1), "CNY")],
            category=Category(
                id="banks", name="Banks", account_type="ASSET", parent_id="assets"
            ),
        )
    ]

    sheet = asyncio.run(
        _engine().balance_sheet("user-1", accounts, categories, "CNY", TODAY)
    )

    assert [node.category_id for node in sheet.asset_categories] == ["assets"]
    root = sheet.asset_categories[0]
    assert root.total == sheet.summary.total_assets == Decimal("1750")
    assert root.children[0].total == Decimal("50")
    assert sheet.liability_categories[0].total == Decimal("300")
    assert len(sheet.accounts) == 4
    assert sheet.validation.accounts_checked == len(accounts)


def test_cash_flow_statement_reports_mismatch() -> None:
    """The misplaced expense is excluded and reported as a warning."""
    statement = asyncio.run(
        _engine().cash_flow_statement(
            "user-1",
            _ledger(),
            list(CATEGORIES.values()),
            "CNY",
            today=TODAY,
        )
    )

    assert statement.income_categories[0].total == Decimal("5000")
    assert statement.expense_categories[0].total == Decimal("270")
    mismatches = [
        issue
        for issue in statement.validation.warnings
        if issue.code == "type_mismatch"
    ]
    assert [issue.account_id for issue in mismatches] == ["salary"]


def test_dashboard_summary_counts_accounts() -> None:
    """The dashboard combines net worth, cash flow and counts."""
    accounts = _ledger() + [
        _account("loose", None, [("BALANCE", "5", date(2024, 1, 1), "CNY")])
    ]

    summary = asyncio.run(
        _engine().dashboard_summary("user-1", accounts, "CNY", today=TODAY)
    )

    assert summary.net_worth.net_worth == Decimal("1405")
    assert summary.missing_rates == ()
    assert summary.net_cash_flow == Decimal("4730")
    assert summary.account_counts == {
        "ASSET": 3,
        "LIABILITY": 1,
        "INCOME": 1,
        "EXPENSE": 1,
        "UNTYPED": 1,
        "TOTAL": 7,
    }
    assert summary.validation.categories_without_type == 1


def test_untyped_accounts_count_as_assets() -> None:
    """Money in untyped or unknown-type accounts is never dropped."""
    accounts = _ledger() + [
        _account("loose", None, [("BALANCE", "500", date(2024, 1, 1), "CNY")]),
        _account(
            "shares",
            "EQUITY",
            [("BALANCE", "50", date(2024, 1, 1), "CNY")],
            category=Category(id="equity", name="Equity", account_type="EQUITY"),
        ),
    ]

    sheet = asyncio.run(
        _engine().balance_sheet(
            "user-1",
            accounts,
            list(CATEGORIES.values()),
            "CNY",
            TODAY,
        )
    )

    assert sheet.summary.total_assets == Decimal("2250")
    assert sheet.summary.net_worth == Decimal("1950")
    assert sheet.summary.assets.account_count == 4
    assert {
        line.account_id: line.account_type
        for line in sheet.accounts
        if line.account_id in {"loose", "shares"}
    } == {"loose": None, "shares": "EQUITY"}
    flagged = {
        issue.account_id
        for issue in sheet.validation.errors
        if issue.code == "missing_account_type"
    }
    assert flagged == {"loose", "shares"}


def test_dashboard_summary_lists_missing_rates() -> None:
    """Currencies held without any rate path are reported on the dashboard."""
    accounts = _ledger() + [
        _account("travel", "ASSET", [("BALANCE", "80", date(2024, 1, 1), "EUR")]),
        _account("spent", "ASSET", [("BALANCE", "0", date(2024, 1, 1), "JPY")]),
    ]

    summary = asyncio.run(
        _engine().dashboard_summary("user-1", accounts, "CNY", today=TODAY)
    )

    assert summary.missing_rates == (("EUR", "CNY"),)
    assert summary.has_conversion_errors
    payload = to_payload(summary)
    assert payload["missingRates"] == [["EUR", "CNY"]]
    assert payload["netWorth"]["netWorth"] == 1480.0


def test_dashboard_summary_survives_rate_store_failure() -> None:
    """A failing rate store leaves the missing rate list empty."""
    summary = asyncio.run(
        _engine(_FailingRateRepository()).dashboard_summary(
            "user-1", _ledger(), "CNY", today=TODAY
        )
    )

    assert summary.missing_rates == ()
    assert summary.has_conversion_errors


def test_monthly_history_evaluates_each_month() -> None:
    """Each month uses its own end date and cash flow window."""
    points = asyncio.run(
        _engine().monthly_history("user-1", _ledger(), "CNY", 3, today=TODAY)
    )

    assert [point.month for point in points] == ["2024-01", "2024-02", "2024-03"]
    january, february, march = points
    assert january.total_liabilities == Decimal("0")
    assert january.net_worth == Decimal("1700")
    assert february.net_worth == Decimal("1400")
    assert february.monthly_income == Decimal("4000")
    assert march.monthly_income == Decimal("5000")
    assert march.monthly_expense == Decimal("270")
    assert march.net_cash_flow == Decimal("4730")
    assert not any(point.has_conversion_errors for point in points)


def test_monthly_history_is_capped() -> None:
    """The series never exceeds the configured maximum."""
    logger = MagicMock()
    engine = AggregationEngine(
        CurrencyConversionService(_FakeRateRepository([]), logger=logger),
        logger=logger,
        max_history_months=2,
    )

    points = asyncio.run(engine.monthly_history("user-1", [], "CNY", 12, today=TODAY))

    assert [point.month for point in points] == ["2024-02", "2024-03"]


def test_account_balances_lists_every_account() -> None:
    """Account lines include flow totals over the whole history."""
    lines = asyncio.run(
        _engine().account_balances("user-1", _ledger(), "CNY", TODAY)
    )
    by_account = {}
    for line in lines:
        by_account.setdefault(line.account_id, []).append(line)

    assert by_account["broker"][0].contribution == Decimal("700")
    assert by_account["salary"][0].balance.amount == Decimal("9000")
    assert by_account["empty"][0].balance.amount == Decimal("0")
    assert {line.balance.currency_code for line in by_account["food"]} == {
        "CNY",
        "USD",
    }
