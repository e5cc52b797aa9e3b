"""Aggregation of account balances into base currency reports.

Every report partitions accounts by type, computes their balances, converts
the non-zero ones to the base currency in one batch per account type and
merges the converted lines into rollups. Independent batches run
concurrently.
"""

import asyncio
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from finledger.application.services.currency_conversion import (
    CurrencyConversionService,
)
from finledger.domain.constants import (
    ACCOUNT_TYPES,
    ASSET,
    EXPENSE,
    INCOME,
    LIABILITY,
    MAX_HISTORY_MONTHS,
    STOCK_ACCOUNT_TYPES,
)
from finledger.domain.models import (
    Account,
    AccountBalance,
    AccountBalanceLine,
    BalanceOptions,
    BalanceSheet,
    CashFlowStatement,
    CashflowSummary,
    Category,
    ConversionItem,
    ConversionResult,
    DashboardSummary,
    MonthlyDataPoint,
    NetWorthSummary,
    Rollup,
    ValidationReport,
)
from finledger.domain.services.balances import (
    calculate_account_balance,
    has_balance,
    is_effectively_zero,
)
from finledger.domain.services.categories import (
    build_category_totals,
    resolve_category_types,
)
from finledger.domain.services.finance import (
    compute_cashflow_summary,
    compute_net_worth_summary,
    summarize_rollup,
)
from finledger.domain.services.normalization import (
    normalize_currency_code,
    require_currency_code,
)
from finledger.domain.services.validation import (
    validate_accounts,
    validate_balance_sign,
)
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.date_utils import (
    end_of_month,
    generate_months,
    start_of_month,
)

UNTYPED = "UNTYPED"


class AggregationEngine:
    """Build net worth, cash flow and category reports in a base currency."""

    def __init__(
        self,
        conversion_service: CurrencyConversionService,
        logger=None,
        max_history_months: int = MAX_HISTORY_MONTHS,
    ) -> None:
        """Initialize the engine.

        Args:
            conversion_service: Service converting balances to the base
                currency.
            logger: Optional logger compatible with logging.Logger-like API.
            max_history_months: Upper bound for monthly history length.
        """
        self._conversion_service = conversion_service
        self._logger = logger or get_app_logger()
        self._max_history_months = max_history_months

    async def build_rollup(
        self,
        user_id: str,
        accounts: Sequence[Account],
        account_type: str,
        base_currency: str,
        options: BalanceOptions,
        conversion_date: date,
    ) -> tuple[Rollup, list[AccountBalanceLine]]:
        """Aggregate the accounts of one type in the base currency.

        Accounts whose balances are all effectively zero are left out.
        Accounts without a known type are aggregated as assets. A
        failed conversion batch keeps base currency balances, counts other
        currencies as zero and flags the rollup.

        Args:
            user_id: Owner of the accounts and rates.
            accounts: Accounts of any type.
            account_type: Account type to aggregate.
            base_currency: Target currency code.
            options: Balance reference date and period.
            conversion_date: Rate cutoff date.

        Returns:
            tuple[Rollup, list[AccountBalanceLine]]: Rollup and the converted
            lines it was built from.
        """
        base = require_currency_code(base_currency)
        pending: list[tuple[Account, AccountBalance]] = []
        for account in accounts:
            if _rollup_type(account) != account_type:
                continue
            balances = calculate_account_balance(
                account, options, logger=self._logger
            )
            if not has_balance(balances):
                continue
            for balance in balances.values():
                if is_effectively_zero(balance.amount):
                    continue
                pending.append((account, balance))

        lines, batch_failed = await self._convert_lines(
            user_id,
            pending,
            base,
            conversion_date,
            label=account_type,
        )
        rollup = summarize_rollup(
            account_type,
            base,
            lines,
            force_conversion_error=batch_failed,
        )
        if account_type in STOCK_ACCOUNT_TYPES:
            validate_balance_sign(
                account_type,
                rollup.total_in_base_currency,
                self._logger,
            )
        self._logger.info(
            f"{account_type} rollup: {rollup.account_count} accounts, "
            f"total={rollup.total_in_base_currency} {base}, "
            f"conversion_errors={rollup.has_conversion_errors}"
        )
        return rollup, lines

    async def net_worth(
        self,
        user_id: str,
        accounts: Sequence[Account],
        base_currency: str,
        as_of_date: date | None = None,
    ) -> NetWorthSummary:
        """Compute assets, liabilities and net worth as of a date.

        Args:
            user_id: Owner of the accounts and rates.
            accounts: Accounts of any type.
            base_currency: Target currency code.
            as_of_date: Balance and rate cutoff, today when None.

        Returns:
            NetWorthSummary: Totals with both rollups.
        """
        as_of = as_of_date or date.today()
        summary, _, _ = await self._net_worth_with_lines(
            user_id,
            accounts,
            base_currency,
            as_of,
        )
        return summary

    async def cash_flow(
        self,
        user_id: str,
        accounts: Sequence[Account],
        base_currency: str,
        period_start: date | None = None,
        period_end: date | None = None,
        today: date | None = None,
    ) -> CashflowSummary:
        """Compute income, expense and net cash flow over a period.

        Without any bound the period runs from the first day of the current
        month up to today. Transactions after today are never counted.

        Args:
            user_id: Owner of the accounts and rates.
            accounts: Accounts of any type.
            base_currency: Target currency code.
            period_start: Inclusive start, unbounded when None.
            period_end: Inclusive end, today when None.
            today: Reference date, the current date when None.

        Returns:
            CashflowSummary: Totals with both rollups.
        """
        summary, _, _ = await self._cash_flow_with_lines(
            user_id,
            accounts,
            base_currency,
            period_start,
            period_end,
            today or date.today(),
        )
        return summary

    async def balance_sheet(
        self,
        user_id: str,
        accounts: Sequence[Account],
        categories: Sequence[Category],
        base_currency: str,
        as_of_date: date | None = None,
    ) -> BalanceSheet:
        """Build the balance sheet with asset and liability category trees.

        Args:
            user_id: Owner of the accounts and rates.
            accounts: Accounts of any type.
            categories: Categories of the user.
            base_currency: Target currency code.
            as_of_date: Balance and rate cutoff, today when None.

        Returns:
            BalanceSheet: Summary, category trees, lines and validation.
        """
        validation = self._validate(accounts)
        as_of = as_of_date or date.today()
        summary, asset_lines, liability_lines = (
            await self._net_worth_with_lines(
                user_id,
                accounts,
                base_currency,
                as_of,
            )
        )
        category_types = resolve_category_types(categories)
        return BalanceSheet(
            summary=summary,
            asset_categories=build_category_totals(
                _categories_of_type(categories, category_types, ASSET),
                asset_lines,
            ),
            liability_categories=build_category_totals(
                _categories_of_type(categories, category_types, LIABILITY),
                liability_lines,
            ),
            accounts=asset_lines + liability_lines,
            validation=validation,
        )

    async def cash_flow_statement(
        self,
        user_id: str,
        accounts: Sequence[Account],
        categories: Sequence[Category],
        base_currency: str,
        period_start: date | None = None,
        period_end: date | None = None,
        today: date | None = None,
    ) -> CashFlowStatement:
        """Build the cash flow statement with income and expense trees.

        Args:
            user_id: Owner of the accounts and rates.
            accounts: Accounts of any type.
            categories: Categories of the user.
            base_currency: Target currency code.
            period_start: Inclusive start, unbounded when None.
            period_end: Inclusive end, today when None.
            today: Reference date, the current date when None.

        Returns:
            CashFlowStatement: Summary, category trees, lines and validation.
        """
        validation = self._validate(accounts)
        summary, income_lines, expense_lines = (
            await self._cash_flow_with_lines(
                user_id,
                accounts,
                base_currency,
                period_start,
                period_end,
                today or date.today(),
            )
        )
        category_types = resolve_category_types(categories)
        return CashFlowStatement(
            summary=summary,
            income_categories=build_category_totals(
                _categories_of_type(categories, category_types, INCOME),
                income_lines,
            ),
            expense_categories=build_category_totals(
                _categories_of_type(categories, category_types, EXPENSE),
                expense_lines,
            ),
            accounts=income_lines + expense_lines,
            validation=validation,
        )

    async def dashboard_summary(
        self,
        user_id: str,
        accounts: Sequence[Account],
        base_currency: str,
        today: date | None = None,
    ) -> DashboardSummary:
        """Combine current net worth and this month's cash flow.

        Args:
            user_id: Owner of the accounts and rates.
            accounts: Accounts of any type.
            base_currency: Target currency code.
            today: Reference date, the current date when None.

        Returns:
            DashboardSummary: Net worth, cash flow, counts, validation and
            the currencies that cannot be converted to the base currency.
        """
        validation = self._validate(accounts)
        reference = today or date.today()
        net_worth, cash_flow, missing_rates = await asyncio.gather(
            self.net_worth(user_id, accounts, base_currency, reference),
            self.cash_flow(user_id, accounts, base_currency, today=reference),
            self._missing_rates(user_id, accounts, base_currency, reference),
        )
        return DashboardSummary(
            net_worth=net_worth,
            cash_flow=cash_flow,
            account_counts=_account_counts(accounts),
            validation=validation,
            missing_rates=missing_rates,
        )

    async def monthly_history(
        self,
        user_id: str,
        accounts: Sequence[Account],
        base_currency: str,
        months: int,
        today: date | None = None,
    ) -> list[MonthlyDataPoint]:
        """Compute month-end net worth and monthly cash flow.

        Each month is evaluated at its last day, or today for the current
        month, and flagged on its own.

        Args:
            user_id: Owner of the accounts and rates.
            accounts: Accounts of any type.
            base_currency: Target currency code.
            months: Number of months, bounded by the configured maximum.
            today: Reference date, the current date when None.

        Returns:
            list[MonthlyDataPoint]: Oldest month first.
        """
        reference = today or date.today()
        month_starts = generate_months(
            months,
            reference,
            self._max_history_months,
        )
        return list(
            await asyncio.gather(
                *(
                    self._month_point(
                        user_id,
                        accounts,
                        base_currency,
                        month_start,
                        reference,
                    )
                    for month_start in month_starts
                )
            )
        )

    async def account_balances(
        self,
        user_id: str,
        accounts: Sequence[Account],
        base_currency: str,
        as_of_date: date | None = None,
    ) -> list[AccountBalanceLine]:
        """Convert the balance of every account for account listings.

        Flow accounts are summed over their whole history up to the date.

        Args:
            user_id: Owner of the accounts and rates.
            accounts: Accounts of any type.
            base_currency: Target currency code.
            as_of_date: Balance and rate cutoff, today when None.

        Returns:
            list[AccountBalanceLine]: One line per account and currency, in
            account order.
        """
        base = require_currency_code(base_currency)
        as_of = as_of_date or date.today()
        options = BalanceOptions(as_of_date=as_of, use_period_calculation=False)
        pending = [
            (account, balance)
            for account in accounts
            for balance in calculate_account_balance(
                account, options, logger=self._logger
            ).values()
        ]
        lines, _ = await self._convert_lines(
            user_id,
            pending,
            base,
            as_of,
            label="account list",
        )
        return lines

    async def _net_worth_with_lines(
        self,
        user_id: str,
        accounts: Sequence[Account],
        base_currency: str,
        as_of: date,
    ) -> tuple[NetWorthSummary, list[AccountBalanceLine], list[AccountBalanceLine]]:
        options = BalanceOptions(as_of_date=as_of)
        (assets, asset_lines), (liabilities, liability_lines) = (
            await asyncio.gather(
                self.build_rollup(
                    user_id, accounts, ASSET, base_currency, options, as_of
                ),
                self.build_rollup(
                    user_id, accounts, LIABILITY, base_currency, options, as_of
                ),
            )
        )
        summary = compute_net_worth_summary(assets, liabilities, as_of)
        self._logger.info(
            f"Net worth computed: assets={summary.total_assets}, "
            f"liabilities={summary.total_liabilities}, "
            f"net_worth={summary.net_worth} {summary.currency_code}"
        )
        return summary, asset_lines, liability_lines

    async def _cash_flow_with_lines(
        self,
        user_id: str,
        accounts: Sequence[Account],
        base_currency: str,
        period_start: date | None,
        period_end: date | None,
        today: date,
    ) -> tuple[CashflowSummary, list[AccountBalanceLine], list[AccountBalanceLine]]:
        if period_start is None and period_end is None:
            period_start = start_of_month(today)
        end = period_end or today
        options = BalanceOptions(
            as_of_date=today,
            period_start=period_start,
            period_end=end,
        )
        conversion_date = min(end, today)
        (income, income_lines), (expense, expense_lines) = await asyncio.gather(
            self.build_rollup(
                user_id, accounts, INCOME, base_currency, options, conversion_date
            ),
            self.build_rollup(
                user_id, accounts, EXPENSE, base_currency, options, conversion_date
            ),
        )
        summary = compute_cashflow_summary(income, expense, period_start, end)
        self._logger.info(
            f"Cash flow computed: income={summary.total_income}, "
            f"expense={summary.total_expense}, "
            f"net={summary.net_cash_flow} {summary.currency_code}"
        )
        return summary, income_lines, expense_lines

    async def _month_point(
        self,
        user_id: str,
        accounts: Sequence[Account],
        base_currency: str,
        month_start: date,
        today: date,
    ) -> MonthlyDataPoint:
        month_end = min(end_of_month(month_start), today)
        net_worth, cash_flow = await asyncio.gather(
            self.net_worth(user_id, accounts, base_currency, month_end),
            self.cash_flow(
                user_id,
                accounts,
                base_currency,
                period_start=month_start,
                period_end=month_end,
                today=today,
            ),
        )
        return MonthlyDataPoint(
            month=month_start.strftime("%Y-%m"),
            net_worth=net_worth.net_worth,
            total_assets=net_worth.total_assets,
            total_liabilities=net_worth.total_liabilities,
            monthly_income=cash_flow.total_income,
            monthly_expense=cash_flow.total_expense,
            net_cash_flow=cash_flow.net_cash_flow,
            has_conversion_errors=(
                net_worth.has_conversion_errors
                or cash_flow.has_conversion_errors
            ),
        )

    async def _convert_lines(
        self,
        user_id: str,
        pending: list[tuple[Account, AccountBalance]],
        base: str,
        conversion_date: date,
        label: str,
    ) -> tuple[list[AccountBalanceLine], bool]:
        """Convert account balances in one batch.

        Returns:
            tuple[list[AccountBalanceLine], bool]: Converted lines and
            whether the batch raised.
        """
        if not pending:
            return [], False
        items = [
            ConversionItem(amount=balance.amount, currency=balance.currency_code)
            for _, balance in pending
        ]
        batch_failed = False
        try:
            results = await self._conversion_service.convert_multiple(
                user_id,
                items,
                base,
                conversion_date,
            )
        except Exception as exc:
            self._logger.error(
                f"Currency conversion failed for {label} balances "
                f"of user {user_id}: {exc}"
            )
            batch_failed = True
            results = [_fallback_result(item, base, exc) for item in items]

        lines = []
        for (account, balance), result in zip(pending, results):
            contribution = result.converted_amount
            if batch_failed and not result.success:
                contribution = Decimal("0")
            lines.append(
                AccountBalanceLine(
                    account_id=account.id,
                    account_name=account.name,
                    category_id=account.category.id,
                    account_type=account.account_type,
                    balance=balance,
                    conversion=result,
                    contribution=contribution,
                )
            )
        return lines, batch_failed

    async def _missing_rates(
        self,
        user_id: str,
        accounts: Sequence[Account],
        base_currency: str,
        as_of: date,
    ) -> tuple[tuple[str, str], ...]:
        currencies = _balance_currencies(accounts, as_of, self._logger)
        try:
            missing = await self._conversion_service.find_missing_rates(
                user_id,
                currencies,
                base_currency,
                as_of,
            )
        except Exception as exc:
            self._logger.error(
                f"Missing rate check failed for user {user_id}: {exc}"
            )
            return ()
        if missing:
            self._logger.warning(
                f"No exchange rate to {base_currency} for "
                f"{', '.join(code for code, _ in missing)}"
            )
        return tuple(missing)

    def _validate(self, accounts: Sequence[Account]) -> ValidationReport:
        report = validate_accounts(accounts)
        if report.issues:
            self._logger.warning(
                f"Ledger validation found {len(report.errors)} errors and "
                f"{len(report.warnings)} warnings in "
                f"{report.accounts_checked} accounts, score={report.score}"
            )
        return report


def _fallback_result(
    item: ConversionItem,
    base: str,
    error: Exception,
) -> ConversionResult:
    amount = item.amount
    if normalize_currency_code(item.currency) == base:
        return ConversionResult(
            original_amount=amount,
            original_currency=item.currency,
            converted_amount=amount,
            target_currency=base,
            exchange_rate=Decimal("1"),
            success=True,
            method="identity",
        )
    return ConversionResult(
        original_amount=amount,
        original_currency=item.currency,
        converted_amount=amount,
        target_currency=base,
        exchange_rate=None,
        success=False,
        error=str(error),
    )


def _rollup_type(account: Account) -> str:
    if account.account_type in ACCOUNT_TYPES:
        return account.account_type
    return ASSET


def _balance_currencies(
    accounts: Sequence[Account],
    as_of: date,
    logger,
) -> set[str]:
    options = BalanceOptions(as_of_date=as_of, use_period_calculation=False)
    return {
        balance.currency_code
        for account in accounts
        for balance in calculate_account_balance(
            account, options, logger=logger
        ).values()
        if not is_effectively_zero(balance.amount)
    }


def _categories_of_type(
    categories: Sequence[Category],
    category_types: dict[str, str | None],
    account_type: str,
) -> list[Category]:
    return [
        category
        for category in categories
        if category_types.get(category.id) == account_type
    ]


def _account_counts(accounts: Sequence[Account]) -> dict[str, int]:
    counts = {account_type: 0 for account_type in ACCOUNT_TYPES}
    counts[UNTYPED] = 0
    for account in accounts:
        key = account.account_type if account.account_type in counts else UNTYPED
        counts[key] += 1
    counts["TOTAL"] = len(accounts)
    return counts


__all__ = ["AggregationEngine"]
