"""Domain services for finance aggregates."""

from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from finledger.domain.models import (
    AccountBalance,
    AccountBalanceLine,
    CashflowSummary,
    CurrencyBreakdown,
    NetWorthSummary,
    Rollup,
)


def summarize_rollup(
    account_type: str,
    currency_code: str,
    lines: Sequence[AccountBalanceLine],
    *,
    force_conversion_error: bool = False,
) -> Rollup:
    """Merge converted account lines into one rollup.

    Args:
        account_type: Account type of the lines.
        currency_code: Base currency code.
        lines: Converted account balances.
        force_conversion_error: Flag the rollup even if every line succeeded.

    Returns:
        Rollup: Base currency total with its per currency breakdown.
    """
    totals_by_original: dict[str, AccountBalance] = {}
    converted: dict[str, Decimal] = {}
    rates: dict[str, Decimal | None] = {}
    accounts: dict[str, set[str]] = {}
    successes: dict[str, bool] = {}
    total = Decimal("0")

    for line in lines:
        code = line.balance.currency_code
        current = totals_by_original.get(code)
        totals_by_original[code] = AccountBalance(
            currency_code=code,
            amount=(current.amount if current else Decimal("0"))
            + line.balance.amount,
            currency=current.currency if current else line.balance.currency,
        )
        converted[code] = converted.get(code, Decimal("0")) + line.contribution
        rates.setdefault(code, line.conversion.exchange_rate)
        accounts.setdefault(code, set()).add(line.account_id)
        successes[code] = successes.get(code, True) and line.conversion.success
        total += line.contribution

    ordered_codes = sorted(
        totals_by_original,
        key=lambda code: (-abs(converted[code]), code),
    )
    by_currency = {
        code: CurrencyBreakdown(
            original_amount=totals_by_original[code].amount,
            converted_amount=converted[code],
            exchange_rate=rates[code],
            account_count=len(accounts[code]),
            success=successes[code],
        )
        for code in ordered_codes
    }
    has_errors = force_conversion_error or not all(successes.values())
    return Rollup(
        account_type=account_type,
        currency_code=currency_code,
        total_in_base_currency=total,
        totals_by_original_currency=totals_by_original,
        by_currency=by_currency,
        has_conversion_errors=has_errors,
        conversion_details=[line.conversion for line in lines],
        account_count=len({line.account_id for line in lines}),
    )


def compute_net_worth_summary(
    assets: Rollup,
    liabilities: Rollup,
    as_of_date: date,
) -> NetWorthSummary:
    """Compute net worth from asset and liability rollups.

    Args:
        assets: Rollup of asset accounts.
        liabilities: Rollup of liability accounts.
        as_of_date: Date the balances were computed for.

    Returns:
        NetWorthSummary: Totals with liabilities as a positive magnitude.
    """
    total_assets = assets.total_in_base_currency
    total_liabilities = abs(liabilities.total_in_base_currency)
    return NetWorthSummary(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
        currency_code=assets.currency_code,
        as_of_date=as_of_date,
        assets=assets,
        liabilities=liabilities,
    )


def compute_cashflow_summary(
    income: Rollup,
    expense: Rollup,
    period_start: date | None,
    period_end: date,
) -> CashflowSummary:
    """Compute cash flow totals from income and expense rollups."""
    return CashflowSummary(
        total_income=income.total_in_base_currency,
        total_expense=expense.total_in_base_currency,
        currency_code=income.currency_code,
        period_start=period_start,
        period_end=period_end,
        income=income,
        expense=expense,
    )


__all__ = [
    "summarize_rollup",
    "compute_net_worth_summary",
    "compute_cashflow_summary",
]
