"""Domain services computing account balances.

Stock accounts (assets and liabilities) are replayed chronologically and a
BALANCE transaction replaces the running total of its currency. Flow accounts
(income and expenses) are summed over a period, counting only transactions of
the account's own type.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from logging import Logger

from finledger.domain.constants import (
    ACCOUNT_TYPES,
    BALANCE_EPSILON,
    FLOW_ACCOUNT_TYPES,
    TRANSACTION_BALANCE,
    TRANSACTION_EXPENSE,
    TRANSACTION_INCOME,
)
from finledger.domain.models import (
    Account,
    AccountBalance,
    BalanceOptions,
    CurrencyRef,
    Transaction,
)


def is_effectively_zero(amount: Decimal) -> bool:
    """Return True when the amount is below one minor currency unit."""
    return abs(amount) < BALANCE_EPSILON


def has_balance(balances: dict[str, AccountBalance]) -> bool:
    """Return True when any currency balance is not effectively zero."""
    return any(
        not is_effectively_zero(balance.amount)
        for balance in balances.values()
    )


def calculate_account_balance(
    account: Account,
    options: BalanceOptions | None = None,
    *,
    logger: Logger,
) -> dict[str, AccountBalance]:
    """Compute the balances of one account keyed by currency code.

    Args:
        account: Account with its category and transactions.
        options: Reference date and optional flow period.
        logger: Logger used for data warnings.

    Returns:
        dict[str, AccountBalance]: Balance per currency. Empty when the
        account has no transaction in range.
    """
    options = options or BalanceOptions()
    if not account.transactions:
        return {}

    if account.account_type not in ACCOUNT_TYPES:
        logger.warning(
            f"Account {account.name} has no known account type, "
            "computing it as a stock account"
        )

    if account.account_type in FLOW_ACCOUNT_TYPES:
        if options.use_period_calculation:
            return calculate_flow_balance(
                account,
                account.transactions,
                period_start=options.period_start,
                period_end=options.period_end,
                as_of_date=options.as_of_date,
                logger=logger,
            )
        return calculate_flow_balance(
            account,
            account.transactions,
            as_of_date=options.as_of_date,
            logger=logger,
        )

    return calculate_stock_balance(
        account,
        account.transactions,
        as_of_date=options.as_of_date,
        logger=logger,
    )


def calculate_stock_balance(
    account: Account,
    transactions: Iterable[Transaction],
    as_of_date: date | None = None,
    *,
    logger: Logger,
) -> dict[str, AccountBalance]:
    """Replay transactions up to ``as_of_date`` per currency.

    A BALANCE transaction resets the running total to its amount, INCOME adds
    and EXPENSE subtracts. Transactions on the same date keep their input
    order.

    Args:
        account: Account owning the transactions.
        transactions: Transactions in any order.
        as_of_date: Inclusive cutoff date.
        logger: Logger used for data warnings.

    Returns:
        dict[str, AccountBalance]: Balance per currency.
    """
    dated = sorted(
        _dated_transactions(account, transactions, None, as_of_date, logger),
        key=lambda transaction: transaction.date,
    )

    totals: dict[str, Decimal] = {}
    currencies: dict[str, CurrencyRef] = {}
    for transaction in dated:
        code = transaction.currency_code
        currencies.setdefault(code, transaction.currency)
        running = totals.get(code, Decimal("0"))
        if transaction.transaction_type == TRANSACTION_BALANCE:
            running = transaction.amount
        elif transaction.transaction_type == TRANSACTION_INCOME:
            running += transaction.amount
        elif transaction.transaction_type == TRANSACTION_EXPENSE:
            running -= transaction.amount
        else:
            logger.warning(
                f"Skipping transaction {transaction.id} with unknown type "
                f"{transaction.transaction_type} in account {account.name}"
            )
            continue
        totals[code] = running

    return {
        code: AccountBalance(
            currency_code=code,
            amount=amount,
            currency=currencies[code],
        )
        for code, amount in totals.items()
    }


def calculate_flow_balance(
    account: Account,
    transactions: Iterable[Transaction],
    period_start: date | None = None,
    period_end: date | None = None,
    as_of_date: date | None = None,
    *,
    logger: Logger,
) -> dict[str, AccountBalance]:
    """Sum the transactions matching the account type within a period.

    Args:
        account: Income or expense account.
        transactions: Transactions in any order.
        period_start: Inclusive period start, unbounded when None.
        period_end: Inclusive period end, capped at ``as_of_date``.
        as_of_date: Inclusive cutoff date.
        logger: Logger used for data warnings.

    Returns:
        dict[str, AccountBalance]: Period total per currency.
    """
    end_date = _earliest(period_end, as_of_date)
    totals: dict[str, Decimal] = {}
    currencies: dict[str, CurrencyRef] = {}
    for transaction in _dated_transactions(
        account,
        transactions,
        period_start,
        end_date,
        logger,
    ):
        if transaction.transaction_type == TRANSACTION_BALANCE:
            logger.warning(
                f"Flow account {account.name} holds balance transaction "
                f"{transaction.id}, excluded from the total"
            )
            continue
        if transaction.transaction_type != account.account_type:
            logger.warning(
                f"Flow account {account.name} ({account.account_type}) holds "
                f"{transaction.transaction_type} transaction {transaction.id}, "
                "excluded from the total"
            )
            continue
        code = transaction.currency_code
        currencies.setdefault(code, transaction.currency)
        totals[code] = totals.get(code, Decimal("0")) + transaction.amount

    return {
        code: AccountBalance(
            currency_code=code,
            amount=amount,
            currency=currencies[code],
        )
        for code, amount in totals.items()
    }


def calculate_total_balance(
    accounts: Iterable[Account],
    options: BalanceOptions | None = None,
    *,
    logger: Logger,
) -> dict[str, AccountBalance]:
    """Sum account balances per currency without conversion."""
    totals: dict[str, AccountBalance] = {}
    for account in accounts:
        balances = calculate_account_balance(account, options, logger=logger)
        for code, balance in balances.items():
            current = totals.get(code)
            if current is None:
                totals[code] = balance
                continue
            totals[code] = AccountBalance(
                currency_code=code,
                amount=current.amount + balance.amount,
                currency=current.currency,
            )
    return totals


def _dated_transactions(
    account: Account,
    transactions: Iterable[Transaction],
    start_date: date | None,
    end_date: date | None,
    logger: Logger,
) -> list[Transaction]:
    selected = []
    for transaction in transactions:
        if transaction.date is None:
            logger.warning(
                f"Skipping transaction {transaction.id} without a valid date "
                f"in account {account.name}"
            )
            continue
        if start_date is not None and transaction.date < start_date:
            continue
        if end_date is not None and transaction.date > end_date:
            continue
        selected.append(transaction)
    return selected


def _earliest(first: date | None, second: date | None) -> date | None:
    if first is None:
        return second
    if second is None:
        return first
    return min(first, second)


__all__ = [
    "is_effectively_zero",
    "has_balance",
    "calculate_account_balance",
    "calculate_stock_balance",
    "calculate_flow_balance",
    "calculate_total_balance",
]
