"""Domain validation helpers."""

from collections.abc import Iterable
from decimal import Decimal
from logging import Logger

from finledger.domain.constants import (
    ACCOUNT_TYPES,
    ASSET,
    FLOW_ACCOUNT_TYPES,
    LIABILITY,
    STOCK_ACCOUNT_TYPES,
    TRANSACTION_BALANCE,
    TRANSACTION_TYPES,
)
from finledger.domain.models import (
    Account,
    Transaction,
    ValidationIssue,
    ValidationReport,
)
from finledger.domain.models.validation import (
    SEVERITY_ERROR,
    SEVERITY_SUGGESTION,
    SEVERITY_WARNING,
)

TYPE_MISMATCH_CODES = ("balance_in_flow_account", "type_mismatch")


def validate_balance_sign(
    account_type: str | None,
    balance: Decimal,
    logger: Logger,
) -> None:
    """Warn when balances violate expected sign conventions.

    Args:
        account_type: Effective account type.
        balance: Balance amount.
        logger: Logger used for warnings.
    """
    if account_type == ASSET and balance < 0:
        logger.warning(
            f"Asset balance is negative for account_type={account_type}: {balance}"
        )
    if account_type == LIABILITY and balance < 0:
        logger.warning(
            f"Liability balance is negative for account_type={account_type}: {balance}"
        )


def validate_accounts(accounts: Iterable[Account]) -> ValidationReport:
    """Collect data problems without dropping any account.

    Args:
        accounts: Accounts with their transactions.

    Returns:
        ValidationReport: Issues, counters and a data quality score.
    """
    issues: list[ValidationIssue] = []
    accounts_checked = 0
    transactions_checked = 0
    categories_without_type = 0
    invalid_transactions = 0
    business_logic_violations = 0

    for account in accounts:
        accounts_checked += 1
        transactions_checked += len(account.transactions)
        if account.account_type not in ACCOUNT_TYPES:
            categories_without_type += 1
            issues.append(
                _issue(
                    account,
                    "missing_account_type",
                    SEVERITY_ERROR,
                    f'Account "{account.name}" has no known account type',
                )
            )
            issues.append(
                _issue(
                    account,
                    "set_account_type",
                    SEVERITY_SUGGESTION,
                    f'Set an account type (asset, liability, income or '
                    f'expense) on the category of "{account.name}"',
                )
            )

        for transaction in account.transactions:
            transaction_issues = _transaction_issues(account, transaction)
            if any(i.severity == SEVERITY_ERROR for i in transaction_issues):
                invalid_transactions += 1
            if any(i.code in TYPE_MISMATCH_CODES for i in transaction_issues):
                business_logic_violations += 1
            issues.extend(transaction_issues)

        snapshot_issue = _missing_snapshot_issue(account)
        if snapshot_issue is not None:
            issues.append(snapshot_issue)

    score = _quality_score(
        accounts_checked,
        categories_without_type,
        business_logic_violations,
        issues,
    )
    return ValidationReport(
        issues=issues,
        accounts_checked=accounts_checked,
        transactions_checked=transactions_checked,
        categories_without_type=categories_without_type,
        invalid_transactions=invalid_transactions,
        business_logic_violations=business_logic_violations,
        score=score,
    )


def _transaction_issues(
    account: Account,
    transaction: Transaction,
) -> list[ValidationIssue]:
    issues = []
    kind = transaction.transaction_type
    if kind not in TRANSACTION_TYPES:
        issues.append(
            _issue(
                account,
                "unknown_transaction_type",
                SEVERITY_ERROR,
                f'Account "{account.name}" has a transaction of unknown '
                f"type {kind}",
                transaction,
            )
        )
    if kind == TRANSACTION_BALANCE:
        if transaction.amount < 0:
            issues.append(
                _issue(
                    account,
                    "negative_balance_snapshot",
                    SEVERITY_ERROR,
                    f'Account "{account.name}" has a negative balance '
                    f"snapshot: {transaction.amount}",
                    transaction,
                )
            )
    elif transaction.amount <= 0:
        issues.append(
            _issue(
                account,
                "non_positive_amount",
                SEVERITY_ERROR,
                f'Account "{account.name}" has an invalid transaction '
                f"amount: {transaction.amount}",
                transaction,
            )
        )
    if transaction.date is None:
        issues.append(
            _issue(
                account,
                "invalid_date",
                SEVERITY_ERROR,
                f'Account "{account.name}" has a transaction without a '
                "valid date",
                transaction,
            )
        )
    if not (transaction.description or "").strip():
        issues.append(
            _issue(
                account,
                "empty_description",
                SEVERITY_WARNING,
                f'Account "{account.name}" has a transaction with an empty '
                "description",
                transaction,
            )
        )

    if account.account_type in FLOW_ACCOUNT_TYPES:
        if kind == TRANSACTION_BALANCE:
            issues.append(
                _issue(
                    account,
                    "balance_in_flow_account",
                    SEVERITY_ERROR,
                    f'Flow account "{account.name}" '
                    f"({account.account_type}) holds a balance snapshot",
                    transaction,
                )
            )
        elif kind in TRANSACTION_TYPES and kind != account.account_type:
            issues.append(
                _issue(
                    account,
                    "type_mismatch",
                    SEVERITY_WARNING,
                    f'Flow account "{account.name}" '
                    f"({account.account_type}) holds a {kind} transaction",
                    transaction,
                )
            )
    return issues


def _missing_snapshot_issue(account: Account) -> ValidationIssue | None:
    if account.account_type not in STOCK_ACCOUNT_TYPES:
        return None
    if not account.transactions:
        return None
    kinds = {t.transaction_type for t in account.transactions}
    if TRANSACTION_BALANCE in kinds:
        return None
    return _issue(
        account,
        "missing_balance_snapshot",
        SEVERITY_WARNING,
        f'Stock account "{account.name}" only holds income/expense '
        "transactions; record a balance update to anchor its balance",
    )


def _quality_score(
    accounts_checked: int,
    categories_without_type: int,
    business_logic_violations: int,
    issues: list[ValidationIssue],
) -> float:
    if accounts_checked == 0:
        return 0.0
    errors = sum(1 for i in issues if i.severity == SEVERITY_ERROR)
    warnings = sum(1 for i in issues if i.severity == SEVERITY_WARNING)
    score = 100.0
    score -= errors * 10
    score -= warnings * 5
    score -= categories_without_type / accounts_checked * 20
    score -= business_logic_violations * 3
    return max(0.0, min(100.0, score))


def _issue(
    account: Account,
    code: str,
    severity: str,
    message: str,
    transaction: Transaction | None = None,
) -> ValidationIssue:
    return ValidationIssue(
        code=code,
        severity=severity,
        message=message,
        account_id=account.id,
        account_name=account.name,
        transaction_id=transaction.id if transaction is not None else None,
    )


__all__ = [
    "validate_balance_sign",
    "validate_accounts",
]
