"""Domain models for ledger data validation."""

from dataclasses import dataclass, field

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_SUGGESTION = "suggestion"


@dataclass(frozen=True)
class ValidationIssue:
    """Problem found in an account or one of its transactions."""

    code: str
    severity: str
    message: str
    account_id: str
    account_name: str
    transaction_id: str | None = None


@dataclass(frozen=True)
class ValidationReport:
    """Validation outcome for a set of accounts.

    Attributes:
        issues: Every issue found, in account order.
        accounts_checked: Number of accounts inspected.
        transactions_checked: Number of transactions inspected.
        categories_without_type: Accounts whose category has no type.
        invalid_transactions: Transactions with an error-level issue.
        business_logic_violations: Transactions whose type does not fit the
            account type.
        score: Data quality score between 0 and 100.
    """

    issues: list[ValidationIssue] = field(default_factory=list)
    accounts_checked: int = 0
    transactions_checked: int = 0
    categories_without_type: int = 0
    invalid_transactions: int = 0
    business_logic_violations: int = 0
    score: float = 0.0

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == SEVERITY_ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == SEVERITY_WARNING]

    @property
    def suggestions(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == SEVERITY_SUGGESTION]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def flagged_account_ids(self) -> set[str]:
        return {
            issue.account_id
            for issue in self.issues
            if issue.severity != SEVERITY_SUGGESTION
        }


__all__ = [
    "SEVERITY_ERROR",
    "SEVERITY_WARNING",
    "SEVERITY_SUGGESTION",
    "ValidationIssue",
    "ValidationReport",
]
