"""SQLAlchemy-backed repository for ledger accounts and categories."""

from dataclasses import replace
from datetime import date

from sqlalchemy import text

from finledger.application.ports.database import DatabaseEnginePort
from finledger.application.ports.ledger_repository import LedgerRepositoryPort
from finledger.domain.models import (
    Account,
    Category,
    CurrencyRef,
    Transaction,
)
from finledger.domain.services.categories import resolve_category_types
from finledger.domain.services.normalization import require_currency_code
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.infrastructure.settings import DEFAULT_BASE_CURRENCY
from finledger.utils.date_utils import coerce_date
from finledger.utils.decimal_utils import safe_decimal


class SqlAlchemyLedgerRepository(LedgerRepositoryPort):
    """Repository reading accounts, transactions and categories."""

    def __init__(
        self,
        db_port: DatabaseEnginePort,
        default_base_currency: str = DEFAULT_BASE_CURRENCY,
        logger=None,
    ) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the ledger engine.
            default_base_currency: Currency used when the user has none.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._db_port = db_port
        self._default_base_currency = require_currency_code(
            default_base_currency
        )
        self._logger = logger or get_app_logger()

    def fetch_categories(self, user_id: str) -> list[Category]:
        """Return categories with the type inherited from their root."""
        query = text(
            """
            SELECT id, name, type, parent_id, "order" AS sort_order
            FROM categories
            WHERE user_id = :user_id
            ORDER BY "order", name
            """
        )
        engine = self._db_port.get_engine()
        with engine.connect() as conn:
            rows = conn.execute(query, {"user_id": user_id}).all()
        categories = [
            Category(
                id=str(row.id),
                name=row.name,
                account_type=self._normalize_type(row.type),
                parent_id=str(row.parent_id) if row.parent_id else None,
                order=row.sort_order,
            )
            for row in rows
        ]
        effective_types = resolve_category_types(categories)
        return [
            replace(category, account_type=effective_types[category.id])
            for category in categories
        ]

    def fetch_accounts(
        self,
        user_id: str,
        end_date: date | None = None,
    ) -> list[Account]:
        """Return accounts with their transactions up to ``end_date``.

        Args:
            user_id: Owner of the accounts.
            end_date: Optional inclusive upper bound for transaction dates.

        Returns:
            list[Account]: Accounts ordered by name.
        """
        categories = {
            category.id: category
            for category in self.fetch_categories(user_id)
        }
        accounts_query = text(
            """
            SELECT a.id, a.name, a.category_id,
                   c.code AS currency_code, c.symbol AS currency_symbol,
                   c.name AS currency_name,
                   c.decimal_places AS currency_decimal_places,
                   c.is_custom AS currency_is_custom
            FROM accounts a
            JOIN currencies c ON c.id = a.currency_id
            WHERE a.user_id = :user_id
            ORDER BY a.name, a.id
            """
        )
        transactions_query = self._build_transactions_query(end_date)
        params = self._build_params(user_id, end_date)

        engine = self._db_port.get_engine()
        with engine.connect() as conn:
            account_rows = conn.execute(accounts_query, {"user_id": user_id}).all()
            transaction_rows = conn.execute(transactions_query, params).all()

        transactions: dict[str, list[Transaction]] = {}
        for row in transaction_rows:
            transaction = self._to_transaction(row)
            if transaction is None:
                continue
            transactions.setdefault(transaction.account_id, []).append(
                transaction
            )

        accounts = []
        for row in account_rows:
            account_id = str(row.id)
            category = categories.get(str(row.category_id))
            if category is None:
                self._logger.warning(
                    f"Account {row.name} references unknown category "
                    f"{row.category_id}"
                )
                category = Category(
                    id=str(row.category_id),
                    name="",
                    account_type=None,
                )
            accounts.append(
                Account(
                    id=account_id,
                    name=row.name,
                    category=category,
                    currency=self._to_currency(row),
                    transactions=tuple(transactions.get(account_id, ())),
                )
            )
        self._logger.info(
            f"Loaded {len(accounts)} accounts and {len(transaction_rows)} "
            f"transactions for user {user_id}"
        )
        return accounts

    def fetch_base_currency(self, user_id: str) -> CurrencyRef:
        """Return the user's base currency or the configured default."""
        query = text(
            """
            SELECT c.code AS currency_code, c.symbol AS currency_symbol,
                   c.name AS currency_name,
                   c.decimal_places AS currency_decimal_places,
                   c.is_custom AS currency_is_custom
            FROM user_settings s
            JOIN currencies c ON c.id = s.base_currency_id
            WHERE s.user_id = :user_id
            LIMIT 1
            """
        )
        engine = self._db_port.get_engine()
        with engine.connect() as conn:
            row = conn.execute(query, {"user_id": user_id}).first()
        if not row:
            self._logger.info(
                f"No base currency configured for user {user_id}, "
                f"using {self._default_base_currency}"
            )
            return CurrencyRef(code=self._default_base_currency)
        return self._to_currency(row)

    def _to_transaction(self, row) -> Transaction | None:
        amount = safe_decimal(row.amount)
        if amount is None:
            self._logger.warning(
                f"Skipping transaction {row.id} with unparseable amount "
                f"{row.amount!r}"
            )
            return None
        return Transaction(
            id=str(row.id),
            account_id=str(row.account_id),
            currency=self._to_currency(row),
            transaction_type=(row.type or "").strip().upper(),
            amount=amount,
            date=coerce_date(row.date),
            description=row.description or "",
            notes=row.notes,
        )

    @staticmethod
    def _to_currency(row) -> CurrencyRef:
        return CurrencyRef(
            code=require_currency_code(row.currency_code),
            symbol=row.currency_symbol or "",
            name=row.currency_name or "",
            decimal_places=(
                row.currency_decimal_places
                if row.currency_decimal_places is not None
                else 2
            ),
            is_custom=bool(row.currency_is_custom),
        )

    @staticmethod
    def _normalize_type(value: str | None) -> str | None:
        if not value:
            return None
        cleaned = value.strip().upper()
        return cleaned or None

    @staticmethod
    def _build_transactions_query(end_date: date | None):
        base_sql = """
        SELECT t.id, t.account_id, t.type, t.amount, t.date,
               t.description, t.notes,
               c.code AS currency_code, c.symbol AS currency_symbol,
               c.name AS currency_name,
               c.decimal_places AS currency_decimal_places,
               c.is_custom AS currency_is_custom
        FROM transactions t
        JOIN currencies c ON c.id = t.currency_id
        WHERE t.user_id = :user_id
        """
        if end_date:
            base_sql += " AND t.date <= :end_date"
        base_sql += " ORDER BY t.date, t.created_at, t.id"
        return text(base_sql)

    @staticmethod
    def _build_params(
        user_id: str,
        end_date: date | None,
    ) -> dict[str, object]:
        params: dict[str, object] = {"user_id": user_id}
        if end_date:
            params["end_date"] = end_date
        return params


__all__ = ["SqlAlchemyLedgerRepository"]
