"""SQLite store for users, transactions and budgets.

Amounts are stored as decimal text so they read back as exact
``Decimal`` values.  Every transaction query is scoped to a user id and
every mutation checks ownership in its ``WHERE`` clause.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple, Union

import pandas as pd
import structlog

from .config import DB_PATH, ensure_data_directories
from .models import Budget, Transaction, TransactionFilter, TransactionType, User, category_sort_key

logger = structlog.get_logger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    type TEXT NOT NULL CHECK (type IN ('INCOME', 'EXPENSE')),
    amount TEXT NOT NULL,
    date TEXT NOT NULL,
    category TEXT NOT NULL,
    description TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_txn_user_date ON transactions (user_id, date);
CREATE INDEX IF NOT EXISTS ix_txn_user_category ON transactions (user_id, category);

CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    category TEXT NOT NULL,
    month INTEGER NOT NULL,
    year INTEGER NOT NULL,
    amount TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (user_id, category, month, year)
);
"""

TRANSACTION_COLUMNS = "id, user_id, type, amount, date, category, description, created_at, updated_at"


class StoreError(Exception):
    """Raised when the database cannot be reached or a query fails."""


class DuplicateError(StoreError):
    """Raised when an insert violates a unique constraint."""


def _now() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat(timespec="seconds")


def _to_iso_date(value: Union[date, datetime, str]) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value).strip()[:10]).isoformat()


def _parse_date(value: Any) -> Optional[date]:
    """Parse a stored ISO date, returning None for malformed values."""
    if value is None:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def _format_amount(amount: Decimal) -> str:
    return format(Decimal(amount), "f")


def _parse_amount(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _row_to_transaction(row: sqlite3.Row) -> Transaction:
    amount = _parse_amount(row["amount"])
    if amount is None:
        logger.error("transaction_bad_amount", transaction_id=row["id"], value=row["amount"])
        raise StoreError(f"Transaction {row['id']} has an unreadable amount: {row['amount']!r}")
    return Transaction(
        id=row["id"],
        user_id=row["user_id"],
        type=TransactionType(row["type"]),
        amount=amount,
        date=_parse_date(row["date"]),
        category=row["category"],
        description=row["description"],
        created_at=_parse_datetime(row["created_at"]),
        updated_at=_parse_datetime(row["updated_at"]),
    )


def _row_to_budget(row: sqlite3.Row) -> Budget:
    amount = _parse_amount(row["amount"])
    if amount is None:
        logger.error("budget_bad_amount", budget_id=row["id"], value=row["amount"])
        raise StoreError(f"Budget {row['id']} has an unreadable amount: {row['amount']!r}")
    return Budget(
        id=row["id"],
        user_id=row["user_id"],
        category=row["category"],
        month=row["month"],
        year=row["year"],
        amount=amount,
    )


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=_parse_datetime(row["created_at"]),
    )


def filter_clause(user_id: int, txn_filter: Optional[TransactionFilter]) -> Tuple[str, List[Any]]:
    """Build the ``WHERE`` clause for a transaction filter.

    Date bounds are inclusive; an empty category list adds no predicate.
    """
    where: List[str] = ["user_id = ?"]
    params: List[Any] = [user_id]

    if txn_filter is not None:
        if txn_filter.type is not None:
            where.append("type = ?")
            params.append(txn_filter.type.value)
        if txn_filter.start_date is not None:
            where.append("date >= ?")
            params.append(_to_iso_date(txn_filter.start_date))
        if txn_filter.end_date is not None:
            where.append("date <= ?")
            params.append(_to_iso_date(txn_filter.end_date))
        if txn_filter.categories:
            where.append("category IN ({})".format(
                ",".join(["?" for _ in txn_filter.categories])
            ))
            params.extend(txn_filter.categories)

    return " AND ".join(where), params


class TransactionStore:
    """SQLite-backed store for one database file."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """Initialize the store.

        Args:
            db_path: Optional database file. Defaults to ``DB_PATH`` from config.
        """
        self.db_path = Path(db_path) if db_path is not None else DB_PATH

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        if self.db_path == DB_PATH:
            ensure_data_directories()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
        except (OSError, sqlite3.Error) as e:
            raise StoreError(f"Could not open database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e).upper():
                raise DuplicateError(str(e)) from e
            raise StoreError(f"Integrity error: {e}") from e
        except (sqlite3.Error, pd.errors.DatabaseError) as e:
            logger.error("store_query_failed", db_path=str(self.db_path), error=str(e))
            raise StoreError(f"Database error: {e}") from e
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    # ---- users -------------------------------------------------------------

    def create_user(self, name: str, email: str, password_hash: str) -> User:
        created_at = _now()
        with self.connect() as conn:
            cur = conn.execute(
                "INSERT INTO users (name, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
                (name, email, password_hash, created_at),
            )
            conn.commit()
            user_id = cur.lastrowid
        return User(
            id=user_id,
            name=name,
            email=email,
            password_hash=password_hash,
            created_at=_parse_datetime(created_at),
        )

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self.connect() as conn:
            row = conn.execute(
                "SELECT id, name, email, password_hash, created_at FROM users WHERE email = ?",
                (email,),
            ).fetchone()
        return _row_to_user(row) if row else None

    def get_user(self, user_id: int) -> Optional[User]:
        with self.connect() as conn:
            row = conn.execute(
                "SELECT id, name, email, password_hash, created_at FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()
        return _row_to_user(row) if row else None

    # ---- transactions ------------------------------------------------------

    def create_transaction(
        self,
        user_id: int,
        txn_type: TransactionType,
        amount: Decimal,
        txn_date: Union[date, str],
        category: str,
        description: Optional[str] = None,
    ) -> Transaction:
        stamp = _now()
        with self.connect() as conn:
            cur = conn.execute(
                "INSERT INTO transactions (user_id, type, amount, date, category, description, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    user_id,
                    TransactionType(txn_type).value,
                    _format_amount(amount),
                    _to_iso_date(txn_date),
                    category,
                    description,
                    stamp,
                    stamp,
                ),
            )
            conn.commit()
            new_id = cur.lastrowid
        created = self.get_transaction(user_id, new_id)
        if created is None:
            raise StoreError(f"Transaction {new_id} vanished after insert")
        return created

    def get_transaction(self, user_id: int, transaction_id: int) -> Optional[Transaction]:
        with self.connect() as conn:
            row = conn.execute(
                f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE id = ? AND user_id = ?",
                (transaction_id, user_id),
            ).fetchone()
        return _row_to_transaction(row) if row else None

    def list_transactions(
        self,
        user_id: int,
        txn_filter: Optional[TransactionFilter] = None,
    ) -> List[Transaction]:
        """Fetch a user's transactions matching ``txn_filter``, oldest first.

        The SQL bounds compare stored dates as text, so the filter is
        applied again to the parsed rows; a row whose date does not parse
        never satisfies a date bound.

        Raises:
            StoreError: If the query fails or a stored amount is unreadable.
        """
        clause, params = filter_clause(user_id, txn_filter)
        sql = f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE {clause} ORDER BY date ASC, id ASC"
        with self.connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        transactions = [_row_to_transaction(r) for r in rows]
        if txn_filter is None:
            return transactions

        matching = [t for t in transactions if txn_filter.matches(t)]
        if len(matching) != len(transactions):
            logger.warning(
                "transactions_excluded_invalid_date",
                user_id=user_id,
                transaction_ids=[t.id for t in transactions if t.date is None],
            )
        return matching

    def update_transaction(
        self,
        user_id: int,
        transaction_id: int,
        txn_type: TransactionType,
        amount: Decimal,
        txn_date: Union[date, str],
        category: str,
        description: Optional[str] = None,
    ) -> bool:
        """Update a transaction owned by ``user_id``.

        Returns True if a row was updated, False if it does not exist or
        belongs to another user.
        """
        with self.connect() as conn:
            cur = conn.execute(
                "UPDATE transactions SET type = ?, amount = ?, date = ?, category = ?, description = ?, updated_at = ? "
                "WHERE id = ? AND user_id = ?",
                (
                    TransactionType(txn_type).value,
                    _format_amount(amount),
                    _to_iso_date(txn_date),
                    category,
                    description,
                    _now(),
                    transaction_id,
                    user_id,
                ),
            )
            conn.commit()
            return cur.rowcount > 0

    def delete_transaction(self, user_id: int, transaction_id: int) -> bool:
        with self.connect() as conn:
            cur = conn.execute(
                "DELETE FROM transactions WHERE id = ? AND user_id = ?",
                (transaction_id, user_id),
            )
            conn.commit()
            return cur.rowcount > 0

    def list_categories(self, user_id: int) -> List[str]:
        """Distinct non-empty categories a user has recorded, in locale order."""
        sql = "SELECT DISTINCT category AS Category FROM transactions WHERE user_id = ?"
        with self.connect() as conn:
            df = pd.read_sql_query(sql, conn, params=[user_id])
        if df.empty:
            return []
        names = df["Category"].dropna().astype(str)
        return sorted((n for n in names if n), key=category_sort_key)

    # ---- budgets -----------------------------------------------------------

    def list_budgets(self, user_id: int, month: int, year: int) -> List[Budget]:
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT id, user_id, category, month, year, amount FROM budgets "
                "WHERE user_id = ? AND month = ? AND year = ? ORDER BY category ASC",
                (user_id, month, year),
            ).fetchall()
        return [_row_to_budget(r) for r in rows]

    def upsert_budget(self, user_id: int, category: str, month: int, year: int, amount: Decimal) -> Budget:
        """Create the budget for (user, category, month, year) or overwrite its amount."""
        stamp = _now()
        with self.connect() as conn:
            conn.execute(
                "INSERT INTO budgets (user_id, category, month, year, amount, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT (user_id, category, month, year) "
                "DO UPDATE SET amount = excluded.amount, updated_at = excluded.updated_at",
                (user_id, category, month, year, _format_amount(amount), stamp, stamp),
            )
            conn.commit()
            row = conn.execute(
                "SELECT id, user_id, category, month, year, amount FROM budgets "
                "WHERE user_id = ? AND category = ? AND month = ? AND year = ?",
                (user_id, category, month, year),
            ).fetchone()
        if row is None:
            raise StoreError(f"Budget for {category} ({month}/{year}) could not be read back")
        return _row_to_budget(row)
