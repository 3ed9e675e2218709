"""SQLite bill store."""

import logging
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from uuid import UUID

from billtracker.config import settings
from billtracker.errors import BillNotFound
from billtracker.models import Bill, BillCreate, Month, UtilityType, utc_now

logger = logging.getLogger(__name__)

# SQL schema
SCHEMA = """
CREATE TABLE IF NOT EXISTS bills (
    id TEXT PRIMARY KEY,
    month TEXT NOT NULL,
    year INTEGER NOT NULL,
    utility_type TEXT NOT NULL,
    units_consumed REAL NOT NULL,
    amount REAL NOT NULL,
    bill_number TEXT NOT NULL DEFAULT '',
    is_paid INTEGER NOT NULL DEFAULT 0,
    payment_date TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_bills_utility_type ON bills(utility_type);
CREATE INDEX IF NOT EXISTS idx_bills_created_at ON bills(created_at);
CREATE INDEX IF NOT EXISTS idx_bills_period ON bills(year, month);
"""

COLUMNS = """
    id, month, year, utility_type, units_consumed, amount, bill_number,
    is_paid, payment_date, created_at, updated_at
"""


def _ts(value: datetime | None) -> str | None:
    """Fixed-width ISO timestamp so string order matches time order."""
    return value.isoformat(timespec="microseconds") if value else None


class Database:
    """SQLite-backed bill store."""

    def __init__(self, db_path: Path | None = None):
        if db_path is None:
            settings.ensure_directories()
        self.db_path = db_path or settings.db_path
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def list_all(self, utility_type: UtilityType | None = None) -> list[Bill]:
        """Get all bills, optionally of one utility type."""
        query = f"SELECT {COLUMNS} FROM bills WHERE 1=1"
        params: list = []

        if utility_type:
            query += " AND utility_type = ?"
            params.append(utility_type.value)

        query += " ORDER BY rowid"

        with self._get_connection() as conn:
            cursor = conn.execute(query, params)
            return [self._row_to_bill(row) for row in cursor.fetchall()]

    def find_latest_created(self, utility_type: UtilityType | None = None) -> Bill | None:
        """Get the most recently created bill, optionally of one utility type."""
        query = f"SELECT {COLUMNS} FROM bills WHERE 1=1"
        params: list = []

        if utility_type:
            query += " AND utility_type = ?"
            params.append(utility_type.value)

        query += " ORDER BY created_at DESC, rowid DESC LIMIT 1"

        with self._get_connection() as conn:
            row = conn.execute(query, params).fetchone()
            return self._row_to_bill(row) if row else None

    def get_bill(self, bill_id: UUID) -> Bill:
        """Get a single bill by ID."""
        with self._get_connection() as conn:
            row = conn.execute(f"SELECT {COLUMNS} FROM bills WHERE id = ?", (str(bill_id),)).fetchone()
        if row is None:
            raise BillNotFound(bill_id)
        return self._row_to_bill(row)

    def create(self, fields: BillCreate) -> Bill:
        """Record a new bill."""
        bill = Bill(**fields.model_dump())
        with self._get_connection() as conn:
            conn.execute(
                f"INSERT INTO bills ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    str(bill.id),
                    bill.month.value,
                    bill.year,
                    bill.utility_type.value,
                    bill.units_consumed,
                    bill.amount,
                    bill.bill_number,
                    int(bill.is_paid),
                    _ts(bill.payment_date),
                    _ts(bill.created_at),
                    _ts(bill.updated_at),
                ),
            )
            conn.commit()
        logger.info(f"Created {bill.utility_type.value} bill {bill.id} for {bill.period}")
        return bill

    def update(self, bill_id: UUID, fields: BillCreate) -> Bill:
        """Replace a bill's primary fields."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                UPDATE bills
                SET month = ?, year = ?, utility_type = ?, units_consumed = ?,
                    amount = ?, bill_number = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    fields.month.value,
                    fields.year,
                    fields.utility_type.value,
                    fields.units_consumed,
                    fields.amount,
                    fields.bill_number,
                    _ts(utc_now()),
                    str(bill_id),
                ),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise BillNotFound(bill_id)
        logger.info(f"Updated bill {bill_id}")
        return self.get_bill(bill_id)

    def delete(self, bill_id: UUID) -> None:
        """Delete a bill."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM bills WHERE id = ?", (str(bill_id),))
            conn.commit()
            if cursor.rowcount == 0:
                raise BillNotFound(bill_id)
        logger.info(f"Deleted bill {bill_id}")

    def mark_paid(self, bill_id: UUID, payment_date: datetime | None = None) -> Bill:
        """Mark a bill as paid, defaulting the payment date to now."""
        now = utc_now()
        with self._get_connection() as conn:
            cursor = conn.execute(
                "UPDATE bills SET is_paid = 1, payment_date = ?, updated_at = ? WHERE id = ?",
                (_ts(payment_date or now), _ts(now), str(bill_id)),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise BillNotFound(bill_id)
        logger.info(f"Marked bill {bill_id} as paid")
        return self.get_bill(bill_id)

    def count(self) -> int:
        """Get total number of bills."""
        with self._get_connection() as conn:
            cursor = conn.execute("SELECT COUNT(*) as count FROM bills")
            return cursor.fetchone()["count"]

    def _row_to_bill(self, row: sqlite3.Row) -> Bill:
        """Convert a database row to a Bill model."""
        return Bill(
            id=UUID(row["id"]),
            month=Month(row["month"]),
            year=row["year"],
            utility_type=UtilityType(row["utility_type"]),
            units_consumed=row["units_consumed"],
            amount=row["amount"],
            bill_number=row["bill_number"],
            is_paid=bool(row["is_paid"]),
            payment_date=datetime.fromisoformat(row["payment_date"]) if row["payment_date"] else None,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
