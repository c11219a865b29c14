"""
Database Handler Module.

This module provides the persistence collaborator of the import
pipeline: clients, invoices and time entries in SQLite.

Features:
    - Automatic schema creation
    - Lookups used by duplicate detection
    - One transaction per imported document
    - Decimal values stored as TEXT, so amounts round-trip exactly

Author: Administration Tooling Team
"""

import sqlite3
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from config import get_config
from invoice_ingest.utils.logger import get_logger
from invoice_ingest.utils.helpers import ensure_directory
from invoice_ingest.utils.exceptions import DatabaseError
from .records import Client, InvoiceRecord, TimeEntryRecord

# Initialize module logger
logger = get_logger(__name__)


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS clients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        category TEXT,
        contact_person TEXT,
        address TEXT,
        postcode_city TEXT,
        hourly_rate TEXT,
        km_rate TEXT,
        return_distance INTEGER DEFAULT 0,
        is_active INTEGER DEFAULT 1,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS invoices (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        invoice_number TEXT NOT NULL UNIQUE,
        invoice_date TEXT,
        due_date TEXT,
        status TEXT,
        total_amount TEXT,
        client_id INTEGER REFERENCES clients(id),
        notes TEXT,
        is_split INTEGER DEFAULT 0,
        split_factor TEXT,
        source_file TEXT,
        document_path TEXT,
        document_sha256 TEXT,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS time_entries (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        activity_code TEXT,
        description TEXT,
        location TEXT,
        hours TEXT NOT NULL,
        hourly_rate TEXT,
        return_distance INTEGER DEFAULT 0,
        km_rate TEXT,
        notes TEXT,
        is_billable INTEGER DEFAULT 1,
        is_invoiced INTEGER DEFAULT 1,
        is_standby INTEGER DEFAULT 0,
        duty_code TEXT,
        invoice_number TEXT,
        invoice_id INTEGER REFERENCES invoices(id),
        client_id INTEGER REFERENCES clients(id),
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_time_entries_day ON time_entries (date, client_id)",
]


def _text(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


def _decimal(value: Optional[str]) -> Optional[Decimal]:
    return Decimal(value) if value not in (None, "") else None


class DatabaseHandler:
    """
    Handles database operations for imported invoices.

    Connections are opened per operation, except inside transaction(),
    where every operation shares one connection that is committed or
    rolled back as a whole.

    Attributes:
        db_path: Path to the SQLite database file

    Example:
        >>> db = DatabaseHandler("outputs/administration.db")
        >>> with db.transaction():
        ...     invoice_id = db.create_invoice(record)
        >>> db.find_invoice_by_number("2025-001").status
        'Betaald'
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize the database handler.

        Args:
            db_path: Path to database file. If None, uses configuration.
        """
        self.db_path = Path(db_path or get_config("paths.database", "outputs/administration.db"))
        ensure_directory(self.db_path.parent)

        self._active: Optional[sqlite3.Connection] = None
        self._create_tables()

        logger.info(f"DatabaseHandler initialized (db: {self.db_path})")

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        if self._active is not None:
            yield self._active
            return

        conn = self._open()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator['DatabaseHandler']:
        """
        Run a block of operations atomically.

        Raises:
            DatabaseError: If the commit fails. Exceptions from the block
                roll the transaction back and propagate unchanged.
        """
        if self._active is not None:
            yield self
            return

        conn = self._open()
        self._active = conn
        try:
            yield self
            conn.commit()
        except Exception:
            conn.rollback()
            logger.debug("Transaction rolled back")
            raise
        finally:
            self._active = None
            conn.close()

    def _create_tables(self) -> None:
        """Create the required database tables."""
        try:
            with self._connection() as conn:
                for statement in SCHEMA:
                    conn.execute(statement)
            logger.debug("Database tables created/verified")
        except sqlite3.Error as e:
            raise DatabaseError("create tables", str(e)) from e

    # Clients

    def list_clients(self) -> List[Client]:
        try:
            with self._connection() as conn:
                rows = conn.execute("SELECT * FROM clients ORDER BY id").fetchall()
        except sqlite3.Error as e:
            raise DatabaseError("list_clients", str(e)) from e
        return [self._client_from_row(row) for row in rows]

    def create_client(self, client: Client) -> Client:
        """
        Insert a client.

        Returns:
            The client with its database id set.
        """
        sql = """
        INSERT INTO clients (
            name, category, contact_person, address, postcode_city,
            hourly_rate, km_rate, return_distance, is_active
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        values = (
            client.name, client.category, client.contact_person, client.address,
            client.postcode_city, _text(client.hourly_rate), _text(client.km_rate),
            client.return_distance, 1 if client.is_active else 0,
        )
        try:
            with self._connection() as conn:
                cursor = conn.execute(sql, values)
                client.id = cursor.lastrowid
        except sqlite3.Error as e:
            raise DatabaseError("create_client", str(e)) from e

        logger.debug(f"Created client: {client.name} (id {client.id})")
        return client

    @staticmethod
    def _client_from_row(row: sqlite3.Row) -> Client:
        return Client(
            id=row["id"],
            name=row["name"],
            category=row["category"],
            contact_person=row["contact_person"],
            address=row["address"] or "",
            postcode_city=row["postcode_city"] or "",
            hourly_rate=_decimal(row["hourly_rate"]) or Decimal("0"),
            km_rate=_decimal(row["km_rate"]) or Decimal("0"),
            return_distance=row["return_distance"] or 0,
            is_active=bool(row["is_active"]),
        )

    # Invoices

    def find_invoice_by_number(self, invoice_number: str) -> Optional[InvoiceRecord]:
        try:
            with self._connection() as conn:
                row = conn.execute(
                    "SELECT * FROM invoices WHERE invoice_number = ? LIMIT 1",
                    (invoice_number,)
                ).fetchone()
        except sqlite3.Error as e:
            raise DatabaseError("find_invoice_by_number", str(e)) from e
        return self._invoice_from_row(row) if row else None

    def create_invoice(self, invoice: InvoiceRecord) -> InvoiceRecord:
        """
        Insert an invoice.

        Raises:
            DatabaseError: If the invoice number already exists or the
                insert fails.
        """
        sql = """
        INSERT INTO invoices (
            invoice_number, invoice_date, due_date, status, total_amount,
            client_id, notes, is_split, split_factor, source_file,
            document_path, document_sha256
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        values = (
            invoice.invoice_number, invoice.invoice_date.isoformat(),
            invoice.due_date.isoformat(), invoice.status, _text(invoice.total_amount),
            invoice.client_id, invoice.notes, 1 if invoice.is_split else 0,
            _text(invoice.split_factor), invoice.source_file,
            invoice.document_path, invoice.document_sha256,
        )
        try:
            with self._connection() as conn:
                cursor = conn.execute(sql, values)
                invoice.id = cursor.lastrowid
        except sqlite3.Error as e:
            raise DatabaseError("create_invoice", str(e)) from e

        logger.debug(f"Created invoice: {invoice.invoice_number}")
        return invoice

    def set_document_path(self, invoice_number: str, document_path: str, sha256: Optional[str] = None) -> None:
        try:
            with self._connection() as conn:
                conn.execute(
                    "UPDATE invoices SET document_path = ?, document_sha256 = ? WHERE invoice_number = ?",
                    (document_path, sha256, invoice_number)
                )
        except sqlite3.Error as e:
            raise DatabaseError("set_document_path", str(e)) from e

    @staticmethod
    def _invoice_from_row(row: sqlite3.Row) -> InvoiceRecord:
        return InvoiceRecord(
            id=row["id"],
            invoice_number=row["invoice_number"],
            invoice_date=date.fromisoformat(row["invoice_date"]),
            due_date=date.fromisoformat(row["due_date"]),
            status=row["status"],
            total_amount=_decimal(row["total_amount"]) or Decimal("0"),
            client_id=row["client_id"],
            notes=row["notes"],
            is_split=bool(row["is_split"]),
            split_factor=_decimal(row["split_factor"]),
            source_file=row["source_file"],
            document_path=row["document_path"],
            document_sha256=row["document_sha256"],
        )

    # Time entries

    def find_time_entries(
        self,
        entry_date: date,
        hours: Decimal,
        client_id: Optional[int]
    ) -> List[TimeEntryRecord]:
        """
        Existing entries with the same date, hours and client.

        Hours are compared numerically, so "9" matches "9.00".
        """
        try:
            with self._connection() as conn:
                rows = conn.execute(
                    "SELECT * FROM time_entries WHERE date = ? AND client_id IS ?",
                    (entry_date.isoformat(), client_id)
                ).fetchall()
        except sqlite3.Error as e:
            raise DatabaseError("find_time_entries", str(e)) from e

        return [
            self._entry_from_row(row) for row in rows
            if Decimal(row["hours"]) == hours
        ]

    def create_time_entry(self, entry: TimeEntryRecord) -> TimeEntryRecord:
        sql = """
        INSERT INTO time_entries (
            date, activity_code, description, location, hours, hourly_rate,
            return_distance, km_rate, notes, is_billable, is_invoiced,
            is_standby, duty_code, invoice_number, invoice_id, client_id
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        values = (
            entry.date.isoformat(), entry.activity_code, entry.description, entry.location,
            _text(entry.hours), _text(entry.hourly_rate), entry.return_distance,
            _text(entry.km_rate), entry.notes, 1 if entry.is_billable else 0,
            1 if entry.is_invoiced else 0, 1 if entry.is_standby else 0,
            entry.duty_code, entry.invoice_number, entry.invoice_id, entry.client_id,
        )
        try:
            with self._connection() as conn:
                cursor = conn.execute(sql, values)
                entry.id = cursor.lastrowid
        except sqlite3.Error as e:
            raise DatabaseError("create_time_entry", str(e)) from e
        return entry

    def get_time_entries(self, invoice_number: Optional[str] = None) -> List[TimeEntryRecord]:
        """All time entries, or those of one invoice, ordered by date."""
        query = "SELECT * FROM time_entries"
        params: tuple = ()
        if invoice_number is not None:
            query += " WHERE invoice_number = ?"
            params = (invoice_number,)
        query += " ORDER BY date, id"

        try:
            with self._connection() as conn:
                rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise DatabaseError("get_time_entries", str(e)) from e
        return [self._entry_from_row(row) for row in rows]

    @staticmethod
    def _entry_from_row(row: sqlite3.Row) -> TimeEntryRecord:
        return TimeEntryRecord(
            id=row["id"],
            date=date.fromisoformat(row["date"]),
            activity_code=row["activity_code"],
            description=row["description"],
            location=row["location"] or "",
            hours=Decimal(row["hours"]),
            hourly_rate=_decimal(row["hourly_rate"]) or Decimal("0"),
            return_distance=row["return_distance"] or 0,
            km_rate=_decimal(row["km_rate"]) or Decimal("0"),
            notes=row["notes"],
            is_billable=bool(row["is_billable"]),
            is_invoiced=bool(row["is_invoiced"]),
            is_standby=bool(row["is_standby"]),
            duty_code=row["duty_code"],
            invoice_number=row["invoice_number"],
            invoice_id=row["invoice_id"],
            client_id=row["client_id"],
        )

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about the stored data.

        Returns:
            Dictionary with record counts and hour totals.
        """
        try:
            with self._connection() as conn:
                stats = {
                    'clients': conn.execute("SELECT COUNT(*) FROM clients").fetchone()[0],
                    'invoices': conn.execute("SELECT COUNT(*) FROM invoices").fetchone()[0],
                    'time_entries': conn.execute("SELECT COUNT(*) FROM time_entries").fetchone()[0],
                }
                hours = conn.execute("SELECT hours, is_standby FROM time_entries").fetchall()
        except sqlite3.Error as e:
            raise DatabaseError("get_statistics", str(e)) from e

        stats['total_hours'] = sum((Decimal(row["hours"]) for row in hours), Decimal("0"))
        stats['standby_hours'] = sum(
            (Decimal(row["hours"]) for row in hours if row["is_standby"]), Decimal("0")
        )
        return stats
