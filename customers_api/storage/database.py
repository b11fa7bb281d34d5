"""
Customer storage using SQLite.

One `customers` table, one shared connection. The connection is opened and
the schema created once at application startup; every handler then issues
its statements through the same `CustomerDatabase` instance.

Error model:
- CustomerStorageError: statement failed, connection unusable, or the id
  cannot be parsed as an integer key
- CustomerNotFoundError: lookup by id matched no row
"""

import logging
import re
import sqlite3
from pathlib import Path

from fastapi import Request

from customers_api.models.customer import Customer, CustomerCreate, CustomerUpdate
from customers_api.observability.logging import OperationContext

logger = logging.getLogger(__name__)

_CUSTOMER_ID_RE = re.compile(r"[+-]?[0-9]+")

# SQLite INTEGER is a signed 64-bit value
_MIN_CUSTOMER_ID = -(2**63)
_MAX_CUSTOMER_ID = 2**63 - 1

CREATE_CUSTOMERS_TABLE = """
    CREATE TABLE IF NOT EXISTS customers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT,
        email TEXT,
        status TEXT
    )
"""


class CustomerStorageError(Exception):
    """Raised when a customer statement cannot be executed."""


class CustomerNotFoundError(CustomerStorageError):
    """Raised when no customer row matches the requested id."""

    def __init__(self, customer_id: int | str):
        self.customer_id = customer_id
        super().__init__(f"customer {customer_id} not found")


def parse_customer_id(customer_id: int | str) -> int:
    """
    Parse a path identifier as the integer primary key.

    Raises:
        CustomerStorageError: identifier is not a 64-bit integer
    """
    if isinstance(customer_id, int):
        key = customer_id
    elif _CUSTOMER_ID_RE.fullmatch(customer_id.strip()):
        key = int(customer_id)
    else:
        raise CustomerStorageError(f"invalid customer id: {customer_id!r}")

    if not _MIN_CUSTOMER_ID <= key <= _MAX_CUSTOMER_ID:
        raise CustomerStorageError(f"customer id out of range: {customer_id!r}")
    return key


def _row_to_customer(row: sqlite3.Row) -> Customer:
    # Columns are nullable; rows written outside this service may hold NULLs.
    return Customer(
        id=row["id"],
        name=row["name"] or "",
        email=row["email"] or "",
        status=row["status"] or "",
    )


class CustomerDatabase:
    """
    Customer table storage.

    The connection is created with check_same_thread=False and shared by all
    requests. Concurrent writes to one row are serialized by SQLite itself;
    no application-level locking is done.
    """

    def __init__(self, db_path: str = "./data/customers.db"):
        """
        Initialize customer database.

        Args:
            db_path: Path to SQLite database file (":memory:" for a private in-memory DB)
        """
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._initialized = False

    async def initialize(self) -> None:
        """
        Open the connection and create the customers table.

        Idempotent - safe to call multiple times.

        Raises:
            CustomerStorageError: database cannot be opened or the table cannot be created
        """
        if self._initialized:
            return

        logger.info(f"Initializing customer database at {self.db_path}")

        try:
            with OperationContext("customer_schema_init", db_path=self.db_path):
                conn = self._get_connection()
                conn.execute(CREATE_CUSTOMERS_TABLE)
                conn.commit()
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to initialize database: {e}")
            raise CustomerStorageError(f"can't create table customers: {e}") from e

        self._initialized = True
        logger.info("Customer table ready")

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection (creates if needed)."""
        if self._conn is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        try:
            return self._get_connection().execute(sql, params).fetchall()
        except (sqlite3.Error, OverflowError) as e:
            raise CustomerStorageError(str(e)) from e

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        conn = self._get_connection()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
        except (sqlite3.Error, OverflowError) as e:
            raise CustomerStorageError(str(e)) from e
        return cursor

    async def create_customer(self, customer_create: CustomerCreate) -> Customer:
        """
        Insert a new customer; storage assigns the id.

        Returns:
            Customer: The stored record, including its new id
        """
        cursor = self._execute(
            "INSERT INTO customers (name, email, status) VALUES (?, ?, ?)",
            (customer_create.name, customer_create.email, customer_create.status),
        )
        customer = Customer(id=cursor.lastrowid, **customer_create.model_dump())
        logger.info(f"Created customer: {customer.id}")
        return customer

    async def list_customers(self, status: str | None = None) -> list[Customer]:
        """
        List customers ordered by id.

        Args:
            status: Exact, case-sensitive status to keep; None or "" returns everything
        """
        if status:
            rows = self._query(
                "SELECT id, name, email, status FROM customers WHERE status = ? ORDER BY id",
                (status,),
            )
        else:
            rows = self._query("SELECT id, name, email, status FROM customers ORDER BY id")
        return [_row_to_customer(row) for row in rows]

    async def get_customer(self, customer_id: int | str) -> Customer:
        """
        Get customer by id.

        Raises:
            CustomerNotFoundError: no row with this id
            CustomerStorageError: id unparsable or query failed
        """
        key = parse_customer_id(customer_id)
        rows = self._query(
            "SELECT id, name, email, status FROM customers WHERE id = ?", (key,)
        )
        if not rows:
            raise CustomerNotFoundError(key)
        return _row_to_customer(rows[0])

    async def update_customer(self, customer_id: int | str, update: CustomerUpdate) -> Customer:
        """
        Fetch the customer, overlay the supplied fields and write all columns back.

        Returns:
            Customer: The merged record as stored
        """
        current = await self.get_customer(customer_id)
        merged = current.merge(update)

        self._execute(
            "UPDATE customers SET name = ?, email = ?, status = ? WHERE id = ?",
            (merged.name, merged.email, merged.status, merged.id),
        )
        logger.info(f"Updated customer: {merged.id}")
        return merged

    async def delete_customer(self, customer_id: int | str) -> None:
        """
        Hard-delete a customer. Deleting an absent id is not an error.
        """
        key = parse_customer_id(customer_id)
        cursor = self._execute("DELETE FROM customers WHERE id = ?", (key,))
        logger.info(f"Deleted customer: {key} (rows affected: {cursor.rowcount})")

    async def ping(self) -> None:
        """Run a trivial query to prove the connection is usable."""
        self._query("SELECT 1")

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
        self._initialized = False


async def get_customer_db(request: Request) -> CustomerDatabase:
    """
    FastAPI dependency returning the storage handle opened at startup.

    Raises:
        CustomerStorageError: application started without a storage handle
    """
    db = getattr(request.app.state, "customer_db", None)
    if db is None:
        raise CustomerStorageError("customer database is not initialized")
    return db
