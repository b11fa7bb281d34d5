#!/usr/bin/env python3
"""
Database initialization script for customer records.

Creates the SQLite customers table ahead of the first server start.

Usage:
    python scripts/init_customer_db.py [--db-path PATH]

Options:
    --db-path PATH    Path to SQLite database file (default: STORAGE_CUSTOMER_DB_PATH
                      or ./data/customers.db)

This script is idempotent - safe to run multiple times.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from customers_api.config import get_settings
from customers_api.storage.database import CustomerDatabase, CustomerStorageError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def init_database(db_path: str) -> bool:
    """
    Initialize customer database schema.

    Returns:
        bool: True if initialization succeeded
    """
    db = CustomerDatabase(db_path=db_path)
    try:
        await db.initialize()
        customers = await db.list_customers()
        logger.info(f"customers: {len(customers)} rows")
    except CustomerStorageError as e:
        logger.error(f"Database initialization failed: {e}")
        return False
    finally:
        await db.close()

    return True


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Initialize customer database schema")
    parser.add_argument(
        "--db-path",
        default=get_settings().storage.customer_db_path,
        help="Path to SQLite database file",
    )
    args = parser.parse_args()

    if not asyncio.run(init_database(args.db_path)):
        sys.exit(1)

    logger.info(f"Database ready: {Path(args.db_path).absolute()}")


if __name__ == "__main__":
    main()
