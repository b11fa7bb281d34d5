"""
Storage layer for customer records.
"""

from customers_api.storage.database import (
    CustomerDatabase,
    CustomerNotFoundError,
    CustomerStorageError,
    get_customer_db,
)

__all__ = [
    "CustomerDatabase",
    "CustomerNotFoundError",
    "CustomerStorageError",
    "get_customer_db",
]
