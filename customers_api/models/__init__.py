"""
Data models for the Customers API service.
"""

from customers_api.models.customer import (
    Customer,
    CustomerCreate,
    CustomerUpdate,
    ErrorResponse,
    MessageResponse,
)

__all__ = [
    "Customer",
    "CustomerCreate",
    "CustomerUpdate",
    "ErrorResponse",
    "MessageResponse",
]
