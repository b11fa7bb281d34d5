"""
Customers API - CRUD HTTP service for customer records.

Example:
    >>> from customers_api import get_settings
    >>> settings = get_settings()
    >>> print(settings.service.port)
"""

from customers_api.config import get_settings

__all__ = ["get_settings"]
