"""
API routers for the Customers API service.

Routers:
- customers: Customer CRUD
"""

from customers_api.routers.customers import router as customers_router

__all__ = ["customers_router"]
