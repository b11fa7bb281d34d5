"""
Customer CRUD API endpoints.

Each handler maps one HTTP request onto CustomerDatabase calls. Storage
failures are raised as CustomerStorageError / CustomerNotFoundError and
turned into JSON error responses by the application exception handlers.
"""

import logging
import os

from fastapi import APIRouter, Depends, status

from customers_api.config import Settings, get_settings
from customers_api.models.customer import (
    Customer,
    CustomerCreate,
    CustomerUpdate,
    ErrorResponse,
    MessageResponse,
)
from customers_api.storage.database import (
    CustomerDatabase,
    CustomerStorageError,
    get_customer_db,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
    responses={500: {"model": ErrorResponse, "description": "Customer storage error"}},
)


def terminate_process(exit_code: int = 1) -> None:
    """Stop the whole server immediately, skipping shutdown handlers."""
    os._exit(exit_code)


@router.post(
    "",
    response_model=Customer,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Malformed request body"}},
)
async def create_customer(
    customer_data: CustomerCreate,
    db: CustomerDatabase = Depends(get_customer_db),
) -> Customer:
    """
    Create a new customer.

    Missing fields are stored as empty strings; only an unparsable or
    wrongly typed body is rejected.
    """
    return await db.create_customer(customer_data)


@router.get("", response_model=list[Customer])
async def list_customers(
    status: str | None = None,
    db: CustomerDatabase = Depends(get_customer_db),
) -> list[Customer]:
    """
    List customers, optionally keeping only those whose status equals `status` exactly.
    """
    return await db.list_customers(status=status)


@router.get("/{customer_id}", response_model=Customer)
async def get_customer(
    customer_id: str,
    db: CustomerDatabase = Depends(get_customer_db),
) -> Customer:
    return await db.get_customer(customer_id)


@router.put(
    "/{customer_id}",
    response_model=Customer,
    responses={400: {"model": ErrorResponse, "description": "Malformed request body"}},
)
async def update_customer(
    customer_id: str,
    update_data: CustomerUpdate,
    db: CustomerDatabase = Depends(get_customer_db),
) -> Customer:
    """
    Update a customer.

    Fields present in the body replace the stored values; omitted fields
    are kept. All columns are written back in a single statement.
    """
    return await db.update_customer(customer_id, update_data)


@router.delete("/{customer_id}", response_model=MessageResponse)
async def delete_customer(
    customer_id: str,
    db: CustomerDatabase = Depends(get_customer_db),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """
    Delete a customer. No existence check is made.

    With API_FATAL_ON_DELETE_FAILURE enabled a failed delete terminates
    the process instead of returning an error response.
    """
    try:
        await db.delete_customer(customer_id)
    except CustomerStorageError as e:
        if settings.api.fatal_on_delete_failure:
            logger.critical(f"can't execute delete statement for customer {customer_id}: {e}")
            terminate_process(1)
        raise

    return MessageResponse(message="customer deleted")
