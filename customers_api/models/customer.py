"""
Customer data models.

A customer is the only record type served by this service: an
auto-assigned integer id plus three free-form text fields.
"""

from pydantic import BaseModel, Field, field_validator


class Customer(BaseModel):
    """Persisted customer record."""

    id: int = Field(..., description="Storage-assigned identifier")
    name: str = Field(default="")
    email: str = Field(default="")
    status: str = Field(default="")

    def merge(self, update: "CustomerUpdate") -> "Customer":
        """
        Overlay the fields supplied in an update on this record.

        Fields omitted from the update (or sent as null) keep their
        current values. The id never changes.
        """
        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        return self.model_copy(update=changes)


class CustomerCreate(BaseModel):
    """
    Schema for creating a new customer.

    Every field is optional; an omitted field is stored as an empty string.
    Any client-supplied id is ignored.
    """

    name: str = Field(default="")
    email: str = Field(default="")
    status: str = Field(default="")

    @field_validator("name", "email", "status", mode="before")
    @classmethod
    def null_as_empty(cls, v: str | None) -> str:
        return "" if v is None else v


class CustomerUpdate(BaseModel):
    """Schema for updating customer details (any subset of fields)."""

    name: str | None = Field(default=None)
    email: str | None = Field(default=None)
    status: str | None = Field(default=None)


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""

    detail: str
    error: str
