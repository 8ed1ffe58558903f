"""
Order Sheet Backend: Order Schemas
===================================

What:  The ten-field order layout and the Pydantic request/response models.
How:   ORDER_FIELDS fixes the column order of every stored row. Request
       bodies are partial: every field is optional and unknown keys are kept,
       since the service performs no schema validation.
Who:   Used by the workbook store (row layout), the order service (merging)
       and the route handlers (request bodies, OpenAPI docs).
"""

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field

# Column order of the header row and of every data row.
ORDER_FIELDS: Tuple[str, ...] = (
    "id",
    "name",
    "address",
    "contact",
    "dateOfCreation",
    "orderDetails",
    "totalAmount",
    "advanceAmount",
    "challanDetail",
    "orderCompletionStatus",
)


class OrderPayload(BaseModel):
    """
    Partial order sent by the client on POST and PUT.

    Values are not type-checked; the table column says what a field holds.
    Only the keys the client actually sent are merged, so callers should
    use `model_dump(exclude_unset=True)`.
    """

    id: Optional[Any] = Field(default=None, description="Order id (generated on create)")
    name: Optional[Any] = Field(default=None, description="Customer name")
    address: Optional[Any] = Field(default=None, description="Delivery address")
    contact: Optional[Any] = Field(default=None, description="Phone or email")
    dateOfCreation: Optional[Any] = Field(
        default=None, description="Creation timestamp, YYYY-MM-DD HH:MM:SS"
    )
    orderDetails: Optional[Any] = Field(default=None, description="Free-text order contents")
    totalAmount: Optional[Any] = Field(default=None, description="Order total")
    advanceAmount: Optional[Any] = Field(default=None, description="Amount paid upfront")
    challanDetail: Optional[Any] = Field(default=None, description="Delivery challan reference")
    orderCompletionStatus: Optional[Any] = Field(default=None, description="Fulfilment status")

    model_config = {"extra": "allow"}


class DeleteResponse(BaseModel):
    """Body returned by DELETE /orders/{id}."""

    success: bool = True


class ErrorResponse(BaseModel):
    """
    JSON body for 400/500 responses.

    `message` is the raw text of the underlying error, unsanitized.
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Underlying error text")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and workbook status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    workbook: str = Field(description="Workbook status: readable, unreadable")
    order_count: Optional[int] = Field(default=None, description="Data rows in the workbook")
    uptime_seconds: float = Field(description="Seconds since service started")


# Row cells as returned by list/get: a positional list of raw values.
OrderRow = List[Any]
