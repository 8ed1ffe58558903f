"""
Order Sheet Backend: Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the order CRUD workflow.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return responses with the matching HTTP status code.
Who:   Raised by the workbook store and the order service; caught by global handlers.

Exception Hierarchy:
    OrderSheetError (base)   → 500 Internal Server Error
    ├── NotFoundError        → 404 Not Found (plain text "Order not found")
    ├── StorageError         → 500 Internal Server Error (read/list/delete paths)
    └── OrderWriteError      → 400 Bad Request (create/update paths)

Fault responses carry the raw underlying error text. The service is a
trusted local tool; sanitizing these messages is a known hardening gap.
"""

from typing import Any, Dict, Optional


class OrderSheetError(Exception):
    """
    Base exception for all Order Sheet application errors.

    Attributes:
        message:  Error description returned in the API response
        context:  Additional debug info (logged server-side)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(OrderSheetError):
    """
    Raised when no row in the order table carries the requested id.

    HTTP:    404 Not Found, plain-text body
    """

    def __init__(
        self,
        resource: str = "Order",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource_id = resource_id


class StorageError(OrderSheetError):
    """
    Raised when the backing workbook cannot be read or written.

    When:    File missing, permission denied, disk full, not a valid .xlsx,
             orders sheet absent.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Workbook storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class OrderWriteError(OrderSheetError):
    """
    Raised when creating or updating an order fails for any reason
    other than a missing id.

    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Order could not be saved",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
