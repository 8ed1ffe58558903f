"""
Order Sheet Backend: Request Dependencies
==========================================

What:  FastAPI dependencies handing route handlers the objects built at startup.
How:   create_app() stores one WorkbookStore and one OrderService on
       `app.state`; these functions read them back per request.
Who:   Used by route handlers via `Depends(...)`, overridden in tests via
       `app.dependency_overrides` when a fake is needed.
"""

from fastapi import Request

from ordersheet.services.order_service import OrderService
from ordersheet.services.workbook_store import WorkbookStore


def get_workbook_store(request: Request) -> WorkbookStore:
    """The process-wide workbook store."""
    return request.app.state.workbook_store


def get_order_service(request: Request) -> OrderService:
    """The process-wide order service, bound to the workbook store."""
    return request.app.state.order_service
