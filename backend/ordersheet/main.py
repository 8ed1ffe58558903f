"""
Order Sheet Backend: FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (`uvicorn ordersheet.main:app`) or `python -m ordersheet`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → CORS           │
    │                                                     │
    │  Routes:      /orders  /orders/{id}  /health        │
    │                                                     │
    │  Exception Handlers:                                │
    │  NotFound→404 │ BadBody,OrderWrite→400 │ Storage→500│
    │                                                     │
    │  app.state:   workbook_store, order_service         │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging (console + optional app.log)
    2. Create the workbook with only the header row if it is absent
    3. Log startup complete
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from ordersheet import __version__
from ordersheet.config import settings
from ordersheet.exceptions import (
    NotFoundError,
    OrderSheetError,
    OrderWriteError,
    StorageError,
)
from ordersheet.middleware.logging import RequestLoggingMiddleware
from ordersheet.middleware.request_id import RequestIDMiddleware, request_id_var
from ordersheet.routes import health, orders
from ordersheet.services.order_service import OrderService
from ordersheet.services.workbook_store import WorkbookStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15 12:00:00 INFO: message
    Handlers: stdout always; settings.log_file when it is non-empty.
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,  # Override any existing logging config
    )

    # uvicorn's own access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, then seed the workbook if absent.
    Shutdown: nothing to release; the store holds no open handles.
    """
    setup_logging()
    logger.info("Order Sheet backend starting up...")

    store: WorkbookStore = app.state.workbook_store
    await store.ensure_workbook()
    logger.info("Workbook: %s (sheet '%s')", store.path, store.sheet_name)

    logger.info("Server running on http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Order Sheet backend shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

        NotFoundError           → 404, plain text "Order not found"
        RequestValidationError  → 400, body could not be parsed as an order
        OrderWriteError         → 400, raw error text
        StorageError            → 500, raw error text
        OrderSheetError         → 500, raw error text
        Exception               → 500, raw error text

    Error text is passed through unsanitized; see exceptions.py.
    """

    def error_body(code: str, message: str) -> dict:
        return {
            "error": code,
            "message": message,
            "request_id": request_id_var.get(""),
        }

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return PlainTextResponse(exc.message, status_code=404)

    @app.exception_handler(RequestValidationError)
    async def handle_bad_body(request: Request, exc: RequestValidationError):
        # Only POST/PUT bodies are validated: malformed JSON or a non-object body
        message = "; ".join(str(err.get("msg", "")) for err in exc.errors()) or "Invalid request body"
        logger.warning("[%s] Rejected body: %s", request_id_var.get(""), message)
        return JSONResponse(status_code=400, content=error_body("write_error", message))

    @app.exception_handler(OrderWriteError)
    async def handle_write_error(request: Request, exc: OrderWriteError):
        logger.warning("[%s] Write error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content=error_body("write_error", exc.message))

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(status_code=500, content=error_body("storage_error", exc.message))

    @app.exception_handler(OrderSheetError)
    async def handle_app_error(request: Request, exc: OrderSheetError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=500, content=error_body("server_error", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("internal_server_error", str(exc) or type(exc).__name__),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(store: Optional[WorkbookStore] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store: Workbook store to serve from. Defaults to one built from
               settings; tests pass a store pointed at a temporary file.

    Returns:
        Fully configured FastAPI instance. The store and the service bound
        to it live on app.state for the lifetime of the app.
    """
    app = FastAPI(
        title="Order Sheet API",
        description="CRUD over an order table kept in a local .xlsx workbook.",
        version=__version__,
        lifespan=lifespan,
    )

    workbook_store = store or WorkbookStore()
    app.state.workbook_store = workbook_store
    app.state.order_service = OrderService(workbook_store)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(orders.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `ordersheet.main:app` to be importable
app = create_app()
