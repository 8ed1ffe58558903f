"""
Order Sheet Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh for each test):
    ├── workbook_path: Path of a not-yet-created .xlsx inside tmp_path
    ├── store:         WorkbookStore bound to workbook_path (file absent)
    ├── ready_store:   Same store after ensure_workbook() (header row only)
    ├── order_service: OrderService over ready_store
    ├── sample_order:  Partial order body as the front-end sends it
    └── test_client:   HTTPX AsyncClient talking to a fresh app over ready_store
"""

import os
import tempfile

# Override settings for testing BEFORE any ordersheet imports
os.environ["WORKBOOK_PATH"] = os.path.join(
    tempfile.mkdtemp(prefix="ordersheet_test_"), "orders.xlsx"
)
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ordersheet.services.order_service import OrderService
from ordersheet.services.workbook_store import WorkbookStore


@pytest.fixture
def workbook_path(tmp_path):
    return str(tmp_path / "orders.xlsx")


@pytest.fixture
def store(workbook_path):
    """A store whose backing file does not exist yet."""
    return WorkbookStore(path=workbook_path)


@pytest_asyncio.fixture
async def ready_store(store):
    """A store whose backing file holds only the header row."""
    await store.ensure_workbook()
    return store


@pytest.fixture
def order_service(ready_store):
    return OrderService(ready_store)


@pytest.fixture
def sample_order():
    return {
        "name": "Asha Traders",
        "address": "12 MG Road, Pune",
        "contact": "9876543210",
        "orderDetails": "40 cartons, printed",
        "totalAmount": 12000,
        "advanceAmount": 5000,
        "challanDetail": "CH-0042",
        "orderCompletionStatus": "pending",
    }


@pytest_asyncio.fixture
async def test_client(ready_store):
    """
    HTTPX AsyncClient routed straight into a fresh app.

    ASGITransport does not run the lifespan, so the workbook is seeded by
    ready_store instead.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/orders")
            assert response.status_code == 200
    """
    from ordersheet.main import create_app

    app = create_app(store=ready_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
