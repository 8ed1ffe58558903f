"""
Order Sheet Backend: Application Package Initializer
=====================================================

What: Marks the `ordersheet` directory as a Python package.
Who:  Used by uvicorn (`ordersheet.main:app`), by `python -m ordersheet`, and by pytest.

Architecture Note:
    The backend is layered the same way top to bottom:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │       Services (Business Logic)     │  ← id lookup, merge, id → position
    ├─────────────────────────────────────┤
    │          Schemas (Contracts)        │  ← Pydantic request bodies
    ├─────────────────────────────────────┤
    │     Workbook Store (Persistence)    │  ← whole-file .xlsx read/rewrite
    └─────────────────────────────────────┘

    Routes format responses and status codes, services own the order
    semantics, and the store is the only layer that touches the disk.
"""

__version__ = "1.0.0"
