# Services package init
"""
Order Sheet Backend: Services Layer
====================================

What:  Business logic and persistence sitting behind the route handlers.

Service Inventory:
    - WorkbookStore: whole-file read/append/replace/delete over the .xlsx table
    - OrderService:  id lookup, id generation, update merging, id → position

Both are built once by the app factory (create_app) and reached from
routes through FastAPI dependencies, never through module-level globals.
"""
