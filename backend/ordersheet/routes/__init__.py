# Routes package init
"""
Order Sheet Backend: API Routes Package
========================================

Route Inventory:
    - orders.py:  GET    /orders            (list all rows)
                  GET    /orders/{id}       (single row)
                  POST   /orders            (create)
                  PUT    /orders/{id}       (partial update)
                  DELETE /orders/{id}       (delete)
    - health.py:  GET    /health            (workbook readability probe)

Routes stay thin: pull the path id and body, call OrderService, set the
status code. Error statuses come from the handlers in main.py.
"""
