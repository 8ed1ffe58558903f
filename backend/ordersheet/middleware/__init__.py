# Middleware package init
"""
Order Sheet Backend: Middleware Package
========================================

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    The request ID is set first so the access log line can carry it;
    CORS is FastAPI's CORSMiddleware, limited to the configured front-end.
"""
