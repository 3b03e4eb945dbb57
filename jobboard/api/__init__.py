"""
API module - FastAPI routers, endpoint definitions and WebSocket streaming.

Usage:
    from jobboard.api.routes import api_router
    app.include_router(api_router, prefix="/api")
"""
