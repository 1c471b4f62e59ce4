"""
FastAPI routers grouped by concern (JSON API, HTML pages).

Each module exposes an APIRouter included by the app factory.
"""
