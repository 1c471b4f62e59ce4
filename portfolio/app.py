import logging
import os

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from portfolio.core.config import Settings, get_settings
from portfolio.core.logging import setup_logging
from portfolio.routers import pages as pages_router
from portfolio.routers import projects as projects_router
from portfolio.services.project_service import ProjectService, build_project_service

logger = logging.getLogger(__name__)

BASE = os.path.dirname(__file__)
TEMPLATES_DIR = os.path.join(BASE, "templates")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; "
            "img-src 'self' data: https:; "
            "style-src 'self' 'unsafe-inline'; "
            "script-src 'self' 'unsafe-inline'",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def create_app(
    settings: Settings | None = None,
    project_service: ProjectService | None = None,
    *,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the FastAPI app; tests pass their own ProjectService."""
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level)

    app = FastAPI(title="Portfolio Projects API")
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.state.templates = Jinja2Templates(directory=TEMPLATES_DIR)
    app.state.project_service = project_service or build_project_service(settings)

    app.include_router(projects_router.router)
    app.include_router(pages_router.router)
    logger.info("Portfolio app ready (storage=%s, env=%s)", settings.storage_backend, settings.app_env)
    return app
