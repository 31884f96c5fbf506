# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Build the DB engine / session factory and the login limiter from the
  settings and hang them on ``app.state`` (handlers reach them through
  dependencies, never through module globals).
* Register CORS middleware when cross-origin access is enabled.
* Register the request-logging middleware and the error handlers.
* Mount the three feature routers (auth, tickets, uploads).
* Serve uploaded files read-only under /uploads.
* Expose a /health endpoint for container liveness checks.

Production note
---------------
``create_tables`` only suits development.  In production run the Alembic
migrations and set CREATE_TABLES=false.
"""

import time
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from helpdesk.auth.router import router as auth_router
from helpdesk.core.config import Settings, get_settings
from helpdesk.core.errors import register_exception_handlers
from helpdesk.core.logger import logger
from helpdesk.core.ratelimit import LoginRateLimiter
from helpdesk.database import Base, build_engine, build_session_factory
from helpdesk.tickets.router import router as tickets_router
from helpdesk.uploads.router import router as uploads_router

# Register every ORM model on Base.metadata
import helpdesk.models.user     # noqa: F401, E402
import helpdesk.models.ticket   # noqa: F401, E402
from helpdesk.models.session import app_tables  # noqa: E402


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Bodies and cookies are NOT echoed – only the URL and metadata are recorded.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


# ---------------------------------------------------------------------------
# Static uploads
# ---------------------------------------------------------------------------


class UploadFiles(StaticFiles):
    """StaticFiles with a fixed Cache-Control policy."""

    def __init__(self, *args, cache_control: str, **kwargs):
        super().__init__(*args, **kwargs)
        self.cache_control = cache_control

    def file_response(self, *args, **kwargs) -> Response:
        response = super().file_response(*args, **kwargs)
        response.headers["Cache-Control"] = self.cache_control
        return response


def _upload_cache_control(settings: Settings) -> str:
    # File names carry a timestamp, so a stored file never changes
    if settings.is_production:
        return "public, max-age=31536000, immutable"
    return "no-cache"


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Helpdesk Tickets", version="1.0.0")
    app.state.settings = settings

    engine = build_engine(settings.database_url)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    if settings.create_tables:
        Base.metadata.create_all(bind=engine, tables=app_tables(settings.session_table))

    app.state.login_limiter = LoginRateLimiter(settings.login_rate_limit)

    # -- CORS ---------------------------------------------------------------
    # Credentialed cross-origin requests need an explicit origin, never "*".
    if settings.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[settings.cors_origin],
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE"],
            allow_headers=["Content-Type"],
        )

    app.add_middleware(_RequestLogMiddleware)
    register_exception_handlers(app)

    # -- Routers ------------------------------------------------------------
    app.include_router(auth_router)
    app.include_router(tickets_router)
    app.include_router(uploads_router)

    @app.on_event("startup")
    async def _on_startup():
        logger.info("Helpdesk service starting up (environment=%s)", settings.environment)

    @app.on_event("shutdown")
    async def _on_shutdown():
        logger.info("Helpdesk service shutting down")
        engine.dispose()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # -- Uploaded files -----------------------------------------------------
    # Mounted after the routers: POST /uploads stays with the upload router,
    # GET /uploads/<name> falls through to the static files.
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        "/uploads",
        UploadFiles(directory=str(upload_dir), cache_control=_upload_cache_control(settings)),
        name="uploads",
    )

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        create_app(_settings),
        host="0.0.0.0",
        port=_settings.port,
        proxy_headers=_settings.trust_proxy,
    )
