# app/main.py
"""Four Paws admin API - FastAPI application entrypoint."""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import AppConfig, load_config, log_config_snapshot
from app.correlation import CorrelationIdMiddleware
from app.errors import register_exception_handlers
from app.rate_limiter import RateLimiter
from app.routers import auth, media, memorials, pets, public, themes
from auth.service import build_auth_service
from persistence.db import Database

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests exceeding size limit to prevent payload bombs."""

    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            return JSONResponse(
                status_code=413,
                content={"error": "Request entity too large"},
            )
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


def create_app(
    config: Optional[AppConfig] = None,
    db: Optional[Database] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """
    Build the application with its store, auth service and rate limiter.

    A Database passed in stays owned by the caller and is not closed at
    shutdown; one opened here from config.database_path is.
    """
    config = config or load_config()
    log_config_snapshot(config)

    owns_db = db is None
    database = db if db is not None else Database(config.database_path)
    database.init_schema()

    started_at = datetime.now(timezone.utc)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_db:
            database.close()

    app = FastAPI(
        title="Four Paws",
        description="Pet memorial studio admin API",
        version=config.service_version,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.db = database
    app.state.auth_service = build_auth_service(
        database,
        secret=config.session_secret,
        secure=config.secure_cookies,
        clock=clock,
    )
    app.state.rate_limiter = RateLimiter(clock=clock)

    # Middleware stack (added in reverse execution order)
    # 1. CorrelationId: runs first, adds X-Request-Id to responses
    # 2. SecurityHeaders
    # 3. RequestSizeLimit: rejects oversized requests early
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=config.max_request_size_bytes)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(pets.router)
    app.include_router(memorials.router)
    app.include_router(themes.router)
    app.include_router(media.router)
    app.include_router(public.router)

    @app.get("/health")
    async def health():
        """Liveness check with service observability."""
        return {
            "status": "healthy",
            "service": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "started_at": started_at.isoformat(),
        }

    return app


app = create_app()
