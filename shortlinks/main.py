"""URL Shortener Service - Main FastAPI Application.

An in-memory URL shortening service with:
- Create short URLs with an expiry (default 30 minutes)
- Custom short codes
- Redirect to original URLs, recording access analytics
- Short URL statistics with recent access history
- Structured event shipping to a remote log collector
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from nanoid import generate
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import Settings, settings as default_settings
from .core.exceptions import ShortLinkError
from .core.log_shipper import LogShipper
from .core.registry import LinkRegistry
from .services.links import LinkService
from .api.routes import health_router, urls_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def build_log_shipper(settings: Settings) -> LogShipper:
    """Create a log shipper from settings."""
    return LogShipper(
        base_url=settings.log_collector_url,
        timeout=settings.log_timeout_seconds,
        max_attempts=settings.log_retry_attempts,
        retry_delay=settings.log_retry_delay_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    settings: Settings = app.state.settings
    shipper: LogShipper = app.state.log_shipper
    # Startup
    shipper.bind_loop(asyncio.get_running_loop())
    logger.info(f"Starting {settings.app_title} on port {settings.port}...")
    shipper.info(
        settings.log_stack,
        "server",
        f"URL Shortener service started on port {settings.port}",
    )
    yield
    # Shutdown
    logger.info("Shutting down URL Shortener Service...")
    await shipper.aclose()


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[LinkRegistry] = None,
    log_shipper: Optional[LogShipper] = None,
    link_service: Optional[LinkService] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Each app owns its registry, log shipper and link service; pass them in
    to share or replace them (tests do this to isolate state).

    Args:
        settings: Optional settings, defaults to the global settings.
        registry: Optional link registry.
        log_shipper: Optional log shipper.
        link_service: Optional link service built on the above.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or default_settings
    registry = registry if registry is not None else LinkRegistry()
    log_shipper = log_shipper or build_log_shipper(settings)
    link_service = link_service or LinkService(registry, log_shipper, settings)

    app = FastAPI(
        title=settings.app_title,
        description=settings.app_description,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.log_shipper = log_shipper
    app.state.link_service = link_service

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def unhandled_error_response(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled Exception on {request.url.path}: {exc!r}")
        log_shipper.fatal(
            settings.log_stack, "middleware", f"Unhandled error: {exc}"
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_code": "internal"},
        )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Tag each request with a short id and ship a receipt event.

        Unhandled errors are answered here so the 500 carries the id too.
        """
        request_id = generate(size=8)
        request.state.request_id = request_id
        log_shipper.info(
            settings.log_stack,
            "middleware",
            f"Request {request_id} received: {request.method} {request.url.path}",
        )
        try:
            response = await call_next(request)
        except Exception as exc:
            response = unhandled_error_response(request, exc)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(ShortLinkError)
    async def short_link_exception_handler(request: Request, exc: ShortLinkError):
        """Render service errors as a short message and error code."""
        if exc.status_code >= 500:
            logger.error(f"Internal error on {request.url.path}: {exc.message}")
            log_shipper.fatal(
                settings.log_stack,
                "api",
                f"Request to {request.url.path} failed: {exc.message}",
            )
            detail = "Internal server error"
        else:
            detail = exc.message
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": detail, "error_code": exc.error_code},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Malformed request bodies are client errors, not schema errors."""
        log_shipper.error(
            settings.log_stack,
            "handler",
            f"Malformed request body on {request.method} {request.url.path}",
        )
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request body", "error_code": "invalid_input"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Unknown routes get a uniform not-found body."""
        if exc.status_code == 404:
            log_shipper.warn(
                settings.log_stack,
                "middleware",
                f"404 - Route not found: {request.method} {request.url.path}",
            )
            return JSONResponse(
                status_code=404,
                content={"detail": "Route not found", "error_code": "not_found"},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """General exception handler."""
        return unhandled_error_response(request, exc)

    # Include routers; /{shortcode} must come last
    app.include_router(health_router)
    app.include_router(urls_router)

    return app


app = create_app()
