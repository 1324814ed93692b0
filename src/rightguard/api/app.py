"""FastAPI app factory for the Right Guard API."""

import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from rightguard import __version__
from rightguard.api.alerts import router as alerts_router
from rightguard.api.auth import router as auth_router
from rightguard.api.legal_guides import router as legal_guides_router
from rightguard.api.payments import router as payments_router
from rightguard.api.recordings import router as recordings_router
from rightguard.api.responses import failure, ok
from rightguard.errors import RightGuardError
from rightguard.settings import get_settings

LOGGER = logging.getLogger(__name__)

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
def health():
    """Report that the API process is up."""

    settings = get_settings()
    return ok({"status": "ok", "service": settings.observability.service_name, "version": __version__})


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item not in {"body", "query", "form"})
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid request: " + "; ".join(parts) if parts else "Invalid request"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RightGuardError)
    async def handle_domain_error(request: Request, exc: RightGuardError):
        if exc.status_code >= 500:
            LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return failure(exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return failure(_describe_validation_error(exc), status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return failure(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        LOGGER.exception("Unhandled error for %s %s", request.method, request.url.path)
        return failure("Internal server error", status_code=500)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance.
    """
    settings = get_settings()
    prefix = settings.api.prefix.rstrip("/")

    app = FastAPI(title="Right Guard API", version=__version__)
    app.include_router(auth_router, prefix=prefix)
    app.include_router(legal_guides_router, prefix=prefix)
    app.include_router(recordings_router, prefix=prefix)
    app.include_router(alerts_router, prefix=prefix)
    app.include_router(payments_router, prefix=prefix)
    app.include_router(health_router)
    _register_exception_handlers(app)

    return app


# For uvicorn, expose `app` at module level
app = create_app()

__all__ = ["app", "create_app"]
