"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from bucket_gateway.core.config import settings
from bucket_gateway.core.errors import FacadeError
from bucket_gateway.core.logging import setup_logging
from bucket_gateway.routes import files_router, health_router
from bucket_gateway.routes.responses import error_response
from bucket_gateway.services.facade import StorageFacade
from bucket_gateway.storage.factory import build_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup, cleanup on shutdown."""
    setup_logging()

    if not settings.API_KEY:
        logger.warning("API_KEY is not set; every API request will be rejected")

    app.state.api_key = settings.API_KEY
    registry = build_registry(settings)
    http_client = httpx.AsyncClient(
        timeout=settings.REMOTE_FETCH_TIMEOUT_SECONDS,
        follow_redirects=False,
    )
    app.state.facade = StorageFacade(
        registry,
        settings.admission_policy(),
        http_client=http_client,
        fetch_timeout=settings.REMOTE_FETCH_TIMEOUT_SECONDS,
    )
    logger.info("Serving %d bucket(s): %s", len(registry), ", ".join(registry) or "-")

    try:
        yield
    finally:
        await http_client.aclose()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Content-Length", "Accept"],
    expose_headers=["Content-Length", "Content-Type", "ETag"],
    max_age=86400,
)


@app.exception_handler(FacadeError)
async def facade_error_handler(request: Request, exc: FacadeError):
    return error_response(exc.message, exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response("Invalid API path", 404)
    return error_response(str(exc.detail), exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("query", "path", "body"))
        message = f"Invalid {field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return error_response(message, 400)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error for %s %s", request.method, request.url.path)
    return error_response("Internal server error", 500)


# Register routers
app.include_router(health_router)
app.include_router(files_router)
