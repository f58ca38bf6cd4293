# ABOUTME: FastAPI application entry point
# ABOUTME: Configures app, registers routers, and sets up middleware and error handlers

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from docgateway.api import health, analyze, documents
from docgateway.api.endpoints import available_endpoints
from docgateway.config import get_settings
from docgateway.logging_config import setup_logging
from docgateway.middleware.cors import CORS_HEADERS, OpenCORSMiddleware
from docgateway.middleware.logging import RequestLoggingMiddleware
from docgateway.models.errors import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)
    if not settings.ai_api_key:
        logger.warning("AI_API_KEY is not set; POST /analyze will return 500 until it is configured")
    yield


app = FastAPI(
    title="Document Intelligence API",
    description="API-key authenticated gateway for AI document analysis",
    version="0.1.0",
    lifespan=lifespan,
    redirect_slashes=False,
)

# Add middleware (last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(OpenCORSMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Custom exception handler to format error responses."""
    # If detail is a dict, use it directly (for our custom error format)
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail
        )
    # Unmatched path or unmatched method on a known path
    if exc.status_code in (404, 405):
        body = ErrorResponse(code="NOT_FOUND", error="Not found", available_endpoints=available_endpoints())
        return JSONResponse(status_code=404, content=body.model_dump(exclude_none=True))
    # Otherwise, wrap it in standard format
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": "ERROR", "error": str(exc.detail)}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"code": "INTERNAL_ERROR", "error": "Internal server error"},
        headers=CORS_HEADERS,
    )


# Register routers
app.include_router(health.router)
app.include_router(analyze.router)
app.include_router(documents.router)
