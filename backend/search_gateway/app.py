"""FastAPI application setup for the search gateway."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from search_gateway.api.dependencies import (
    close_search_backend,
    get_app_settings,
    get_embedder,
    get_search_backend,
    get_search_service,
)
from search_gateway.api.routes_admin import router as admin_router
from search_gateway.api.routes_search import router as search_router
from search_gateway.core.config import get_settings
from search_gateway.core.errors import RetrievalError
from search_gateway.core.logging import configure_logging, get_logger, log_context

_settings = get_settings()
configure_logging(_settings.log_level, use_json=_settings.log_json)

logger = get_logger(__name__)

app = FastAPI(
    title="Search Gateway",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.include_router(search_router, prefix="/api", tags=["search"])
app.include_router(admin_router, prefix="", tags=["admin"])


@app.exception_handler(RetrievalError)
async def retrieval_error_handler(request: Request, exc: RetrievalError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return JSONResponse(status_code=422, content={"error": "; ".join(messages)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra=log_context(path=request.url.path))
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.on_event("startup")
async def startup() -> None:
    """Warm up core singletons on startup."""
    get_app_settings()
    get_search_backend()
    get_embedder()
    get_search_service()


@app.on_event("shutdown")
async def shutdown() -> None:
    await close_search_backend()
