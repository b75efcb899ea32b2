"""Administrative routes for the search gateway."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from search_gateway.api.dependencies import get_search_backend
from search_gateway.core.metrics import metrics_response
from search_gateway.retrieval.backend import ElasticBackend

router = APIRouter()


@router.get("/health", summary="Liveness check")
async def health() -> dict[str, bool]:
    return {"ok": True}


@router.get("/ready", summary="Readiness check against the search backend")
async def ready(backend: ElasticBackend = Depends(get_search_backend)) -> JSONResponse:
    reachable = await backend.ping()
    return JSONResponse(status_code=200 if reachable else 503, content={"ok": reachable})


@router.get("/metrics", summary="Prometheus metrics")
async def get_metrics():
    return metrics_response()


__all__ = ["router"]
