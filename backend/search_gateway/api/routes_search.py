"""Search API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from search_gateway.api.dependencies import get_search_service
from search_gateway.models.dto import (
    ErrorResponse,
    HybridSearchRequest,
    HybridSearchResponse,
    SearchRequest,
    SearchResponse,
)
from search_gateway.retrieval.search import SearchService

router = APIRouter()

_ERRORS = {500: {"model": ErrorResponse}}


@router.post("/keyword-search", response_model=SearchResponse, responses=_ERRORS, summary="BM25 keyword search")
async def keyword_search(
    request: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    payload = await service.keyword_search(request.query, tenant_id=request.tenant_id)
    return SearchResponse(**payload)


@router.post("/semantic-search", response_model=SearchResponse, responses=_ERRORS, summary="Vector kNN search")
async def semantic_search(
    request: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    payload = await service.semantic_search(request.query, tenant_id=request.tenant_id)
    return SearchResponse(**payload)


@router.post(
    "/hybrid-search",
    response_model=HybridSearchResponse,
    responses=_ERRORS,
    summary="Weighted fusion of keyword and vector search",
)
async def hybrid_search(
    request: HybridSearchRequest,
    service: SearchService = Depends(get_search_service),
) -> HybridSearchResponse:
    payload = await service.hybrid_search(request.query, tenant_id=request.tenant_id, alpha=request.alpha)
    return HybridSearchResponse(**payload)


__all__ = ["router"]
