"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    query: str
    tenant_id: str | None = Field(default=None, alias="tenantId")


class HybridSearchRequest(SearchRequest):
    alpha: float | None = Field(default=None, description="Lexical weight; 1 - alpha goes to vector scores")


class SearchHit(BaseModel):
    id: str
    score: float
    title: str | None = None
    url: str | None = None


class HybridHit(BaseModel):
    id: str
    hybrid_score: float
    bm25_score: float
    vector_score: float
    title: str | None = None
    url: str | None = None


class SearchResponse(BaseModel):
    mode: Literal["keyword", "semantic"]
    query: str
    results: list[SearchHit]


class HybridSearchResponse(BaseModel):
    mode: Literal["hybrid"] = "hybrid"
    alpha: float
    query: str
    results: list[HybridHit]


class ErrorResponse(BaseModel):
    error: str


__all__ = [
    "SearchRequest",
    "HybridSearchRequest",
    "SearchHit",
    "HybridHit",
    "SearchResponse",
    "HybridSearchResponse",
    "ErrorResponse",
]
