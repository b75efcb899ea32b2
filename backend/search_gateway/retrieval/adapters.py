"""Lexical and vector retrievers scoped to a single tenant."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from search_gateway.core.errors import EmbeddingError
from search_gateway.models.entities import RawHit
from search_gateway.retrieval.embeddings import Embedder


class SearchBackend(Protocol):
    async def lexical_search(
        self,
        index: str,
        term_query: dict[str, Any],
        tenant_filter: dict[str, Any],
        size: int,
    ) -> list[RawHit]: ...

    async def vector_search(
        self,
        index: str,
        vector_field: str,
        query_vector: Sequence[float],
        tenant_filter: dict[str, Any],
        k: int,
        num_candidates: int,
    ) -> list[RawHit]: ...


def build_term_query(text: str, fields: Sequence[str]) -> dict[str, Any]:
    return {"multi_match": {"query": text, "fields": list(fields)}}


def build_tenant_filter(field: str, tenant_id: str) -> dict[str, Any]:
    return {"term": {field: tenant_id}}


class LexicalRetriever:
    """Term-match retrieval with a hard tenant filter."""

    def __init__(self, backend: SearchBackend, index: str, fields: Sequence[str], tenant_field: str) -> None:
        self.backend = backend
        self.index = index
        self.fields = list(fields)
        self.tenant_field = tenant_field

    async def retrieve(self, text: str, tenant_id: str, size: int) -> list[RawHit]:
        return await self.backend.lexical_search(
            self.index,
            build_term_query(text, self.fields),
            build_tenant_filter(self.tenant_field, tenant_id),
            size,
        )


class VectorRetriever:
    """Nearest-neighbour retrieval over query embeddings with a hard tenant filter."""

    def __init__(
        self,
        backend: SearchBackend,
        embedder: Embedder,
        index: str,
        vector_field: str,
        tenant_field: str,
    ) -> None:
        self.backend = backend
        self.embedder = embedder
        self.index = index
        self.vector_field = vector_field
        self.tenant_field = tenant_field

    async def retrieve(self, text: str, tenant_id: str, size: int, num_candidates: int) -> list[RawHit]:
        if num_candidates < size:
            raise ValueError("num_candidates must be >= size")
        try:
            vector = self.embedder.embed(text)
        except Exception as exc:
            raise EmbeddingError(f"embedding failed: {exc}", mode="semantic") from exc
        return await self.backend.vector_search(
            self.index,
            self.vector_field,
            vector,
            build_tenant_filter(self.tenant_field, tenant_id),
            size,
            num_candidates,
        )


__all__ = [
    "SearchBackend",
    "LexicalRetriever",
    "VectorRetriever",
    "build_term_query",
    "build_tenant_filter",
]
