"""Search orchestration."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Sequence, TypeVar

from search_gateway.core.config import Settings
from search_gateway.core.errors import RetrievalError
from search_gateway.core.logging import get_logger, log_context
from search_gateway.core.metrics import RESULTS_RETURNED, SEARCH_FAILURES, SEARCH_LATENCY, SEARCH_REQUESTS
from search_gateway.models.entities import FusedResult, RawHit
from search_gateway.retrieval.adapters import LexicalRetriever, SearchBackend, VectorRetriever
from search_gateway.retrieval.embeddings import Embedder
from search_gateway.retrieval.hybrid import fuse_results, normalize_hits, rank_hits

logger = get_logger(__name__)

T = TypeVar("T")


class SearchService:
    """Coordinates keyword, semantic, and hybrid retrieval flows.

    Holds no per-request state; one instance serves every request.
    """

    def __init__(self, backend: SearchBackend, settings: Settings, embedder: Embedder) -> None:
        self.settings = settings
        self.lexical = LexicalRetriever(
            backend,
            index=settings.index_name,
            fields=settings.lexical_fields,
            tenant_field=settings.tenant_field,
        )
        self.vector = VectorRetriever(
            backend,
            embedder,
            index=settings.index_name,
            vector_field=settings.vector_field,
            tenant_field=settings.tenant_field,
        )

    async def keyword_search(self, query_text: str, tenant_id: str | None = None) -> dict[str, Any]:
        tenant = self._resolve_tenant(tenant_id)
        hits = await self._observe(
            "keyword",
            tenant,
            self.lexical.retrieve(query_text, tenant, self.settings.single_mode_size),
        )
        return {"mode": "keyword", "query": query_text, "results": _single_mode_rows(hits)}

    async def semantic_search(self, query_text: str, tenant_id: str | None = None) -> dict[str, Any]:
        tenant = self._resolve_tenant(tenant_id)
        hits = await self._observe(
            "semantic",
            tenant,
            self.vector.retrieve(
                query_text,
                tenant,
                self.settings.single_mode_size,
                self.settings.single_mode_num_candidates,
            ),
        )
        return {"mode": "semantic", "query": query_text, "results": _single_mode_rows(hits)}

    async def hybrid_search(
        self,
        query_text: str,
        tenant_id: str | None = None,
        alpha: float | None = None,
    ) -> dict[str, Any]:
        tenant = self._resolve_tenant(tenant_id)
        weight = self.settings.default_alpha if alpha is None else alpha
        fused = await self._observe("hybrid", tenant, self._hybrid(query_text, tenant, weight))
        return {
            "mode": "hybrid",
            "alpha": weight,
            "query": query_text,
            "results": [_hybrid_row(result) for result in fused],
        }

    async def _hybrid(self, query_text: str, tenant: str, alpha: float) -> list[FusedResult]:
        size = self.settings.hybrid_fetch_size
        tasks = (
            asyncio.ensure_future(self.lexical.retrieve(query_text, tenant, size)),
            asyncio.ensure_future(
                self.vector.retrieve(query_text, tenant, size, self.settings.hybrid_num_candidates)
            ),
        )
        try:
            lexical_hits, vector_hits = await asyncio.gather(*tasks)
        except BaseException:
            # A failed mode fails the whole call; stop the other backend request.
            for task in tasks:
                task.cancel()
            raise
        anchor = self.settings.anchor_score_bounds
        return fuse_results(
            lexical_hits,
            vector_hits,
            normalize_hits(lexical_hits, anchor_bounds=anchor),
            normalize_hits(vector_hits, anchor_bounds=anchor),
            alpha=alpha,
            top_k=self.settings.hybrid_top_k,
        )

    def _resolve_tenant(self, tenant_id: str | None) -> str:
        # Only an absent tenant gets the default; "" is a tenant like any other.
        return self.settings.default_tenant if tenant_id is None else tenant_id

    async def _observe(self, mode: str, tenant: str, work: Awaitable[Sequence[T]]) -> Sequence[T]:
        start_time = time.perf_counter()
        try:
            results = await work
        except RetrievalError as exc:
            SEARCH_REQUESTS.labels(mode=mode, status="error").inc()
            SEARCH_FAILURES.labels(mode=mode, kind=exc.kind).inc()
            logger.warning(
                "Search failed: %s",
                exc,
                extra=log_context(mode=mode, tenant=tenant, kind=exc.kind),
            )
            raise
        duration = time.perf_counter() - start_time
        SEARCH_LATENCY.labels(mode=mode).observe(duration)
        SEARCH_REQUESTS.labels(mode=mode, status="ok").inc()
        RESULTS_RETURNED.labels(mode=mode).observe(len(results))
        logger.info(
            "Search completed",
            extra=log_context(
                mode=mode,
                tenant=tenant,
                results=len(results),
                latency_ms=round(duration * 1000, 2),
            ),
        )
        return results


def _single_mode_rows(hits: Sequence[RawHit]) -> list[dict[str, Any]]:
    return [
        {
            "id": hit.id,
            "score": hit.raw_score,
            "title": hit.document.title,
            "url": hit.document.url,
        }
        for hit in rank_hits(hits)
    ]


def _hybrid_row(result: FusedResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "hybrid_score": result.hybrid_score,
        "bm25_score": result.lexical_score,
        "vector_score": result.vector_score,
        "title": result.document.title,
        "url": result.document.url,
    }


__all__ = ["SearchService"]
