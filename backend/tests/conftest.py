"""Test fixtures for the search gateway."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Sequence

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from search_gateway.models.entities import DocumentPayload, RawHit  # noqa: E402


class FakeBackend:
    """In-memory backend returning canned hits, filtered by tenant."""

    def __init__(self, tenant_field: str = "tenant_id") -> None:
        self.tenant_field = tenant_field
        self.lexical: list[tuple[str, RawHit]] = []
        self.vector: list[tuple[str, RawHit]] = []
        self.lexical_error: Exception | None = None
        self.vector_error: Exception | None = None
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.reachable = True
        self.closed = False
        self.vector_delay = 0.0
        self.vector_finished = False

    def add_lexical(self, doc_id: str, score: float, tenant: str = "demo", **source: Any) -> None:
        self.lexical.append((tenant, _hit(doc_id, score, source)))

    def add_vector(self, doc_id: str, score: float, tenant: str = "demo", **source: Any) -> None:
        self.vector.append((tenant, _hit(doc_id, score, source)))

    async def lexical_search(self, index, term_query, tenant_filter, size) -> list[RawHit]:
        self.calls.append(
            ("lexical", {"index": index, "term_query": term_query, "tenant_filter": tenant_filter, "size": size})
        )
        if self.lexical_error is not None:
            raise self.lexical_error
        return self._select(self.lexical, tenant_filter, size)

    async def vector_search(self, index, vector_field, query_vector, tenant_filter, k, num_candidates) -> list[RawHit]:
        self.calls.append(
            (
                "vector",
                {
                    "index": index,
                    "vector_field": vector_field,
                    "query_vector": list(query_vector),
                    "tenant_filter": tenant_filter,
                    "k": k,
                    "num_candidates": num_candidates,
                },
            )
        )
        if self.vector_delay:
            await asyncio.sleep(self.vector_delay)
        if self.vector_error is not None:
            raise self.vector_error
        self.vector_finished = True
        return self._select(self.vector, tenant_filter, k)

    async def ping(self) -> bool:
        return self.reachable

    async def close(self) -> None:
        self.closed = True

    def _select(self, hits: Sequence[tuple[str, RawHit]], tenant_filter, size: int) -> list[RawHit]:
        tenant = tenant_filter["term"][self.tenant_field]
        matching = [hit for owner, hit in hits if owner == tenant]
        matching.sort(key=lambda hit: hit.raw_score, reverse=True)
        return matching[:size]


def _hit(doc_id: str, score: float, source: dict[str, Any]) -> RawHit:
    source = {"title": f"Doc {doc_id}", "url": f"https://kb.example/{doc_id}", **source}
    return RawHit(id=doc_id, raw_score=score, document=DocumentPayload.from_source(source))


@pytest.fixture(autouse=True)
def reset_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    monkeypatch.delenv("SGW_CONFIG", raising=False)
    monkeypatch.delenv("ELASTIC_URL", raising=False)
    monkeypatch.delenv("PORT", raising=False)

    from search_gateway.api import dependencies as deps
    from search_gateway.core.config import get_settings

    get_settings.cache_clear()
    deps.get_app_settings.cache_clear()
    deps._BACKEND = None
    deps._EMBEDDER = None
    deps._SEARCH_SERVICE = None
    yield
    get_settings.cache_clear()
    deps.get_app_settings.cache_clear()
    deps._BACKEND = None
    deps._EMBEDDER = None
    deps._SEARCH_SERVICE = None


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()
