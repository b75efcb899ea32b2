"""Tests for search orchestration."""

from __future__ import annotations

import asyncio

import pytest

from search_gateway.core.config import Settings
from search_gateway.core.errors import BackendUnavailableError, EmbeddingError
from search_gateway.retrieval.adapters import VectorRetriever, build_tenant_filter, build_term_query
from search_gateway.retrieval.embeddings import LookupEmbedder
from search_gateway.retrieval.search import SearchService


class ExplodingEmbedder:
    dim = 4

    def embed(self, text: str) -> list[float]:
        raise RuntimeError("model offline")


@pytest.fixture
def service(fake_backend) -> SearchService:
    return SearchService(backend=fake_backend, settings=Settings(), embedder=LookupEmbedder())


def test_keyword_search_builds_tenant_scoped_query(service: SearchService, fake_backend) -> None:
    fake_backend.add_lexical("kb-1", 7.5, title="Reset your password")
    fake_backend.add_lexical("kb-9", 9.0, tenant="acme")

    payload = asyncio.run(service.keyword_search("password reset"))

    assert payload["mode"] == "keyword"
    assert payload["query"] == "password reset"
    assert payload["results"] == [
        {"id": "kb-1", "score": 7.5, "title": "Reset your password", "url": "https://kb.example/kb-1"}
    ]
    kind, call = fake_backend.calls[0]
    assert kind == "lexical"
    assert call["index"] == "demo-rag-kb"
    assert call["size"] == 5
    assert call["term_query"] == {"multi_match": {"query": "password reset", "fields": ["title^2", "body"]}}
    assert call["tenant_filter"] == {"term": {"tenant_id": "demo"}}


def test_semantic_search_embeds_query(service: SearchService, fake_backend) -> None:
    fake_backend.add_vector("kb-2", 0.91, tenant="acme")

    payload = asyncio.run(service.semantic_search("payment failed with 429", tenant_id="acme"))

    assert payload["mode"] == "semantic"
    assert [row["id"] for row in payload["results"]] == ["kb-2"]
    _, call = fake_backend.calls[0]
    assert call["query_vector"] == [0.7, 0.1, 0.2, 0.4]
    assert call["vector_field"] == "embedding"
    assert call["k"] == 5
    assert call["num_candidates"] == 10
    assert call["tenant_filter"] == {"term": {"tenant_id": "acme"}}


def test_other_tenant_documents_never_returned(service: SearchService, fake_backend) -> None:
    fake_backend.add_lexical("mine", 1.0, tenant="demo")
    fake_backend.add_lexical("theirs", 100.0, tenant="other")
    fake_backend.add_vector("theirs", 0.99, tenant="other")

    payload = asyncio.run(service.hybrid_search("anything"))

    assert [row["id"] for row in payload["results"]] == ["mine"]


def test_hybrid_search_fuses_both_modes(service: SearchService, fake_backend) -> None:
    fake_backend.add_lexical("A", 10.0)
    fake_backend.add_lexical("B", 5.0)
    fake_backend.add_vector("A", 0.2)
    fake_backend.add_vector("C", 0.8)

    payload = asyncio.run(service.hybrid_search("upgrade plan", alpha=0.5))

    assert payload["mode"] == "hybrid"
    assert payload["alpha"] == 0.5
    assert [row["id"] for row in payload["results"]] == ["A", "C", "B"]
    first = payload["results"][0]
    assert first["hybrid_score"] == pytest.approx(0.5)
    assert first["bm25_score"] == pytest.approx(1.0)
    assert first["vector_score"] == pytest.approx(0.0)
    sizes = {kind: call for kind, call in fake_backend.calls}
    assert sizes["lexical"]["size"] == 10
    assert sizes["vector"]["k"] == 10
    assert sizes["vector"]["num_candidates"] == 20


def test_hybrid_search_uses_default_alpha(fake_backend) -> None:
    service = SearchService(backend=fake_backend, settings=Settings(default_alpha=0.3), embedder=LookupEmbedder())

    payload = asyncio.run(service.hybrid_search("plan"))

    assert payload["alpha"] == 0.3
    assert payload["results"] == []


def test_hybrid_search_fails_when_vector_mode_fails(service: SearchService, fake_backend) -> None:
    fake_backend.add_lexical("A", 3.0)
    fake_backend.vector_error = BackendUnavailableError("search backend unavailable: connection refused")

    with pytest.raises(BackendUnavailableError):
        asyncio.run(service.hybrid_search("password"))


def test_hybrid_search_fails_when_lexical_mode_fails(service: SearchService, fake_backend) -> None:
    fake_backend.add_vector("A", 0.5)
    fake_backend.lexical_error = BackendUnavailableError("down")

    with pytest.raises(BackendUnavailableError):
        asyncio.run(service.hybrid_search("password"))


def test_embedding_failure_surfaces_as_retrieval_error(fake_backend) -> None:
    service = SearchService(backend=fake_backend, settings=Settings(), embedder=ExplodingEmbedder())

    with pytest.raises(EmbeddingError, match="model offline"):
        asyncio.run(service.semantic_search("anything"))
    assert fake_backend.calls == []


def test_vector_retriever_rejects_small_candidate_pool(fake_backend) -> None:
    retriever = VectorRetriever(fake_backend, LookupEmbedder(), "idx", "embedding", "tenant_id")

    with pytest.raises(ValueError, match="num_candidates"):
        asyncio.run(retriever.retrieve("q", "demo", size=10, num_candidates=5))


def test_repeated_hybrid_queries_are_identical(service: SearchService, fake_backend) -> None:
    for doc_id in ("d", "b", "a", "c"):
        fake_backend.add_lexical(doc_id, 2.0)
        fake_backend.add_vector(doc_id, 0.5)

    first = asyncio.run(service.hybrid_search("same", alpha=1.0))
    second = asyncio.run(service.hybrid_search("same", alpha=1.0))

    assert first == second
    assert [row["id"] for row in first["results"]] == ["a", "b", "c", "d"]


def test_query_builders() -> None:
    assert build_term_query("q", ["title"]) == {"multi_match": {"query": "q", "fields": ["title"]}}
    assert build_tenant_filter("org", "t1") == {"term": {"org": "t1"}}


def test_empty_tenant_is_not_replaced_by_default(service: SearchService, fake_backend) -> None:
    fake_backend.add_lexical("demo-secret", 5.0, tenant="demo")
    fake_backend.add_vector("demo-secret", 0.9, tenant="demo")

    keyword = asyncio.run(service.keyword_search("secret", tenant_id=""))
    hybrid = asyncio.run(service.hybrid_search("secret", tenant_id=""))

    assert keyword["results"] == []
    assert hybrid["results"] == []
    assert {call["tenant_filter"]["term"]["tenant_id"] for _, call in fake_backend.calls} == {""}


def test_missing_tenant_uses_default(service: SearchService, fake_backend) -> None:
    asyncio.run(service.semantic_search("secret", tenant_id=None))

    assert fake_backend.calls[0][1]["tenant_filter"] == {"term": {"tenant_id": "demo"}}


def test_hybrid_failure_cancels_other_mode(service: SearchService, fake_backend) -> None:
    fake_backend.lexical_error = BackendUnavailableError("down")
    fake_backend.vector_delay = 0.05

    async def run() -> None:
        with pytest.raises(BackendUnavailableError):
            await service.hybrid_search("password")
        await asyncio.sleep(0.1)

    asyncio.run(run())

    assert fake_backend.vector_finished is False
