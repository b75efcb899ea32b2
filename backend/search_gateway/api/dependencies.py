"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from search_gateway.core.config import Settings, get_settings
from search_gateway.retrieval import ElasticBackend, SearchService
from search_gateway.retrieval.backend import create_client
from search_gateway.retrieval.embeddings import Embedder, build_embedder

_BACKEND: ElasticBackend | None = None
_EMBEDDER: Embedder | None = None
_SEARCH_SERVICE: SearchService | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_search_backend() -> ElasticBackend:
    global _BACKEND
    if _BACKEND is None:
        _BACKEND = ElasticBackend(create_client(get_app_settings()))
    return _BACKEND


def get_embedder() -> Embedder:
    global _EMBEDDER
    if _EMBEDDER is None:
        _EMBEDDER = build_embedder(get_app_settings())
    return _EMBEDDER


def get_search_service() -> SearchService:
    global _SEARCH_SERVICE
    if _SEARCH_SERVICE is None:
        _SEARCH_SERVICE = SearchService(
            backend=get_search_backend(),
            settings=get_app_settings(),
            embedder=get_embedder(),
        )
    return _SEARCH_SERVICE


async def close_search_backend() -> None:
    global _BACKEND, _SEARCH_SERVICE
    if _BACKEND is not None:
        await _BACKEND.close()
    _BACKEND = None
    _SEARCH_SERVICE = None


__all__ = [
    "get_app_settings",
    "get_search_backend",
    "get_embedder",
    "get_search_service",
    "close_search_backend",
]
