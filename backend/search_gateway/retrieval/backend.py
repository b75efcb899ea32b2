"""Elasticsearch access for lexical and kNN queries."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from elasticsearch import ApiError, AsyncElasticsearch, TransportError

from search_gateway.core.config import Settings
from search_gateway.core.errors import BackendQueryError, BackendUnavailableError
from search_gateway.core.logging import get_logger
from search_gateway.models.entities import DocumentPayload, RawHit

logger = get_logger(__name__)


def create_client(settings: Settings) -> AsyncElasticsearch:
    """Build the process-wide async client from settings."""
    client_kwargs: dict[str, Any] = {
        "hosts": [settings.elastic_url],
        "verify_certs": settings.elastic_verify_certs,
        "request_timeout": settings.elastic_request_timeout,
    }
    if settings.elastic_api_key:
        client_kwargs["api_key"] = settings.elastic_api_key
    elif settings.elastic_username and settings.elastic_password:
        client_kwargs["basic_auth"] = (settings.elastic_username, settings.elastic_password)
    return AsyncElasticsearch(**client_kwargs)


class ElasticBackend:
    """Executes search requests against one shared ``AsyncElasticsearch`` client.

    The client is safe to share between concurrent requests; this wrapper
    holds no per-request state.
    """

    def __init__(self, client: AsyncElasticsearch) -> None:
        self._client = client

    async def lexical_search(
        self,
        index: str,
        term_query: Mapping[str, Any],
        tenant_filter: Mapping[str, Any],
        size: int,
    ) -> list[RawHit]:
        query = {"bool": {"must": [dict(term_query)], "filter": [dict(tenant_filter)]}}
        response = await self._execute(index=index, size=size, query=query)
        return _parse_hits(response)

    async def vector_search(
        self,
        index: str,
        vector_field: str,
        query_vector: Sequence[float],
        tenant_filter: Mapping[str, Any],
        k: int,
        num_candidates: int,
    ) -> list[RawHit]:
        knn = {
            "field": vector_field,
            "query_vector": list(query_vector),
            "k": k,
            "num_candidates": num_candidates,
            "filter": dict(tenant_filter),
        }
        response = await self._execute(index=index, size=k, knn=knn, source_excludes=[vector_field])
        return _parse_hits(response, exclude=(vector_field,))

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except TransportError as exc:
            logger.warning("Backend ping failed: %s", exc)
            return False

    async def close(self) -> None:
        await self._client.close()

    async def _execute(self, **kwargs: Any) -> Mapping[str, Any]:
        try:
            return await self._client.search(**kwargs)
        except ApiError as exc:
            raise BackendQueryError(f"search backend rejected query: {exc.message}") from exc
        except TransportError as exc:
            raise BackendUnavailableError(f"search backend unavailable: {exc.message}") from exc


def _parse_hits(response: Mapping[str, Any], exclude: tuple[str, ...] = ()) -> list[RawHit]:
    hits = response["hits"]["hits"] or []
    return [
        RawHit(
            id=str(hit["_id"]),
            raw_score=float(hit.get("_score") or 0.0),
            document=DocumentPayload.from_source(hit.get("_source"), exclude=exclude),
        )
        for hit in hits
    ]


__all__ = ["ElasticBackend", "create_client"]
