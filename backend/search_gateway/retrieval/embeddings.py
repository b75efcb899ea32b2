"""Query embedding backends."""

from __future__ import annotations

import hashlib
import math
import re
from typing import Protocol, Sequence, runtime_checkable

from search_gateway.core.config import Settings
from search_gateway.core.logging import get_logger

logger = get_logger(__name__)

_TOKEN_RE = re.compile(r"\w+")

# Demo vectors matching the documents seeded into the demo index.
_LOOKUP_TABLE: Sequence[tuple[tuple[str, ...], list[float]]] = (
    (("password",), [0.1, 0.2, 0.9, 0.3]),
    (("payment", "429"), [0.7, 0.1, 0.2, 0.4]),
    (("upgrade", "plan"), [0.6, 0.3, 0.1, 0.2]),
)
_LOOKUP_FALLBACK = [0.25, 0.25, 0.25, 0.25]


@runtime_checkable
class Embedder(Protocol):
    @property
    def dim(self) -> int: ...

    def embed(self, text: str) -> list[float]: ...


class LookupEmbedder:
    """Deterministic stand-in that maps query keywords to fixed vectors."""

    backend = "lookup"

    @property
    def dim(self) -> int:
        return len(_LOOKUP_FALLBACK)

    def embed(self, text: str) -> list[float]:
        lowered = text.lower()
        for needles, vector in _LOOKUP_TABLE:
            if any(needle in lowered for needle in needles):
                return list(vector)
        return list(_LOOKUP_FALLBACK)


class HashedEmbedder:
    """Lightweight hashed embedding model with deterministic output."""

    backend = "hashed"

    def __init__(self, dim: int = 384) -> None:
        if dim < 1:
            raise ValueError("dim must be positive")
        self._dim = dim

    @property
    def dim(self) -> int:
        return self._dim

    def embed(self, text: str) -> list[float]:
        vector = [0.0] * self._dim
        for token in _tokenize(text):
            vector[_hash_token(token, self._dim)] += 1.0
        _normalize(vector)
        return vector


def build_embedder(settings: Settings) -> Embedder:
    if settings.embedding_backend == "hashed":
        embedder: Embedder = HashedEmbedder(dim=settings.embedding_dim)
    else:
        embedder = LookupEmbedder()
    logger.info("Using %s embedder (dim=%d)", settings.embedding_backend, embedder.dim)
    return embedder


def _tokenize(text: str) -> list[str]:
    return _TOKEN_RE.findall(text.lower())


def _hash_token(token: str, dim: int) -> int:
    digest = hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest()
    value = int.from_bytes(digest, "big")
    return value % dim


def _normalize(vector: list[float]) -> None:
    norm = math.sqrt(sum(value * value for value in vector))
    if norm == 0:
        return
    inv = 1.0 / norm
    for idx, value in enumerate(vector):
        vector[idx] = value * inv


__all__ = ["Embedder", "LookupEmbedder", "HashedEmbedder", "build_embedder"]
