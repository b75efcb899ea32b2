"""Score normalization and weighted fusion for hybrid search."""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from search_gateway.core.logging import get_logger, log_context
from search_gateway.models.entities import FusedResult, RawHit

logger = get_logger(__name__)

DEFAULT_TOP_K = 5


def normalize_scores(pairs: Iterable[Tuple[str, float]], anchor_bounds: bool = False) -> dict[str, float]:
    """Min-max scale one result set's raw scores onto [0, 1].

    The highest raw score maps to 1 and the lowest to 0. A set whose scores
    are all equal carries no ranking signal, so every id maps to 0.

    With ``anchor_bounds`` the implicit relevance bounds 0 and 1 take part in
    the range: the lower end is ``min(scores + [0])`` and the upper end
    ``max(scores + [1])``. Sub-unit similarity scores then keep their absolute
    position instead of being stretched across the full interval. In that
    mode an all-equal set no longer maps to 0: ``[0.5, 0.5]`` yields 0.5 for
    each id, and a single score of 5 yields 1.
    """
    items = [(identifier, float(score)) for identifier, score in pairs]
    if not items:
        return {}
    scores = [score for _, score in items]
    low = min(scores)
    high = max(scores)
    if anchor_bounds:
        low = min(low, 0.0)
        high = max(high, 1.0)
    if high == low:
        return {identifier: 0.0 for identifier, _ in items}
    span = high - low
    return {identifier: (score - low) / span for identifier, score in items}


def normalize_hits(hits: Sequence[RawHit], anchor_bounds: bool = False) -> dict[str, float]:
    return normalize_scores(((hit.id, hit.raw_score) for hit in hits), anchor_bounds=anchor_bounds)


def fuse_results(
    lexical_hits: Sequence[RawHit],
    vector_hits: Sequence[RawHit],
    lexical_scores: dict[str, float],
    vector_scores: dict[str, float],
    alpha: float = 0.5,
    top_k: int = DEFAULT_TOP_K,
) -> list[FusedResult]:
    """Merge two normalized result sets by ``alpha * lexical + (1 - alpha) * vector``.

    An id missing from one set scores 0 for that mode. ``alpha`` is not
    clamped; values outside [0, 1] extrapolate linearly. Ties on the hybrid
    score are broken by id ascending so repeated calls return the same order.
    """
    documents = {hit.id: hit.document for hit in vector_hits}
    for hit in lexical_hits:
        other = documents.get(hit.id)
        if other is not None and not other.same_display(hit.document):
            logger.warning(
                "Payload mismatch across modes; keeping lexical payload",
                extra=log_context(doc_id=hit.id),
            )
        documents[hit.id] = hit.document

    fused: list[FusedResult] = []
    for identifier, document in documents.items():
        lexical = lexical_scores.get(identifier, 0.0)
        vector = vector_scores.get(identifier, 0.0)
        fused.append(
            FusedResult(
                id=identifier,
                hybrid_score=alpha * lexical + (1 - alpha) * vector,
                lexical_score=lexical,
                vector_score=vector,
                document=document,
            )
        )
    fused.sort(key=lambda item: (-item.hybrid_score, item.id))
    return fused[:top_k]


def rank_hits(hits: Sequence[RawHit], top_k: int | None = None) -> list[RawHit]:
    """Order single-mode hits by raw score descending, id ascending on ties."""
    ordered = sorted(hits, key=lambda hit: (-hit.raw_score, hit.id))
    return ordered if top_k is None else ordered[:top_k]


__all__ = ["DEFAULT_TOP_K", "normalize_scores", "normalize_hits", "fuse_results", "rank_hits"]
