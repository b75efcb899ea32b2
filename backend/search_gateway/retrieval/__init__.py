"""Retrieval orchestration components."""

from .adapters import LexicalRetriever, VectorRetriever
from .backend import ElasticBackend
from .hybrid import fuse_results, normalize_scores, rank_hits
from .search import SearchService

__all__ = [
    "ElasticBackend",
    "LexicalRetriever",
    "VectorRetriever",
    "SearchService",
    "fuse_results",
    "normalize_scores",
    "rank_hits",
]
