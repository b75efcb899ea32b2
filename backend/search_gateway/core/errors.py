"""Retrieval error taxonomy.

Every failure below the HTTP layer is raised as a ``RetrievalError``. The
``kind`` attribute is only used for logging and metrics; callers see one
generic failure response regardless of kind.
"""

from __future__ import annotations


class RetrievalError(Exception):
    """Base class for failures while serving a search."""

    kind = "retrieval"

    def __init__(self, message: str, *, mode: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.mode = mode


class BackendUnavailableError(RetrievalError):
    """The search backend could not be reached."""

    kind = "backend_unavailable"


class BackendQueryError(RetrievalError):
    """The search backend rejected or failed to execute a query."""

    kind = "backend_query"


class EmbeddingError(RetrievalError):
    """The embedding collaborator failed to produce a vector."""

    kind = "embedding"


__all__ = [
    "RetrievalError",
    "BackendUnavailableError",
    "BackendQueryError",
    "EmbeddingError",
]
