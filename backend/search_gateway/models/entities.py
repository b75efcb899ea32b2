"""Internal dataclasses passed between retrievers and the fusion step."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

_DISPLAY_FIELDS = ("title", "url")


@dataclass(frozen=True, slots=True)
class DocumentPayload:
    """Display fields of an indexed document.

    ``extra`` carries the remaining ``_source`` attributes untouched.
    """

    title: str | None = None
    url: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_source(cls, source: Mapping[str, Any] | None, exclude: tuple[str, ...] = ()) -> "DocumentPayload":
        source = source or {}
        extra = {
            key: value
            for key, value in source.items()
            if key not in _DISPLAY_FIELDS and key not in exclude
        }
        return cls(title=source.get("title"), url=source.get("url"), extra=extra)

    def same_display(self, other: "DocumentPayload") -> bool:
        return self.title == other.title and self.url == other.url


@dataclass(frozen=True, slots=True)
class RawHit:
    id: str
    raw_score: float
    document: DocumentPayload


@dataclass(frozen=True, slots=True)
class FusedResult:
    id: str
    hybrid_score: float
    lexical_score: float
    vector_score: float
    document: DocumentPayload


__all__ = ["DocumentPayload", "RawHit", "FusedResult"]
