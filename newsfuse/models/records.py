from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

GLOBAL_REGION = "Global"
GENERAL_CATEGORY = "general"


@dataclass(frozen=True, slots=True)
class SourceDescriptor:
    """One content provider: a URL template plus its category/region labels."""

    name: str
    category: str
    region: str
    url_template: Callable[[str], str]
    kind: str = "html"  # html | rss

    def build_url(self, query: str) -> str:
        return self.url_template(query)


@dataclass(slots=True)
class CandidateResult:
    source_name: str
    category: str
    region: str
    title: str
    description: str
    url: str
    score: int = 0
    published_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source_name,
            "category": self.category,
            "region": self.region,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "score": self.score,
            "published_at": self.published_at,
        }


@dataclass(slots=True)
class Article:
    url: str
    title: str = ""
    author: str | None = None
    site_name: str | None = None
    full_text: str = ""
    extracted_points: tuple[str, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.full_text.strip())


@dataclass(frozen=True, slots=True)
class UnifiedSummary:
    points: tuple[str, ...] = field(default_factory=tuple)
    merged_summary: str | None = None
    method: str = "none"  # llm | fallback | none
