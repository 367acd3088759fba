from __future__ import annotations

from pydantic import BaseModel, Field


# --- Requests ---


class SearchRequest(BaseModel):
    query: str
    limit: int | None = None
    category: str | None = None
    region: str | None = None
    ttl: int | None = None
    summarize: bool = False


# --- Responses ---


class RankedResult(BaseModel):
    source: str
    category: str
    region: str
    title: str
    description: str
    url: str
    score: int
    published_at: str | None = None


class ArticleDigest(BaseModel):
    url: str
    title: str = ""
    author: str | None = None
    site_name: str | None = None
    points: list[str] = Field(default_factory=list)
    error: str | None = None


class UnifiedSummaryModel(BaseModel):
    points: list[str] = Field(default_factory=list)
    merged_summary: str | None = None
    method: str = "none"


class SearchPayload(BaseModel):
    """Cacheable body of a search response."""

    query: str
    detected_category: str
    category_source: str
    region: str | None = None
    sources_queried: int
    total_candidates: int
    total_results: int
    results: list[RankedResult]
    best_urls: list[str] = Field(default_factory=list)
    articles: list[ArticleDigest] = Field(default_factory=list)
    unified_summary: UnifiedSummaryModel | None = None
    time_ms: int


class SearchResponse(SearchPayload):
    success: bool = True
    cached: bool = False


class ScrapeLength(BaseModel):
    text: int
    images: int
    videos: int
    links: int


class ScrapePayload(BaseModel):
    url: str
    title: str
    content: str
    images: list[str]
    videos: list[str]
    links: list[str]
    length: ScrapeLength


class ScrapeResponse(ScrapePayload):
    success: bool = True
    cached: bool = False
