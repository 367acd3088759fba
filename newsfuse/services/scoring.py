"""Deterministic relevance scoring for extracted candidates.

Additive model over lower-cased text. Weights are tuning parameters; only
the relative ordering they produce matters to the rest of the pipeline.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date

from newsfuse.config import settings
from newsfuse.models.records import CandidateResult

FRESHNESS_PHRASES = (
    "today",
    "tonight",
    "just now",
    "breaking",
    "live updates",
    "hours ago",
    "hour ago",
    "minutes ago",
    "mins ago",
)

STOPWORDS = {
    "a",
    "an",
    "and",
    "are",
    "at",
    "by",
    "for",
    "from",
    "in",
    "is",
    "of",
    "on",
    "or",
    "the",
    "to",
    "with",
}


@dataclass(frozen=True)
class ScoringWeights:
    title_hit: int = 10
    title_prefix: int = 15
    description_hit: int = 5
    url_hit: int = 3
    recency_boost: int = 8
    short_title_penalty: int = 5
    short_title_length: int = 20
    freshness_phrases: tuple[str, ...] = field(default=FRESHNESS_PHRASES)

    @classmethod
    def from_settings(cls) -> ScoringWeights:
        return cls(
            title_hit=settings.score_title_hit,
            title_prefix=settings.score_title_prefix,
            description_hit=settings.score_description_hit,
            url_hit=settings.score_url_hit,
            recency_boost=settings.score_recency_boost,
            short_title_penalty=settings.score_short_title_penalty,
            short_title_length=settings.score_short_title_length,
        )


def query_terms(query: str) -> list[str]:
    """Lower-cased, de-duplicated search terms, stopwords removed."""
    terms: list[str] = []
    for token in re.findall(r"[a-z0-9][a-z0-9'+#.-]*", (query or "").lower()):
        token = token.strip(".'-")
        if len(token) < 2 or len(token) > 30 or token in STOPWORDS:
            continue
        if token not in terms:
            terms.append(token)
    return terms


def recency_pattern(reference_year: int, phrases: tuple[str, ...] = FRESHNESS_PHRASES) -> re.Pattern[str]:
    years = f"{reference_year}|{reference_year - 1}"
    alternatives = [rf"\b(?:{years})\b"] + [rf"\b{re.escape(p)}\b" for p in phrases]
    return re.compile("|".join(alternatives))


def score_candidate(
    candidate: CandidateResult,
    terms: list[str],
    weights: ScoringWeights | None = None,
    *,
    reference_year: int | None = None,
) -> int:
    w = weights or ScoringWeights()
    year = reference_year if reference_year is not None else date.today().year
    title = (candidate.title or "").lower().strip()
    description = (candidate.description or "").lower()
    url = (candidate.url or "").lower()

    score = 0
    for term in terms:
        if term in title:
            score += w.title_hit
            if title.startswith(term):
                score += w.title_prefix
        if term in description:
            score += w.description_hit
        if term in url:
            score += w.url_hit

    if recency_pattern(year, w.freshness_phrases).search(f"{title} {description} {url}"):
        score += w.recency_boost

    if len(title) < w.short_title_length:
        score -= w.short_title_penalty

    return max(score, 0)
