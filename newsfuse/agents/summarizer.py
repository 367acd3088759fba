"""Chunked point extraction and cross-article merge.

Long article text is split into bounded chunks, each chunk is reduced to a
few factual points by the completion service (or its first sentences when
the service is unavailable), and all points are merged into a short list of
unified talking points.
"""

from __future__ import annotations

import re
from typing import Any

from newsfuse import llm_client
from newsfuse.config import settings
from newsfuse.models.completion import Failed, PlainText, StructuredJson
from newsfuse.models.records import Article, UnifiedSummary
from newsfuse.services import logger as log_service
from newsfuse.services.prompt_store import render_prompt
from newsfuse.services.throttle import ThrottledQueue

SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
BULLET_LINE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+(.+)$")
LEADING_NUMBER = re.compile(r"^\d+[.)]\s+")


def split_into_chunks(text: str, max_chars: int) -> list[str]:
    """Contiguous chunks of at most ``max_chars``.

    Each break happens at the last whitespace character at or before the
    limit, and that single character is dropped. A run with no whitespace
    is cut hard at the limit.
    """
    if max_chars < 1:
        raise ValueError("max_chars must be positive")
    chunks: list[str] = []
    start = 0
    length = len(text)
    while start < length:
        if length - start <= max_chars:
            chunks.append(text[start:])
            break
        cut = -1
        for idx in range(start + max_chars, start, -1):
            if text[idx].isspace():
                cut = idx
                break
        if cut == -1:
            chunks.append(text[start : start + max_chars])
            start += max_chars
        else:
            chunks.append(text[start:cut])
            start = cut + 1
    return chunks


def normalize_point(point: str) -> str:
    point = " ".join(str(point).split())
    return point.rstrip(".").strip()


def fallback_points(chunk: str, limit: int = 2) -> list[str]:
    """First sentences of the chunk, used when no completion is available."""
    sentences = [s.strip() for s in SENTENCE_SPLIT.split(chunk.strip()) if s.strip()]
    return sentences[:limit]


def _points_from_value(value: Any) -> list[str]:
    if isinstance(value, dict):
        value = value.get("points") or value.get("bullets") or value.get("summary")
        if isinstance(value, str):
            value = [value]
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str) and v.strip()]


def _points_from_text(text: str) -> list[str]:
    points = []
    for line in text.splitlines():
        match = BULLET_LINE.match(line)
        if match:
            points.append(match.group(1))
    return points


class DocumentSummarizer:
    def __init__(
        self,
        *,
        queue: ThrottledQueue | None = None,
        chunk_max_chars: int | None = None,
        points_per_chunk: int | None = None,
        max_points: int | None = None,
        summarize_timeout_s: float | None = None,
        merge_timeout_s: float | None = None,
    ):
        self.queue = queue or ThrottledQueue(settings.summarize_delay_s)
        self.chunk_max_chars = chunk_max_chars or settings.chunk_max_chars
        self.points_per_chunk = points_per_chunk or settings.points_per_chunk
        self.max_points = max_points or settings.max_points_per_article
        self.summarize_timeout_s = summarize_timeout_s or settings.summarize_timeout_s
        self.merge_timeout_s = merge_timeout_s or settings.merge_timeout_s

    async def summarize_chunk(self, chunk: str, query: str) -> list[str]:
        prompt = render_prompt("summarize.chunk", query=query, count=self.points_per_chunk, text=chunk)
        parsed = await llm_client.complete_parsed(
            prompt, timeout_s=self.summarize_timeout_s, caller="summarize_chunk"
        )
        points: list[str] = []
        if isinstance(parsed, StructuredJson):
            points = _points_from_value(parsed.value)
        elif isinstance(parsed, PlainText):
            points = _points_from_text(parsed.text)
        if not points:
            return fallback_points(chunk)
        return points[: self.points_per_chunk]

    async def summarize(self, article: Article, query: str) -> list[str]:
        """Ordered, de-duplicated points for one article, capped at ``max_points``."""
        if not article.full_text.strip():
            return []
        chunks = split_into_chunks(article.full_text, self.chunk_max_chars)
        collected: list[str] = []
        seen: set[str] = set()

        async def process(chunk: str) -> None:
            for raw in await self.summarize_chunk(chunk, query):
                point = normalize_point(raw)
                if not point or point in seen:
                    continue
                seen.add(point)
                collected.append(point)
                if len(collected) >= self.max_points:
                    break

        await self.queue.map(chunks, process, stop=lambda: len(collected) >= self.max_points)

        log_service.log_event(
            "article_summarized",
            "Extracted article points",
            url=article.url,
            chunks=len(chunks),
            points=len(collected),
        )
        return collected

    async def merge(self, points: list[str], query: str, max_points: int) -> UnifiedSummary:
        """Merge points from every article into at most ``max_points``."""
        distinct = list(dict.fromkeys(p for p in points if p))
        if not distinct or max_points <= 0:
            return UnifiedSummary()

        listing = "\n".join(f"{i}. {p}" for i, p in enumerate(distinct, 1))
        prompt = render_prompt("summarize.merge", query=query, count=max_points, points=listing)
        parsed = await llm_client.complete_parsed(prompt, timeout_s=self.merge_timeout_s, caller="merge_points")

        merged: list[str] = []
        merged_summary: str | None = None
        if isinstance(parsed, StructuredJson):
            merged = [normalize_point(LEADING_NUMBER.sub("", p)) for p in _points_from_value(parsed.value)]
            if isinstance(parsed.value, dict):
                summary = parsed.value.get("merged_summary") or parsed.value.get("mergedSummary")
                if isinstance(summary, str) and summary.strip():
                    merged_summary = " ".join(summary.split())
        elif isinstance(parsed, PlainText):
            merged = [normalize_point(p) for p in _points_from_text(parsed.text)]

        merged = list(dict.fromkeys(p for p in merged if p))[:max_points]
        if merged:
            return UnifiedSummary(points=tuple(merged), merged_summary=merged_summary, method="llm")

        log_service.log_event(
            "merge_fallback",
            "Point merge fell back to the first distinct points",
            level="WARNING",
            query=query[:100],
            reason=parsed.reason if isinstance(parsed, Failed) else "malformed_response",
        )
        numbered = tuple(f"{i}. {p}" for i, p in enumerate(distinct[:max_points], 1))
        return UnifiedSummary(points=numbered, method="fallback")
