from __future__ import annotations

import asyncio
import re
import time
from typing import Sequence

from bs4 import BeautifulSoup, Tag

from newsfuse.config import settings
from newsfuse.models.records import CandidateResult, SourceDescriptor
from newsfuse.services import logger as log_service
from newsfuse.services.scoring import ScoringWeights, score_candidate
from newsfuse.tools import feed_reader, http_fetch, web_utils

ARTICLE_CLASS_PATTERN = re.compile(r"(article|story|post|card|result|teaser|news-item|headline)", re.IGNORECASE)
ARTICLE_TAGS = {"article", "li"}


def _is_article_like(tag: Tag) -> bool:
    if tag.name in ARTICLE_TAGS:
        return True
    if tag.name not in ("div", "section"):
        return False
    classes = " ".join(tag.get("class") or [])
    return bool(classes and ARTICLE_CLASS_PATTERN.search(classes))


def _describe(anchor: Tag, title: str, max_chars: int) -> str:
    container = anchor.find_parent(_is_article_like)
    if container is not None:
        paragraph = container.find("p")
        if paragraph is not None:
            text = web_utils.collapse_whitespace(paragraph.get_text(" "))
            if text:
                return web_utils.truncate(text, max_chars)
    return title


def extract_candidates(
    html: str,
    source: SourceDescriptor,
    terms: list[str],
    *,
    base_url: str,
    max_anchors: int | None = None,
    min_text_length: int | None = None,
    weights: ScoringWeights | None = None,
) -> list[CandidateResult]:
    """Scan anchors in ``html`` and return scored candidates for ``source``."""
    scan_cap = max_anchors if max_anchors is not None else settings.max_anchors_per_source
    min_len = min_text_length if min_text_length is not None else settings.min_link_text_length
    weights = weights or ScoringWeights.from_settings()

    soup = BeautifulSoup(html, "html.parser")
    candidates: list[CandidateResult] = []
    seen: set[str] = set()
    for anchor in soup.find_all("a", href=True, limit=max(scan_cap, 0)):
        title = web_utils.collapse_whitespace(anchor.get_text(" "))
        if len(title) < min_len:
            continue
        url = web_utils.resolve_url(anchor.get("href", ""), base_url)
        if not url or web_utils.is_denied_url(url):
            continue
        if url.lower() in seen:
            continue
        seen.add(url.lower())
        candidate = CandidateResult(
            source_name=source.name,
            category=source.category,
            region=source.region,
            title=title,
            description=_describe(anchor, title, settings.max_description_chars),
            url=url,
        )
        candidate.score = score_candidate(candidate, terms, weights)
        candidates.append(candidate)
    return candidates


def candidates_from_feed(
    items: Sequence[feed_reader.FeedItem],
    source: SourceDescriptor,
    terms: list[str],
    *,
    max_items: int | None = None,
    weights: ScoringWeights | None = None,
) -> list[CandidateResult]:
    cap = max_items if max_items is not None else settings.max_anchors_per_source
    weights = weights or ScoringWeights.from_settings()
    candidates: list[CandidateResult] = []
    for item in list(items)[: max(cap, 0)]:
        if not web_utils.is_valid_url(item.link):
            continue
        description = item.snippet or item.source_title or item.title
        candidate = CandidateResult(
            source_name=item.source_title or source.name,
            category=source.category,
            region=source.region,
            title=item.title,
            description=web_utils.truncate(description, settings.max_description_chars),
            url=item.link,
            published_at=item.pub_date,
        )
        candidate.score = score_candidate(candidate, terms, weights)
        candidates.append(candidate)
    return candidates


async def _fetch(source: SourceDescriptor, url: str, terms: list[str], timeout_s: float) -> list[CandidateResult]:
    if source.kind == "rss":
        items = await feed_reader.parse_feed(url, timeout_s=timeout_s)
        return candidates_from_feed(items, source, terms)
    fetched = await http_fetch.get(url, timeout_s=timeout_s)
    return extract_candidates(fetched.text, source, terms, base_url=fetched.final_url or url)


async def fetch_source(
    source: SourceDescriptor,
    query: str,
    terms: list[str],
    *,
    timeout_s: float | None = None,
) -> list[CandidateResult]:
    """Fetch one source and extract scored candidates. Never raises."""
    timeout = timeout_s if timeout_s is not None else settings.source_fetch_timeout_s
    started = time.monotonic()
    try:
        url = source.build_url(query)
        candidates = await asyncio.wait_for(_fetch(source, url, terms, timeout), timeout=timeout)
    except asyncio.TimeoutError:
        log_service.log_source_fetch(
            source.name,
            "timeout",
            duration_ms=int((time.monotonic() - started) * 1000),
            error=f"timed out after {timeout}s",
        )
        return []
    except Exception as exc:
        log_service.log_source_fetch(
            source.name,
            "error",
            duration_ms=int((time.monotonic() - started) * 1000),
            error=f"{type(exc).__name__}: {exc}",
        )
        return []

    log_service.log_source_fetch(
        source.name,
        "ok",
        candidates=len(candidates),
        duration_ms=int((time.monotonic() - started) * 1000),
    )
    return candidates


async def fetch_all(
    sources: Sequence[SourceDescriptor],
    query: str,
    terms: list[str],
    *,
    timeout_s: float | None = None,
) -> list[CandidateResult]:
    """Fan out over every source concurrently; failures contribute nothing."""
    batches = await asyncio.gather(
        *(fetch_source(source, query, terms, timeout_s=timeout_s) for source in sources),
        return_exceptions=True,
    )
    merged: list[CandidateResult] = []
    for batch in batches:
        if isinstance(batch, BaseException):
            continue
        merged.extend(batch)
    return merged
