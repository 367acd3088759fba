from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup

from newsfuse.config import settings
from newsfuse.models.records import Article
from newsfuse.tools import http_fetch, page_scraper, web_utils

NAV_MARKERS = (
    "main menu",
    "navigation",
    "sign in",
    "subscribe",
    "cookie",
    "skip to content",
)


@dataclass
class ExtractedContent:
    title: str
    author: str | None
    site_name: str | None
    text: str
    method: str


def _normalize_text(text: str) -> str:
    text = text.replace("\xa0", " ")
    text = re.sub(r"\r\n?", "\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _looks_low_quality(text: str) -> bool:
    normalized = text.lower()
    marker_hits = sum(normalized.count(marker) for marker in NAV_MARKERS)
    if len(text) < 300:
        return True
    return marker_hits >= 4 and len(text) < 2500


def _extract_with_trafilatura(raw_html: str) -> str:
    import trafilatura

    extracted = trafilatura.extract(raw_html, output_format="txt", include_comments=False, include_tables=False)
    if not isinstance(extracted, str):
        return ""
    return _normalize_text(extracted)


def _metadata(raw_html: str, url: str) -> tuple[str, str | None, str | None]:
    import trafilatura

    try:
        meta = trafilatura.extract_metadata(raw_html, default_url=url)
    except Exception:
        meta = None
    if meta is None:
        return "", None, None
    return (
        web_utils.collapse_whitespace(getattr(meta, "title", None) or ""),
        getattr(meta, "author", None) or None,
        getattr(meta, "sitename", None) or None,
    )


def extract_article(raw_html: str, url: str, *, max_chars: int | None = None) -> ExtractedContent:
    """Main article text from raw HTML, trafilatura first then selector heuristics."""
    target_chars = max_chars if max_chars is not None else settings.max_article_chars
    title, author, site_name = _metadata(raw_html, url)

    text = _extract_with_trafilatura(raw_html)
    method = "trafilatura"
    if not text or _looks_low_quality(text):
        soup = BeautifulSoup(raw_html, "html.parser")
        if not title and soup.title:
            title = web_utils.collapse_whitespace(soup.title.get_text())
        page_scraper.strip_junk(soup)
        fallback = page_scraper.clean_text(page_scraper.main_text(soup))
        if len(fallback) > len(text):
            text = fallback
            method = "selectors"

    return ExtractedContent(
        title=title,
        author=author,
        site_name=site_name,
        text=web_utils.truncate(text, target_chars),
        method=method,
    )


async def read_article(url: str, *, timeout_s: float | None = None) -> Article:
    """Fetch ``url`` and extract its article; failures become ``Article.error``."""
    timeout = timeout_s if timeout_s is not None else settings.deep_fetch_timeout_s
    try:
        fetched = await asyncio.wait_for(http_fetch.get(url, timeout_s=timeout), timeout=timeout)
        extracted = await asyncio.to_thread(extract_article, fetched.text, fetched.final_url or url)
    except asyncio.TimeoutError:
        return Article(url=url, error=f"timeout after {timeout}s")
    except Exception as exc:
        return Article(url=url, error=f"{type(exc).__name__}: {exc}")

    if not extracted.text.strip():
        return Article(url=url, title=extracted.title, error="no_extract")
    return Article(
        url=url,
        title=extracted.title,
        author=extracted.author,
        site_name=extracted.site_name or web_utils.extract_domain(url),
        full_text=extracted.text,
    )
