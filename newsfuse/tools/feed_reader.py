from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import feedparser
from bs4 import BeautifulSoup

from newsfuse.tools import http_fetch
from newsfuse.tools.web_utils import collapse_whitespace


@dataclass
class FeedItem:
    title: str
    link: str
    pub_date: str | None = None
    source_title: str | None = None
    snippet: str = ""


def _entry_value(entry: Any, name: str) -> Any:
    value = getattr(entry, name, None)
    if value is None and isinstance(entry, dict):
        value = entry.get(name)
    return value


def _plain_text(markup: str) -> str:
    if "<" not in markup:
        return collapse_whitespace(markup)
    return collapse_whitespace(BeautifulSoup(markup, "html.parser").get_text(" "))


def parse_feed_text(body: str, *, limit: int = 100) -> list[FeedItem]:
    """Decode an RSS/Atom document into feed items."""
    parsed = feedparser.parse(body)
    items: list[FeedItem] = []
    for entry in (parsed.entries or [])[: max(0, limit)]:
        title = _entry_value(entry, "title")
        link = _entry_value(entry, "link")
        if not title or not link:
            continue
        source = _entry_value(entry, "source")
        source_title = None
        if isinstance(source, dict):
            source_title = source.get("title") or None
        published = _entry_value(entry, "published") or _entry_value(entry, "updated")
        summary = _entry_value(entry, "summary")
        items.append(
            FeedItem(
                title=collapse_whitespace(str(title)),
                link=str(link).strip(),
                pub_date=str(published) if published else None,
                source_title=source_title,
                snippet=_plain_text(summary) if isinstance(summary, str) else "",
            )
        )
    return items


async def parse_feed(url: str, *, timeout_s: float, limit: int = 100) -> list[FeedItem]:
    """Fetch and decode a feed; raises on transport errors."""
    fetched = await http_fetch.get(url, timeout_s=timeout_s)
    return parse_feed_text(fetched.text, limit=limit)
