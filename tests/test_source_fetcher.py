from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from newsfuse.models.records import SourceDescriptor
from newsfuse.services import source_fetcher
from newsfuse.tools.feed_reader import FeedItem
from newsfuse.tools.http_fetch import FetchResult

SOURCE = SourceDescriptor(
    name="Example",
    category="general",
    region="Global",
    url_template=lambda q: f"https://news.example.com/search?q={q}",
)

RSS_SOURCE = SourceDescriptor(
    name="Feed",
    category="general",
    region="Global",
    url_template=lambda q: f"https://feed.example.com/rss?q={q}",
    kind="rss",
)

PAGE = """
<html><body>
  <nav><a href="/login">Sign in to your account now</a></nav>
  <div class="story-card">
    <a href="/world/election-results-2024">Election results announced across the country</a>
    <p>Officials confirmed the final tally late on Tuesday.</p>
  </div>
  <ul>
    <li><a href="https://news.example.com/politics/recount">Recount requested in two districts</a></li>
  </ul>
  <a href="/short">Tiny</a>
  <a href="https://twitter.com/example/status/1">Follow the live coverage on Twitter</a>
  <a href="/tag/elections/">All stories tagged with elections</a>
  <a href="/world/election-results-2024#comments">Election results announced across the country</a>
  <a href="mailto:desk@example.com">Email the news desk with your tips</a>
</body></html>
"""


def _extract(**kwargs):
    return source_fetcher.extract_candidates(
        PAGE, SOURCE, ["election"], base_url="https://news.example.com/search?q=election", **kwargs
    )


def test_extracts_resolvable_article_links():
    candidates = _extract()
    urls = [c.url for c in candidates]

    assert urls == [
        "https://news.example.com/world/election-results-2024",
        "https://news.example.com/politics/recount",
        "https://news.example.com/world/election-results-2024#comments",
    ]
    assert all(c.source_name == "Example" for c in candidates)


def test_description_from_article_container_with_title_fallback():
    candidates = _extract()
    assert candidates[0].description == "Officials confirmed the final tally late on Tuesday."
    assert candidates[1].description == "Recount requested in two districts"


def test_scores_are_attached():
    candidates = _extract()
    assert candidates[0].score > 0
    assert candidates[0].score > candidates[1].score


def test_scan_cap_bounds_anchor_count():
    candidates = _extract(max_anchors=2)
    assert [c.url for c in candidates] == ["https://news.example.com/world/election-results-2024"]


def test_candidates_from_feed_use_publisher_name():
    items = [
        FeedItem(
            title="Election results live",
            link="https://pub.example/a",
            source_title="The Pub",
            pub_date="Tue, 14 Oct 2025 08:00:00 GMT",
        ),
        FeedItem(title="Bad link item here", link="not-a-url"),
    ]
    candidates = source_fetcher.candidates_from_feed(items, RSS_SOURCE, ["election"])

    assert len(candidates) == 1
    assert candidates[0].source_name == "The Pub"
    assert candidates[0].description == "The Pub"
    assert candidates[0].published_at == "Tue, 14 Oct 2025 08:00:00 GMT"
    assert candidates[0].to_dict()["published_at"] == "Tue, 14 Oct 2025 08:00:00 GMT"


@pytest.mark.asyncio
async def test_fetch_source_returns_candidates():
    fetched = FetchResult(url="u", final_url="https://news.example.com/search?q=election", status_code=200, text=PAGE)
    with patch("newsfuse.services.source_fetcher.http_fetch.get", new=AsyncMock(return_value=fetched)):
        candidates = await source_fetcher.fetch_source(SOURCE, "election", ["election"])

    assert len(candidates) == 3


@pytest.mark.asyncio
async def test_fetch_source_swallows_errors():
    with patch(
        "newsfuse.services.source_fetcher.http_fetch.get",
        new=AsyncMock(side_effect=RuntimeError("connection reset")),
    ):
        assert await source_fetcher.fetch_source(SOURCE, "election", ["election"]) == []


@pytest.mark.asyncio
async def test_fetch_source_times_out_to_empty():
    async def slow_get(url, **kwargs):
        await asyncio.sleep(5)

    with patch("newsfuse.services.source_fetcher.http_fetch.get", new=slow_get):
        assert await source_fetcher.fetch_source(SOURCE, "election", ["election"], timeout_s=0.01) == []


@pytest.mark.asyncio
async def test_rss_sources_use_feed_reader():
    items = [FeedItem(title="Election results live", link="https://pub.example/a", source_title="The Pub")]
    with patch("newsfuse.services.source_fetcher.feed_reader.parse_feed", new=AsyncMock(return_value=items)) as parse:
        candidates = await source_fetcher.fetch_source(RSS_SOURCE, "election", ["election"])

    parse.assert_awaited_once()
    assert parse.await_args.args[0] == "https://feed.example.com/rss?q=election"
    assert [c.url for c in candidates] == ["https://pub.example/a"]


@pytest.mark.asyncio
async def test_fetch_all_isolates_failing_sources():
    other = SourceDescriptor(name="Other", category="general", region="Global", url_template=lambda q: "https://o.test")

    async def fake_fetch_source(source, query, terms, *, timeout_s=None):
        if source.name == "Other":
            raise RuntimeError("boom")
        return source_fetcher.extract_candidates(PAGE, source, terms, base_url="https://news.example.com/")

    with patch("newsfuse.services.source_fetcher.fetch_source", new=fake_fetch_source):
        merged = await source_fetcher.fetch_all([SOURCE, other], "election", ["election"])

    assert len(merged) == 3
