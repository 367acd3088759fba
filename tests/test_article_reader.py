from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from newsfuse.tools import article_reader
from newsfuse.tools.http_fetch import FetchResult

PARAGRAPH = (
    "Scientists reported on Thursday that the reef recovered faster than expected after the heatwave. "
    "Surveys across forty sites found new coral growth in shallow water. "
)

ARTICLE_HTML = f"""
<html><head><title>Reef recovery surprises scientists</title></head>
<body>
  <nav>Main menu Sign in Subscribe</nav>
  <article>
    <h1>Reef recovery surprises scientists</h1>
    <p>{PARAGRAPH * 3}</p>
    <p>{PARAGRAPH * 2}</p>
  </article>
</body></html>
"""


def test_extract_article_returns_text_and_title():
    extracted = article_reader.extract_article(ARTICLE_HTML, "https://science.example/reef")

    assert "reef recovered faster" in extracted.text
    assert extracted.title
    assert extracted.method in ("trafilatura", "selectors")


def test_extract_article_truncates_to_max_chars():
    extracted = article_reader.extract_article(ARTICLE_HTML, "https://science.example/reef", max_chars=100)
    assert len(extracted.text) <= 103


def test_low_quality_detection():
    assert article_reader._looks_low_quality("too short")
    assert not article_reader._looks_low_quality("word " * 200)


@pytest.mark.asyncio
async def test_read_article_success():
    fetched = FetchResult(url="u", final_url="https://science.example/reef", status_code=200, text=ARTICLE_HTML)
    with patch("newsfuse.tools.article_reader.http_fetch.get", new=AsyncMock(return_value=fetched)):
        article = await article_reader.read_article("https://science.example/reef")

    assert article.ok
    assert article.error is None
    assert article.site_name


@pytest.mark.asyncio
async def test_read_article_records_fetch_error():
    with patch(
        "newsfuse.tools.article_reader.http_fetch.get",
        new=AsyncMock(side_effect=ConnectionError("refused")),
    ):
        article = await article_reader.read_article("https://science.example/reef")

    assert not article.ok
    assert article.error == "ConnectionError: refused"


@pytest.mark.asyncio
async def test_read_article_records_timeout():
    async def slow_get(url, **kwargs):
        await asyncio.sleep(5)

    with patch("newsfuse.tools.article_reader.http_fetch.get", new=slow_get):
        article = await article_reader.read_article("https://science.example/reef", timeout_s=0.01)

    assert article.error == "timeout after 0.01s"


@pytest.mark.asyncio
async def test_read_article_without_text_is_no_extract():
    fetched = FetchResult(url="u", final_url="https://x.example/", status_code=200, text="<html><body></body></html>")
    with patch("newsfuse.tools.article_reader.http_fetch.get", new=AsyncMock(return_value=fetched)):
        article = await article_reader.read_article("https://x.example/")

    assert article.error == "no_extract"
