"""Tests for API routes."""
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from newsfuse.models.records import CandidateResult
from newsfuse.models.schemas import ScrapeResponse, SearchResponse
from newsfuse.tools.page_scraper import PageScrape


@pytest.fixture
def client():
    from newsfuse.main import app

    with TestClient(app) as test_client:
        yield test_client


def _response(**overrides) -> SearchResponse:
    data = {
        "query": "weather",
        "detected_category": "general",
        "category_source": "classifier",
        "sources_queried": 3,
        "total_candidates": 0,
        "total_results": 0,
        "results": [],
        "time_ms": 5,
    }
    data.update(overrides)
    return SearchResponse(**data)


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "newsfuse"


@pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "   "}])
def test_search_requires_query(client, params):
    response = client.get("/api/search", params=params)
    assert response.status_code == 400


def test_search_rejects_non_integer_limit(client):
    response = client.get("/api/search", params={"q": "weather", "limit": "lots"})
    assert response.status_code == 422


def test_search_maps_parameters_to_request(client):
    run = AsyncMock(return_value=_response())
    client.app.state.orchestrator.run = run

    response = client.get(
        "/api/search",
        params={"q": " weather ", "limit": "5", "category": "science", "region": "UK", "ttl": "60", "clean": "true"},
    )

    assert response.status_code == 200
    request = run.await_args.args[0]
    assert request.query == "weather"
    assert request.limit == 5
    assert request.category == "science"
    assert request.region == "UK"
    assert request.ttl == 60
    assert request.summarize is True


def test_search_unexpected_error_is_500(client):
    client.app.state.orchestrator.run = AsyncMock(side_effect=RuntimeError("boom"))

    response = client.get("/api/search", params={"q": "weather"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "boom"}


def test_search_end_to_end_caches_second_call(client):
    candidate = CandidateResult(
        source_name="wire",
        category="general",
        region="Global",
        title="Heavy rain expected across the region",
        description="Forecasters warn of flooding.",
        url="https://a.com/rain",
        score=25,
    )
    with (
        patch("newsfuse.agents.orchestrator.source_fetcher.fetch_all", new=AsyncMock(return_value=[candidate])) as fetch_all,
        patch("newsfuse.agents.orchestrator.classifier.classify", new=AsyncMock(return_value="general")),
    ):
        first = client.get("/api/search", params={"q": "weather"})
        second = client.get("/api/search", params={"q": "weather"})

    assert first.status_code == 200
    assert second.status_code == 200
    first_body, second_body = first.json(), second.json()
    assert first_body["success"] is True
    assert first_body["cached"] is False
    assert second_body["cached"] is True
    first_body.pop("cached")
    second_body.pop("cached")
    assert first_body == second_body
    assert first_body["results"][0]["url"] == "https://a.com/rain"
    assert fetch_all.await_count == 1


def test_scrape_requires_url(client):
    assert client.get("/api/scrape").status_code == 400


def test_scrape_returns_and_caches_page(client):
    page = PageScrape(url="https://city.example/x", title="Title", content="Body text", images=["https://i/1.jpg"])
    scrape_page = AsyncMock(return_value=page)
    with patch("newsfuse.api.routes.scrape.page_scraper.scrape_page", new=scrape_page):
        first = client.get("/api/scrape", params={"url": "https://city.example/x"})
        second = client.get("/api/scrape", params={"url": "https://city.example/x"})

    assert first.status_code == 200
    body = first.json()
    assert body["title"] == "Title"
    assert body["length"] == {"text": 9, "images": 1, "videos": 0, "links": 0}
    assert body["cached"] is False
    assert body["success"] is True
    assert set(body) == set(ScrapeResponse.model_fields)
    assert second.json()["cached"] is True
    assert scrape_page.await_count == 1


def test_scrape_failure_is_500(client):
    with patch(
        "newsfuse.api.routes.scrape.page_scraper.scrape_page",
        new=AsyncMock(side_effect=RuntimeError("403 Forbidden")),
    ):
        response = client.get("/api/scrape", params={"url": "https://city.example/blocked"})

    assert response.status_code == 500
    assert response.json() == {"error": "Scraping failed", "details": "403 Forbidden"}
