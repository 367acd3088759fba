from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from newsfuse.api.deps import get_cache
from newsfuse.config import settings
from newsfuse.models.schemas import ScrapePayload, ScrapeResponse
from newsfuse.services import logger as log_service
from newsfuse.services.cache_store import CacheStore
from newsfuse.tools import page_scraper

router = APIRouter(prefix="/api/scrape", tags=["scrape"])


@router.get("")
async def scrape(
    url: str | None = None,
    ttl: int | None = None,
    cache: CacheStore = Depends(get_cache),
):
    """Scrape one page: main text, article images, embedded videos, links."""
    if url is None or not url.strip():
        raise HTTPException(status_code=400, detail="Query parameter 'url' is required")
    url = url.strip()
    key = f"scrape:{url}"

    cached = cache.get(key)
    if cached is not None:
        return ScrapeResponse(**cached, success=True, cached=True).model_dump(mode="json")

    try:
        page = await page_scraper.scrape_page(url)
    except Exception as exc:
        log_service.log_event(
            "scrape_failed",
            "Page scrape failed",
            level="WARNING",
            url=url,
            error=f"{type(exc).__name__}: {exc}",
        )
        return JSONResponse(status_code=500, content={"error": "Scraping failed", "details": str(exc)})

    payload = ScrapePayload(**page.to_dict())
    effective_ttl = settings.cache_ttl_s if ttl is None or ttl <= 0 else min(ttl, settings.max_cache_ttl_s)
    body = payload.model_dump(mode="json")
    cache.put(key, body, ttl=effective_ttl)
    return ScrapeResponse(**body, success=True, cached=False).model_dump(mode="json")
