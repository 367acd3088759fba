from __future__ import annotations

from dataclasses import dataclass

import httpx

from newsfuse.config import settings


@dataclass
class FetchResult:
    url: str
    final_url: str
    status_code: int
    text: str


def default_headers() -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


async def get(
    url: str,
    *,
    timeout_s: float,
    headers: dict[str, str] | None = None,
) -> FetchResult:
    """GET ``url`` following redirects; raises on timeout, network, or HTTP error."""
    async with httpx.AsyncClient(
        timeout=timeout_s,
        follow_redirects=True,
        headers=headers or default_headers(),
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return FetchResult(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            text=response.text,
        )
