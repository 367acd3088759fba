from __future__ import annotations

from fastapi import Request

from newsfuse.agents.orchestrator import AggregationOrchestrator
from newsfuse.services.cache_store import CacheStore

TRUTHY = {"1", "true", "yes", "on", "y"}


def get_cache(request: Request) -> CacheStore:
    """The process-wide cache built at application startup."""
    return request.app.state.cache


def get_orchestrator(request: Request) -> AggregationOrchestrator:
    return request.app.state.orchestrator


def parse_flag(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in TRUTHY
