from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from newsfuse.agents.orchestrator import AggregationOrchestrator
from newsfuse.api.deps import get_orchestrator, parse_flag
from newsfuse.models.schemas import SearchRequest
from newsfuse.services import logger as log_service

router = APIRouter(prefix="/api/search", tags=["search"])


@router.get("")
async def search(
    q: str | None = None,
    limit: int | None = None,
    category: str | None = None,
    region: str | None = None,
    ttl: int | None = None,
    clean: str | None = None,
    summarize: str | None = None,
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
):
    """Aggregate, rank and optionally summarize results for ``q``."""
    if q is None or not q.strip():
        raise HTTPException(status_code=400, detail="Query parameter 'q' is required")

    request = SearchRequest(
        query=q.strip(),
        limit=limit,
        category=category.strip() if category and category.strip() else None,
        region=region.strip() if region and region.strip() else None,
        ttl=ttl,
        summarize=parse_flag(clean) or parse_flag(summarize),
    )
    try:
        response = await orchestrator.run(request)
    except Exception as exc:
        log_service.log_event(
            "search_failed",
            "Unhandled error in search pipeline",
            level="ERROR",
            query=request.query[:100],
            error=f"{type(exc).__name__}: {exc}",
        )
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc) or type(exc).__name__})
    return response.model_dump(mode="json")
