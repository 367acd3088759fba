from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from newsfuse.agents.orchestrator import AggregationOrchestrator
from newsfuse.api.routes import scrape, search
from newsfuse.config import settings
from newsfuse.services import logger as log_service
from newsfuse.services.cache_store import CacheStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    cache = CacheStore(capacity=settings.cache_capacity, default_ttl=settings.cache_ttl_s)
    app.state.cache = cache
    app.state.orchestrator = AggregationOrchestrator(cache)
    log_service.log_event("startup", "Cache and orchestrator ready", capacity=settings.cache_capacity)
    yield
    # Shutdown
    cache.clear()


app = FastAPI(
    title="NewsFuse",
    description="Multi-source news aggregation, ranking and summarization",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(search.router)
app.include_router(scrape.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "newsfuse"}
