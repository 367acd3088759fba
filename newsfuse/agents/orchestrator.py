from __future__ import annotations

import asyncio
import time
from typing import Sequence

from newsfuse.agents import classifier
from newsfuse.agents.summarizer import DocumentSummarizer
from newsfuse.agents.url_selector import URLSelector
from newsfuse.config import settings
from newsfuse.models.records import GENERAL_CATEGORY, Article, CandidateResult, SourceDescriptor, UnifiedSummary
from newsfuse.models.schemas import (
    ArticleDigest,
    RankedResult,
    SearchPayload,
    SearchRequest,
    SearchResponse,
    UnifiedSummaryModel,
)
from newsfuse.services import logger as log_service
from newsfuse.services import source_fetcher
from newsfuse.services.cache_store import CacheStore, make_cache_key
from newsfuse.services.deduplicator import dedupe, rank
from newsfuse.services.scoring import query_terms
from newsfuse.services.throttle import ThrottledQueue
from newsfuse.sources.catalog import DEFAULT_SOURCES
from newsfuse.tools import article_reader


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return settings.default_limit
    return max(1, min(int(limit), settings.max_limit))


def threshold(ranked: list[CandidateResult], min_score: int, limit: int) -> list[CandidateResult]:
    """Keep candidates at or above ``min_score``; never empty while candidates exist."""
    kept = [c for c in ranked if c.score >= min_score]
    if not kept:
        kept = ranked
    return kept[:limit]


class AggregationOrchestrator:
    """Drives one search request through the aggregation pipeline.

    Flow:
      1. Cache lookup (early return on hit)
      2. Classify the query, concurrently with the fan-out fetch
      3. Filter candidates by source category, dedupe, rank, threshold
      4. Optional: pick best URLs, deep-fetch them, summarize and merge
      5. Cache the payload and return it

    Every collaborator failure degrades the response rather than failing it.
    """

    def __init__(
        self,
        cache: CacheStore,
        *,
        sources: Sequence[SourceDescriptor] = DEFAULT_SOURCES,
        selector: URLSelector | None = None,
        summarizer: DocumentSummarizer | None = None,
        deep_fetch_queue: ThrottledQueue | None = None,
    ):
        self.cache = cache
        self.sources = list(sources)
        self.selector = selector or URLSelector()
        self.summarizer = summarizer or DocumentSummarizer()
        self.deep_fetch_queue = deep_fetch_queue or ThrottledQueue(
            settings.deep_fetch_delay_s,
            concurrency=settings.deep_fetch_concurrency,
        )

    @staticmethod
    def cache_key(request: SearchRequest) -> str:
        return make_cache_key(
            request.query,
            limit=clamp_limit(request.limit),
            category=request.category,
            region=request.region,
            summarize=request.summarize,
        )

    async def run(self, request: SearchRequest) -> SearchResponse:
        started = time.monotonic()
        query = request.query.strip()
        limit = clamp_limit(request.limit)
        key = self.cache_key(request)

        cached = self.cache.get(key)
        if cached is not None:
            log_service.log_pipeline_stage("cache_hit", query)
            return SearchResponse(**cached, success=True, cached=True)

        terms = query_terms(query)
        region_sources = classifier.filter_by_region(self.sources, request.region)
        category, category_source, candidates = await self._classify_and_fetch(
            query, terms, request.category, region_sources
        )
        queried = classifier.filter_by_category(region_sources, category)
        log_service.log_pipeline_stage(
            "fetched",
            query,
            category=category,
            category_source=category_source,
            sources=len(queried),
            candidates=len(candidates),
        )

        ranked = rank(dedupe(candidates))
        results = threshold(ranked, settings.min_score, limit)
        log_service.log_pipeline_stage("ranked", query, unique=len(ranked), returned=len(results))

        best_urls: list[str] = []
        articles: list[Article] = []
        summary: UnifiedSummary | None = None
        if request.summarize and results:
            best_urls, articles, summary = await self._deep_summarize(results, query)
        else:
            best_urls = URLSelector.top_by_score(results, settings.deep_fetch_count)

        payload = SearchPayload(
            query=query,
            detected_category=category,
            category_source=category_source,
            region=request.region,
            sources_queried=len(queried),
            total_candidates=len(candidates),
            total_results=len(results),
            results=[RankedResult(**c.to_dict()) for c in results],
            best_urls=best_urls,
            articles=[self._digest(a) for a in articles],
            unified_summary=self._summary_model(summary) if request.summarize else None,
            time_ms=int((time.monotonic() - started) * 1000),
        )
        body = payload.model_dump(mode="json")
        self.cache.put(key, body, ttl=self._ttl(request.ttl))
        log_service.log_pipeline_stage("completed", query, time_ms=payload.time_ms)
        return SearchResponse(**body, success=True, cached=False)

    async def _classify_and_fetch(
        self,
        query: str,
        terms: list[str],
        requested_category: str | None,
        region_sources: list[SourceDescriptor],
    ) -> tuple[str, str, list[CandidateResult]]:
        if requested_category and requested_category.strip():
            category = requested_category.strip().lower()
            sources = classifier.filter_by_category(region_sources, category)
            candidates = await source_fetcher.fetch_all(sources, query, terms)
            return category, "request", candidates

        # Category only narrows which sources count, so fetch and classify together.
        category, candidates = await asyncio.gather(
            classifier.classify(query),
            source_fetcher.fetch_all(region_sources, query, terms),
        )
        if category != GENERAL_CATEGORY:
            allowed = {category, GENERAL_CATEGORY}
            candidates = [c for c in candidates if c.category.lower() in allowed]
        return category, "classifier", candidates

    async def _deep_summarize(
        self,
        results: list[CandidateResult],
        query: str,
    ) -> tuple[list[str], list[Article], UnifiedSummary]:
        pool = results[: settings.selection_pool_size]
        best_urls, method = await self.selector.select(pool, query, settings.deep_fetch_count)
        log_service.log_pipeline_stage("urls_selected", query, method=method, urls=len(best_urls))

        articles: list[Article] = await self.deep_fetch_queue.map(best_urls, article_reader.read_article)
        failed = [a.url for a in articles if not a.ok]
        log_service.log_pipeline_stage(
            "deep_fetched",
            query,
            fetched=len(articles) - len(failed),
            failed=len(failed),
        )

        try:
            all_points: list[str] = []
            for article in articles:
                if not article.ok:
                    continue
                points = await self.summarizer.summarize(article, query)
                article.extracted_points = tuple(points)
                all_points.extend(points)
            summary = await self.summarizer.merge(all_points, query, settings.summary_points)
        except Exception as exc:
            log_service.log_event(
                "summarize_failed",
                "Summarization failed; responding without a unified summary",
                level="WARNING",
                query=query[:100],
                error=f"{type(exc).__name__}: {exc}",
            )
            summary = UnifiedSummary(method="failed")

        log_service.log_pipeline_stage("summarized", query, points=len(summary.points), method=summary.method)
        return best_urls, articles, summary

    @staticmethod
    def _ttl(requested: int | None) -> float:
        if requested is None or requested <= 0:
            return float(settings.cache_ttl_s)
        return float(min(requested, settings.max_cache_ttl_s))

    @staticmethod
    def _digest(article: Article) -> ArticleDigest:
        return ArticleDigest(
            url=article.url,
            title=article.title,
            author=article.author,
            site_name=article.site_name,
            points=list(article.extracted_points),
            error=article.error,
        )

    @staticmethod
    def _summary_model(summary: UnifiedSummary | None) -> UnifiedSummaryModel | None:
        if summary is None:
            return None
        return UnifiedSummaryModel(
            points=list(summary.points),
            merged_summary=summary.merged_summary,
            method=summary.method,
        )

