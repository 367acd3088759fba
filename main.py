"""NewsFuse - multi-source news aggregation

Simple CLI for running one search through the pipeline.
"""

import argparse
import asyncio

from newsfuse.agents.orchestrator import AggregationOrchestrator
from newsfuse.config import settings
from newsfuse.models.schemas import SearchRequest
from newsfuse.services.cache_store import CacheStore


async def run_search(query: str, category: str | None, region: str | None, limit: int | None, summarize: bool):
    """Run one search and print the ranked results."""
    print(f"Search query: {query}")
    print("-" * 50)

    cache = CacheStore(capacity=settings.cache_capacity, default_ttl=settings.cache_ttl_s)
    orchestrator = AggregationOrchestrator(cache)
    response = await orchestrator.run(
        SearchRequest(query=query, category=category, region=region, limit=limit, summarize=summarize)
    )

    print(f"[*] Category: {response.detected_category} ({response.category_source})")
    print(f"[*] Sources queried: {response.sources_queried}, candidates: {response.total_candidates}")
    print(f"\n[+] Results ({response.total_results}):")
    for i, result in enumerate(response.results, 1):
        print(f"  {i}. [{result.score}] {result.title[:80]}")
        print(f"     {result.source} | {result.url}")

    if response.best_urls:
        print("\n[+] Best URLs:")
        for url in response.best_urls:
            print(f"  - {url}")

    for article in response.articles:
        if article.error:
            print(f"\n[!] {article.url}: {article.error}")

    summary = response.unified_summary
    if summary is not None:
        print(f"\n{'='*50}")
        print(f"SUMMARY ({summary.method}):")
        print(f"{'='*50}")
        for point in summary.points:
            print(f"  - {point}")
        if summary.merged_summary:
            print(f"\n{summary.merged_summary}")

    print(f"\n   Runtime: {response.time_ms}ms")


def main():
    parser = argparse.ArgumentParser(description="NewsFuse news aggregation")
    parser.add_argument("--query", "-q", required=True, help="Search query")
    parser.add_argument("--category", "-c", help="Skip classification and use this category")
    parser.add_argument("--region", "-r", help="Only sources in this region (plus Global)")
    parser.add_argument("--limit", "-l", type=int, help="Maximum results (default: from config)")
    parser.add_argument("--summarize", "-s", action="store_true", help="Deep-fetch and summarize the best articles")

    args = parser.parse_args()

    asyncio.run(run_search(args.query, args.category, args.region, args.limit, args.summarize))


if __name__ == "__main__":
    main()
