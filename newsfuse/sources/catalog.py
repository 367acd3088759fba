"""Static list of content sources queried for every search."""

from __future__ import annotations

from typing import Callable
from urllib.parse import quote, quote_plus

from newsfuse.models.records import GENERAL_CATEGORY, GLOBAL_REGION, SourceDescriptor


def _plus(template: str) -> Callable[[str], str]:
    return lambda query: template.format(q=quote_plus(query.strip()))


def _path(template: str) -> Callable[[str], str]:
    return lambda query: template.format(q=quote(query.strip(), safe=""))


DEFAULT_SOURCES: tuple[SourceDescriptor, ...] = (
    SourceDescriptor(
        name="Google News",
        category=GENERAL_CATEGORY,
        region=GLOBAL_REGION,
        url_template=_plus("https://news.google.com/rss/search?q={q}&hl=en-IN&gl=IN&ceid=IN:en"),
        kind="rss",
    ),
    SourceDescriptor(
        name="Bing News",
        category=GENERAL_CATEGORY,
        region=GLOBAL_REGION,
        url_template=_plus("https://www.bing.com/news/search?q={q}"),
    ),
    SourceDescriptor(
        name="BBC",
        category=GENERAL_CATEGORY,
        region="UK",
        url_template=_plus("https://www.bbc.co.uk/search?q={q}"),
    ),
    SourceDescriptor(
        name="The Guardian",
        category=GENERAL_CATEGORY,
        region="UK",
        url_template=_plus("https://www.theguardian.com/search?q={q}"),
    ),
    SourceDescriptor(
        name="The Hindu",
        category=GENERAL_CATEGORY,
        region="India",
        url_template=_plus("https://www.thehindu.com/search/?q={q}"),
    ),
    SourceDescriptor(
        name="NDTV",
        category=GENERAL_CATEGORY,
        region="India",
        url_template=_path("https://www.ndtv.com/search?searchtext={q}"),
    ),
    SourceDescriptor(
        name="Reuters",
        category="business",
        region=GLOBAL_REGION,
        url_template=_plus("https://www.reuters.com/site-search/?query={q}"),
    ),
    SourceDescriptor(
        name="Economic Times",
        category="business",
        region="India",
        url_template=_path("https://economictimes.indiatimes.com/topic/{q}"),
    ),
    SourceDescriptor(
        name="TechCrunch",
        category="technology",
        region="US",
        url_template=_plus("https://techcrunch.com/?s={q}"),
    ),
    SourceDescriptor(
        name="The Verge",
        category="technology",
        region="US",
        url_template=_plus("https://www.theverge.com/search?q={q}"),
    ),
    SourceDescriptor(
        name="ESPN",
        category="sports",
        region="US",
        url_template=_path("https://www.espn.com/search/_/q/{q}"),
    ),
    SourceDescriptor(
        name="ScienceDaily",
        category="science",
        region=GLOBAL_REGION,
        url_template=_plus("https://www.sciencedaily.com/search/?keyword={q}"),
    ),
    SourceDescriptor(
        name="Variety",
        category="entertainment",
        region="US",
        url_template=_plus("https://variety.com/?s={q}"),
    ),
    SourceDescriptor(
        name="Medical News Today",
        category="health",
        region=GLOBAL_REGION,
        url_template=_plus("https://www.medicalnewstoday.com/search?q={q}"),
    ),
    SourceDescriptor(
        name="Politico",
        category="politics",
        region="US",
        url_template=_plus("https://www.politico.com/search?q={q}"),
    ),
)
