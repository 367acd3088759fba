"""Query category detection and the source filter it drives."""

from __future__ import annotations

import re
from typing import Iterable

from newsfuse import llm_client
from newsfuse.config import settings
from newsfuse.models.completion import Failed, PlainText, StructuredJson
from newsfuse.models.records import GENERAL_CATEGORY, GLOBAL_REGION, SourceDescriptor
from newsfuse.services import logger as log_service
from newsfuse.services.prompt_store import render_prompt

CATEGORIES = (
    "general",
    "technology",
    "business",
    "sports",
    "science",
    "entertainment",
    "health",
    "politics",
)


def normalize_category(label: object) -> str | None:
    """Return the enumerated category matching ``label``, or None."""
    if not isinstance(label, str):
        return None
    cleaned = re.sub(r"[^a-z]", "", label.lower())
    return cleaned if cleaned in CATEGORIES else None


def _label_from_text(text: str) -> str | None:
    words = re.findall(r"[a-zA-Z]+", text)
    if not words:
        return None
    return normalize_category(words[0])


async def classify(query: str, *, timeout_s: float | None = None) -> str:
    """Map ``query`` to one category; ``general`` on any failure."""
    prompt = render_prompt("classify.category", query=query, categories=", ".join(CATEGORIES))
    parsed = await llm_client.complete_parsed(
        prompt,
        timeout_s=timeout_s if timeout_s is not None else settings.classify_timeout_s,
        caller="classifier",
    )

    label: str | None = None
    if isinstance(parsed, StructuredJson):
        value = parsed.value
        if isinstance(value, dict):
            label = normalize_category(value.get("category"))
        elif isinstance(value, list) and value:
            label = normalize_category(value[0])
    elif isinstance(parsed, PlainText):
        label = _label_from_text(parsed.text)

    if label is None:
        reason = parsed.reason if isinstance(parsed, Failed) else "unrecognized_label"
        log_service.log_event(
            "classify_fallback",
            "Category detection fell back to general",
            level="WARNING",
            query=query[:100],
            reason=reason,
        )
        return GENERAL_CATEGORY
    return label


def filter_by_region(sources: Iterable[SourceDescriptor], region: str | None) -> list[SourceDescriptor]:
    if not region or not region.strip():
        return list(sources)
    wanted = region.strip().lower()
    return [
        s
        for s in sources
        if s.region.lower() == wanted or s.region.lower() == GLOBAL_REGION.lower()
    ]


def filter_by_category(sources: Iterable[SourceDescriptor], category: str) -> list[SourceDescriptor]:
    wanted = (category or GENERAL_CATEGORY).lower()
    if wanted == GENERAL_CATEGORY:
        return list(sources)
    return [s for s in sources if s.category.lower() in (wanted, GENERAL_CATEGORY)]


def filter_sources(
    sources: Iterable[SourceDescriptor],
    category: str,
    region: str | None = None,
) -> list[SourceDescriptor]:
    """Sources of the given category or ``general``, in the region or ``Global``."""
    return filter_by_category(filter_by_region(sources, region), category)
