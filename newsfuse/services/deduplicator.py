from __future__ import annotations

import re
from typing import Callable, Iterable

from newsfuse.models.records import CandidateResult


def url_key(candidate: CandidateResult) -> str:
    url = (candidate.url or "").strip().lower()
    url = url.split("#", 1)[0]
    return url.rstrip("/")


def title_key(candidate: CandidateResult) -> str:
    title = re.sub(r"[^\w\s]", " ", (candidate.title or "").lower())
    return " ".join(title.split())


def _keep_best(
    candidates: Iterable[CandidateResult],
    key_fn: Callable[[CandidateResult], str],
) -> list[CandidateResult]:
    by_key: dict[str, CandidateResult] = {}
    unkeyed: list[CandidateResult] = []
    for item in candidates:
        key = key_fn(item)
        if not key:
            unkeyed.append(item)
            continue
        prev = by_key.get(key)
        if prev is None or item.score > prev.score:
            by_key[key] = item
    return list(by_key.values()) + unkeyed


def dedupe(candidates: Iterable[CandidateResult], *, by_title: bool = True) -> list[CandidateResult]:
    """Collapse duplicates, keeping the strictly higher-scoring record.

    Keyed by case-normalized URL; with ``by_title`` the result is also merged
    on normalized title and then re-merged by URL. Ties keep the first seen.
    Output order is not meaningful; callers sort by score.
    """
    merged = _keep_best(candidates, url_key)
    if by_title:
        merged = _keep_best(merged, title_key)
        merged = _keep_best(merged, url_key)
    return merged


def rank(candidates: Iterable[CandidateResult]) -> list[CandidateResult]:
    """Sort by score, highest first; stable for equal scores."""
    return sorted(candidates, key=lambda c: c.score, reverse=True)
