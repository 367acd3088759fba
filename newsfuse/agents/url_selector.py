"""Best-URL selection for the deep-fetch stage."""

from __future__ import annotations

import re
from typing import Any

from newsfuse import llm_client
from newsfuse.config import settings
from newsfuse.models.completion import Failed, PlainText, StructuredJson
from newsfuse.models.records import CandidateResult
from newsfuse.services import logger as log_service
from newsfuse.services.deduplicator import url_key
from newsfuse.services.prompt_store import render_prompt

URL_IN_TEXT = re.compile(r"https?://[^\s\"'<>\])]+")


class URLSelector:
    """Asks the completion service for the most relevant candidate URLs.

    Every URL the service returns is checked against the candidate list;
    anything not present there is dropped. When nothing valid remains the
    selection falls back to the top-K candidates by score.
    """

    def __init__(self, *, timeout_s: float | None = None):
        self.timeout_s = timeout_s if timeout_s is not None else settings.selection_timeout_s

    @staticmethod
    def top_by_score(candidates: list[CandidateResult], k: int) -> list[str]:
        ranked = sorted(candidates, key=lambda c: c.score, reverse=True)
        selected: list[str] = []
        seen: set[str] = set()
        for candidate in ranked:
            key = url_key(candidate)
            if key in seen:
                continue
            seen.add(key)
            selected.append(candidate.url)
            if len(selected) >= k:
                break
        return selected

    @staticmethod
    def _format_candidates(candidates: list[CandidateResult]) -> str:
        lines = []
        for idx, c in enumerate(candidates, 1):
            lines.append(f"{idx}. {c.title} | {c.source_name} | {c.url}")
        return "\n".join(lines)

    @staticmethod
    def _raw_choices(value: Any) -> list[Any]:
        if isinstance(value, dict):
            for field in ("urls", "selected", "best_urls", "articles"):
                if isinstance(value.get(field), list):
                    return value[field]
            return []
        if isinstance(value, list):
            return value
        return []

    @staticmethod
    def validate_choices(choices: list[Any], candidates: list[CandidateResult], k: int) -> list[str]:
        """Map returned URLs (or 1-based indexes) onto candidate URLs."""
        by_key = {url_key(c): c.url for c in candidates}
        selected: list[str] = []
        for choice in choices:
            url: str | None = None
            if isinstance(choice, dict):
                choice = choice.get("url")
            if isinstance(choice, bool):
                continue
            if isinstance(choice, int) and 1 <= choice <= len(candidates):
                url = candidates[choice - 1].url
            elif isinstance(choice, str):
                key = choice.strip().rstrip(".,;:!?").lower().split("#", 1)[0].rstrip("/")
                url = by_key.get(key)
            if url and url not in selected:
                selected.append(url)
            if len(selected) >= k:
                break
        return selected

    async def select(
        self,
        candidates: list[CandidateResult],
        query: str,
        k: int,
    ) -> tuple[list[str], str]:
        """Return ``(urls, method)`` where method is ``llm`` or ``fallback``."""
        if k <= 0 or not candidates:
            return [], "none"

        prompt = render_prompt(
            "selection.best_urls",
            query=query,
            candidates=self._format_candidates(candidates),
            count=k,
        )
        parsed = await llm_client.complete_parsed(prompt, timeout_s=self.timeout_s, caller="url_selector")

        selected: list[str] = []
        if isinstance(parsed, StructuredJson):
            selected = self.validate_choices(self._raw_choices(parsed.value), candidates, k)
        elif isinstance(parsed, PlainText):
            selected = self.validate_choices(URL_IN_TEXT.findall(parsed.text), candidates, k)

        if selected:
            return selected, "llm"

        log_service.log_event(
            "selection_fallback",
            "Best-URL selection fell back to top candidates by score",
            level="WARNING",
            query=query[:100],
            reason=parsed.reason if isinstance(parsed, Failed) else "no_valid_urls",
        )
        return self.top_by_score(candidates, k), "fallback"
