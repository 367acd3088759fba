"""Completion-service client: OpenRouter (OpenAI-compatible SDK) or Pollinations text."""
from __future__ import annotations

import asyncio
import time
from typing import Any
from urllib.parse import quote

import httpx

from newsfuse.config import settings
from newsfuse.models.completion import Failed, ParsedCompletion, parse_completion
from newsfuse.services import logger as log_service


class CompletionUnavailable(RuntimeError):
    """The configured completion backend cannot be used."""


class OpenRouterCompletions:
    def __init__(self, openai_client: Any, model: str):
        self._client = openai_client
        self.model = model

    @staticmethod
    def _temperature_for_model(model: str) -> int:
        # Some OpenAI GPT-5-compatible gateways reject temperature=0.
        lowered = (model or "").lower()
        if "gpt-5" in lowered:
            return 1
        return 0

    async def complete(self, prompt: str, *, timeout_s: float | None = None) -> str:
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=settings.completion_max_tokens,
            temperature=self._temperature_for_model(self.model),
            timeout=timeout_s,
        )
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        return getattr(choices[0].message, "content", None) or ""


class PollinationsCompletions:
    """Keyless text endpoint.

    Short prompts use ``GET <base>/<url-encoded prompt>``, which returns plain
    text. Prompts whose encoded path would exceed ``max_get_chars`` go to the
    ``POST <base>/`` chat endpoint instead, since long request lines are
    rejected by gateways.
    """

    def __init__(self, base_url: str, model: str = "openai", max_get_chars: int = 2000):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_get_chars = max_get_chars

    async def complete(self, prompt: str, *, timeout_s: float | None = None) -> str:
        encoded = quote(prompt, safe="")
        async with httpx.AsyncClient(timeout=timeout_s, follow_redirects=True) as client:
            if len(encoded) <= self.max_get_chars:
                response = await client.get(f"{self.base_url}/{encoded}")
            else:
                response = await client.post(
                    f"{self.base_url}/",
                    json={
                        "model": self.model,
                        "messages": [{"role": "user", "content": prompt}],
                    },
                )
            response.raise_for_status()
            return response.text


def get_client() -> OpenRouterCompletions | PollinationsCompletions:
    provider = settings.completion_provider.lower().strip()
    if provider == "openrouter":
        if not settings.openrouter_api_key:
            raise CompletionUnavailable("OPENROUTER_API_KEY is not configured")
        from openai import AsyncOpenAI

        base_url = settings.openrouter_base_url.strip() or "https://openrouter.ai/api/v1"
        openai_client = AsyncOpenAI(
            api_key=settings.openrouter_api_key,
            base_url=base_url,
        )
        return OpenRouterCompletions(openai_client, get_model())
    if provider == "pollinations":
        return PollinationsCompletions(
            settings.pollinations_base_url,
            max_get_chars=settings.pollinations_max_get_chars,
        )
    raise CompletionUnavailable(f"Completion provider disabled or unknown: {settings.completion_provider}")


def get_model() -> str:
    if settings.completion_provider.lower().strip() == "pollinations":
        return "pollinations"
    return settings.completion_model


_client: OpenRouterCompletions | PollinationsCompletions | None = None


def client() -> OpenRouterCompletions | PollinationsCompletions:
    """Get or create the completion client."""
    global _client
    if _client is None:
        _client = get_client()
    return _client


def reset_client() -> None:
    global _client
    _client = None


async def complete(prompt: str, *, timeout_s: float, caller: str = "unknown") -> str:
    """Raw completion text; raises on timeout, transport error, or missing backend."""
    started = time.monotonic()
    try:
        text = await asyncio.wait_for(client().complete(prompt, timeout_s=timeout_s), timeout=timeout_s)
    except asyncio.TimeoutError:
        log_service.log_llm_call(
            model=get_model(),
            caller=caller,
            prompt_chars=len(prompt),
            duration_ms=int((time.monotonic() - started) * 1000),
            status="timeout",
            error=f"timed out after {timeout_s}s",
        )
        raise
    except Exception as exc:
        log_service.log_llm_call(
            model=get_model(),
            caller=caller,
            prompt_chars=len(prompt),
            duration_ms=int((time.monotonic() - started) * 1000),
            status="error",
            error=f"{type(exc).__name__}: {exc}",
        )
        raise
    log_service.log_llm_call(
        model=get_model(),
        caller=caller,
        prompt_chars=len(prompt),
        response_chars=len(text),
        duration_ms=int((time.monotonic() - started) * 1000),
    )
    return text


async def complete_parsed(prompt: str, *, timeout_s: float, caller: str = "unknown") -> ParsedCompletion:
    """Completion interpreted as ``ParsedCompletion``; never raises."""
    try:
        raw = await complete(prompt, timeout_s=timeout_s, caller=caller)
    except asyncio.TimeoutError:
        return Failed("timeout")
    except Exception as exc:
        return Failed(f"{type(exc).__name__}: {exc}")
    return parse_completion(raw)
