"""Centralized logging service using loguru."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from newsfuse.config import settings

# Remove default handler
logger.remove()

logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level=settings.app_log_level.upper(),
    colorize=True,
)

if settings.log_to_file:
    LOG_DIR = Path(settings.log_dir)
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    logger.add(
        LOG_DIR / "newsfuse_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG",
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )

for logger_name in (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "httpx",
    "httpcore",
    "hpack",
    "openai._base_client",
    "trafilatura",
    "asyncio",
):
    logging.getLogger(logger_name).setLevel(settings.noisy_log_level.upper())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_llm_call(
    model: str,
    caller: str,
    prompt_chars: int = 0,
    response_chars: int = 0,
    duration_ms: int = 0,
    status: str = "success",
    error: Optional[str] = None,
) -> None:
    """Log one completion-service call."""
    call_data = {
        "timestamp": _now(),
        "model": model,
        "caller": caller,
        "prompt_chars": prompt_chars,
        "response_chars": response_chars,
        "duration_ms": duration_ms,
        "status": status,
        "error": error,
    }
    if error:
        logger.warning(f"LLM_CALL_FAILED: {call_data}")
    else:
        logger.info(f"LLM_CALL: {call_data}")


def log_source_fetch(
    source: str,
    status: str,
    candidates: int = 0,
    duration_ms: int = 0,
    error: Optional[str] = None,
) -> None:
    """Log the outcome of one source fetch."""
    fetch_data = {
        "timestamp": _now(),
        "source": source,
        "status": status,
        "candidates": candidates,
        "duration_ms": duration_ms,
        "error": error,
    }
    if error:
        logger.warning(f"SOURCE_FETCH_FAILED: {fetch_data}")
    else:
        logger.debug(f"SOURCE_FETCH: {fetch_data}")


def log_cache_event(operation: str, key: str, hit: bool | None = None, **kwargs: Any) -> None:
    cache_data = {
        "timestamp": _now(),
        "operation": operation,
        "key": key[:16],
        "hit": hit,
        **kwargs,
    }
    logger.debug(f"CACHE: {cache_data}")


def log_pipeline_stage(
    stage: str,
    query: str,
    **kwargs: Any,
) -> None:
    """Log a pipeline stage transition."""
    stage_data = {
        "timestamp": _now(),
        "stage": stage,
        "query": query[:100],
        **kwargs,
    }
    logger.info(f"PIPELINE_STAGE: {stage_data}")


def log_event(
    event_type: str,
    message: str,
    level: str = "INFO",
    **kwargs: Any,
) -> None:
    """Log a generic event."""
    event_data = {
        "timestamp": _now(),
        "event_type": event_type,
        "message": message,
        **kwargs,
    }
    logger.log(level.upper(), f"EVENT: {event_data}")
