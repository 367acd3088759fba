"""Tagged outcome of one completion-service call.

Completion responses are free text that may embed JSON. Call sites branch on
the variant instead of sniffing types:

- ``StructuredJson``: the first balanced ``{...}`` or ``[...]`` parsed cleanly.
- ``PlainText``: non-empty text with no parseable JSON.
- ``Failed``: the call errored, timed out, or returned nothing.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class StructuredJson:
    value: Any
    raw: str = ""


@dataclass(frozen=True, slots=True)
class PlainText:
    text: str


@dataclass(frozen=True, slots=True)
class Failed:
    reason: str


ParsedCompletion = Union[StructuredJson, PlainText, Failed]

_CLOSERS = {"{": "}", "[": "]"}


def _balanced_span(text: str, start: int) -> int | None:
    """Return the index one past the bracket that closes ``text[start]``."""
    stack: list[str] = []
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        ch = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in ("}", "]"):
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return idx + 1
    return None


def extract_json_fragment(text: str) -> Any | None:
    """Parse the first balanced JSON object or array embedded in ``text``."""
    for start, ch in enumerate(text):
        if ch not in _CLOSERS:
            continue
        end = _balanced_span(text, start)
        if end is None:
            continue
        try:
            return json.loads(text[start:end])
        except json.JSONDecodeError:
            continue
    return None


def parse_completion(raw: str | None) -> ParsedCompletion:
    if raw is None:
        return Failed("empty_response")
    text = raw.strip()
    if not text:
        return Failed("empty_response")
    value = extract_json_fragment(text)
    if value is not None:
        return StructuredJson(value=value, raw=text)
    return PlainText(text=text)
