from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from string import Template
from typing import Any

PROMPTS_PATH = Path(__file__).resolve().parents[1] / "prompts" / "prompts.json"


@lru_cache(maxsize=4)
def _load_templates(path: str) -> dict[str, Template]:
    """Flatten the nested catalog into dotted keys, e.g. ``summarize.chunk``."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("Prompt catalog must be a JSON object.")

    templates: dict[str, Template] = {}

    def walk(node: Any, prefix: str) -> None:
        for name, value in node.items():
            key = f"{prefix}.{name}" if prefix else name
            if isinstance(value, dict):
                walk(value, key)
            elif isinstance(value, str):
                templates[key] = Template(value)
            else:
                raise TypeError(f"Prompt key must map to a string: {key}")

    walk(payload, "")
    return templates


def prompt_keys() -> list[str]:
    return sorted(_load_templates(str(PROMPTS_PATH)))


def render_prompt(key: str, **values: Any) -> str:
    templates = _load_templates(str(PROMPTS_PATH))
    if key not in templates:
        raise KeyError(f"Prompt key not found: {key}")
    try:
        return templates[key].substitute(**values)
    except KeyError as exc:
        missing = str(exc.args[0])
        raise KeyError(f"Missing template value '{missing}' for prompt '{key}'") from exc
