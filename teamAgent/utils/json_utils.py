"""Lenient JSON extraction from model responses."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def find_balanced_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` span in ``text``.

    Braces inside JSON string literals are ignored.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        start = text.find("{", start + 1)
    return None


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the first JSON object in a model response.

    Tolerates surrounding prose, markdown code fences and trailing commas.

    Raises:
        ValueError: when no JSON object can be recovered.
    """
    candidates = [match.group(1) for match in _FENCE_RE.finditer(text)]
    candidates.append(text)

    for candidate in candidates:
        span = find_balanced_object(candidate)
        if span is None:
            continue
        try:
            payload = json.loads(span)
        except json.JSONDecodeError:
            try:
                payload = json.loads(strip_trailing_commas(span))
            except json.JSONDecodeError:
                continue
        if isinstance(payload, dict):
            return payload

    raise ValueError("No JSON object found in model response")
