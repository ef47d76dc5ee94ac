"""Helpers for LangChain message content."""

from __future__ import annotations

from typing import Any


def message_text(message: Any) -> str:
    """Plain text of a LangChain message or chunk.

    Content may be a string or a list of content blocks; non-text blocks are
    ignored.
    """
    content = getattr(message, "content", message)
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, dict):
                parts.append(str(part.get("text", "")))
            else:
                parts.append(str(part))
        return "".join(parts)
    return str(content or "")
