"""Text helpers shared by the prompt list, editor commands and refinement."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

ELLIPSIS = "..."

_ENHANCE_RE = re.compile(r"^/enhance$")
_SHORTEN_RE = re.compile(r"^/shorten\s+(\d+)$")

_HTML_TAG_RE = re.compile(r"<[^>]+>")
_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+")
_LIST_ITEM_RE = re.compile(r"^(\s*)(?:[-*+]|\d+[.)])\s+")
# Underscore emphasis only at word edges so snake_case survives.
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*|(?<!\w)__(.+?)__(?!\w)")
_ITALIC_RE = re.compile(r"\*(.+?)\*|(?<!\w)_(.+?)_(?!\w)")
_CODE_RE = re.compile(r"`([^`]*)`")
_LINK_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")


@dataclass(frozen=True)
class SlashCommand:
    command: str
    args: List[str] = field(default_factory=list)


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + ELLIPSIS


def parse_slash_command(text: str) -> Optional[SlashCommand]:
    """Recognise ``/enhance`` and ``/shorten <integer>``; anything else is None."""
    text = text.strip()
    if _ENHANCE_RE.match(text):
        return SlashCommand("enhance", [])
    match = _SHORTEN_RE.match(text)
    if match:
        return SlashCommand("shorten", [match.group(1)])
    return None


def _inner(match: re.Match) -> str:
    return next(group for group in match.groups() if group is not None)


def extract_markdown_content(markup: str) -> str:
    """Plain-text preview of a prompt body, one output line per input line."""
    lines = []
    for line in _HTML_TAG_RE.sub("", markup).split("\n"):
        line = _HEADING_RE.sub("", line)
        line = _LIST_ITEM_RE.sub(r"\1", line)
        line = _LINK_RE.sub(r"\1", line)
        line = _CODE_RE.sub(r"\1", line)
        line = _BOLD_RE.sub(_inner, line)
        line = _ITALIC_RE.sub(_inner, line)
        lines.append(line)
    return "\n".join(lines)


def format_date(value: str) -> str:
    """Render an ISO-8601 timestamp as e.g. ``Jan 15, 2024``."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return f"{parsed:%b} {parsed.day}, {parsed.year}"
