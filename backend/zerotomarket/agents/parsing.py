"""Helpers that pull structured fields out of free-form completion text."""

from __future__ import annotations

import re

_BULLET_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+(.+?)\s*$")
_SCORE_RE = re.compile(
    r"readiness\s+score(?:\s*\(\s*1\s*-\s*10\s*\))?\W*?(\d+(?:\.\d+)?)\s*(?:/\s*10|out of 10)?",
    re.IGNORECASE,
)


def _clean(text: str) -> str:
    return text.replace("**", "").replace("__", "").strip(" :-")


def extract_bullets(text: str, limit: int = 3) -> list[str]:
    """Return up to ``limit`` bullet or numbered list items."""
    items: list[str] = []
    for line in (text or "").splitlines():
        match = _BULLET_RE.match(line)
        if not match:
            continue
        item = _clean(match.group(1))
        if item:
            items.append(item)
        if len(items) >= limit:
            break
    return items


def extract_labeled(text: str, label: str) -> str | None:
    """Value of the first ``Label: value`` line, ignoring markdown and numbering."""
    pattern = re.compile(
        rf"^[^:\n]*?{re.escape(label)}[*_ \t]*[:\-][*_ \t]*(.+)$",
        re.IGNORECASE | re.MULTILINE,
    )
    match = pattern.search(text or "")
    if not match:
        return None
    value = _clean(match.group(1))
    return value or None


def extract_readiness_score(text: str, default: float = 8.5) -> float:
    """Readiness score out of 10, clamped to 1..10."""
    match = _SCORE_RE.search(text or "")
    if not match:
        return default
    return max(1.0, min(10.0, float(match.group(1))))
