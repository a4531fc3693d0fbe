"""
Markdown stripping for speech synthesis.
"""

from __future__ import annotations

import re
from typing import List, Pattern, Tuple

# Order matters: fenced code before inline code, images before links,
# horizontal rules before emphasis, bold before italic.
_RULES: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"```[\s\S]*?```"), " "),
    (re.compile(r"^\s*([-*_])(\s*\1){2,}\s*$", re.MULTILINE), ""),
    (re.compile(r"^#{1,6}\s+(.*)", re.MULTILINE), r"\1 "),
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"(\*\*|__)(.*?)\1"), r"\2"),
    (re.compile(r"(\*|_)(.*?)\1"), r"\2"),
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"^\s*\d+[.)]\s+", re.MULTILINE), ""),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"^\s*>\s?", re.MULTILINE), ""),
    (re.compile(r"\s*[\r\n]\s*"), " . "),
    (re.compile(r"\s\s+"), " "),
]


def strip_markdown(text: str) -> str:
    """Remove common Markdown markers so the text reads naturally aloud."""
    if not isinstance(text, str):
        return ""
    for pattern, replacement in _RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


__all__ = ["strip_markdown"]
