"""
Snippet extraction for search results.

A snippet is a short window of the matched text around the first occurrence
of the query: up to 30 characters before it and 70 after it, with "..." on
whichever side was cut. Every occurrence of the query inside the window is
marked as highlighted, in the original case.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import List, Tuple

CONTEXT_BEFORE = 30
CONTEXT_AFTER = 70
MAX_LENGTH = 100
ELLIPSIS = "..."


@dataclass(frozen=True)
class SnippetPart:
    text: str
    highlighted: bool = False


@dataclass(frozen=True)
class Snippet:
    parts: Tuple[SnippetPart, ...]

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.parts)

    @property
    def highlights(self) -> List[str]:
        return [part.text for part in self.parts if part.highlighted]

    def to_html(self, css_class: str = "highlight") -> str:
        chunks = []
        for part in self.parts:
            escaped = html.escape(part.text)
            if part.highlighted:
                chunks.append(f'<span class="{css_class}">{escaped}</span>')
            else:
                chunks.append(escaped)
        return "".join(chunks)


def _append(parts: List[SnippetPart], text: str, highlighted: bool = False) -> None:
    if not text:
        return
    if parts and not highlighted and not parts[-1].highlighted:
        parts[-1] = SnippetPart(parts[-1].text + text)
    else:
        parts.append(SnippetPart(text, highlighted))


def _find(text: str, query: str, start: int = 0) -> int:
    """Case-insensitive find returning a position in text itself, even where
    lower-casing changes length (e.g. "İ")."""
    lower_query = query.lower()
    for index in range(start, len(text) - len(query) + 1):
        if text[index:index + len(query)].lower() == lower_query:
            return index
    return -1


def _highlight_all(parts: List[SnippetPart], window: str, query: str) -> None:
    current = 0
    found = _find(window, query)
    while found != -1:
        _append(parts, window[current:found])
        _append(parts, window[found:found + len(query)], highlighted=True)
        current = found + len(query)
        found = _find(window, query, current)
    _append(parts, window[current:])


def highlighted_snippet(text: str, query: str, max_length: int = MAX_LENGTH) -> Snippet:
    """Window text around the first case-insensitive match of query.

    Without a match, the first max_length characters are returned unhighlighted.
    """
    index = _find(text, query) if query else -1
    if index == -1:
        truncated = text[:max_length] + (ELLIPSIS if len(text) > max_length else "")
        return Snippet(parts=(SnippetPart(truncated),) if truncated else ())

    start = max(0, index - CONTEXT_BEFORE)
    end = min(len(text), index + len(query) + CONTEXT_AFTER)

    parts: List[SnippetPart] = []
    if start > 0:
        _append(parts, ELLIPSIS)
    _highlight_all(parts, text[start:end], query)
    if end < len(text):
        _append(parts, ELLIPSIS)
    return Snippet(parts=tuple(parts))
