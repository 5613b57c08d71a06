"""
Rich text rendering for folder descriptions.

Descriptions are stored as raw text in a small markdown-like grammar:

    block   := fence | line ("\\n" line)*
    fence   := "```" any "```"                  -> <pre><code>
    line    := "## " inline                      -> <h3>
             | "- " inline                       -> <li> grouped in <ul>
             | digits ". " inline                -> <li> grouped in <ol>
             | "> " inline                       -> <blockquote>
             | inline                            -> text, lines joined by <br>
    inline  := "`" code "`" | "**" bold "**" | "*" italic "*" | text

Input is HTML-escaped before any markup is applied, so the output never
contains tags the grammar did not produce.
"""

import html
import re
from typing import List, Tuple

_FENCE = re.compile(r"```(.*?)```", re.DOTALL)
_INLINE_CODE = re.compile(r"`([^`]+?)`")
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"\*(.+?)\*")
_HEADING = re.compile(r"^## (.+)$")
_BULLET = re.compile(r"^- (.+)$")
_NUMBERED = re.compile(r"^\d+\. (.+)$")
_QUOTE = re.compile(r"^&gt; (.+)$")


def _emphasis(text: str) -> str:
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    return _ITALIC.sub(r"<em>\1</em>", text)


def render_inline(text: str) -> str:
    """Inline formatting on already-escaped text. Code spans are left as-is inside."""
    chunks = _INLINE_CODE.split(text)
    out = []
    for index, chunk in enumerate(chunks):
        if index % 2:
            out.append(f"<code>{chunk}</code>")
        else:
            out.append(_emphasis(chunk))
    return "".join(out)


def _render_lines(segment: str) -> str:
    tokens: List[Tuple[str, str]] = []  # (kind, html); kind is "line", "block", "ul" or "ol"

    for line in segment.split("\n"):
        for kind, pattern in (("ul", _BULLET), ("ol", _NUMBERED)):
            match = pattern.match(line)
            if match:
                item = f"<li>{render_inline(match.group(1))}</li>"
                if tokens and tokens[-1][0] == kind:
                    tokens[-1] = (kind, tokens[-1][1] + item)
                else:
                    tokens.append((kind, item))
                break
        else:
            heading = _HEADING.match(line)
            quote = _QUOTE.match(line)
            if heading:
                tokens.append(("block", f"<h3>{render_inline(heading.group(1))}</h3>"))
            elif quote:
                tokens.append(("block", f"<blockquote>{render_inline(quote.group(1))}</blockquote>"))
            else:
                tokens.append(("line", render_inline(line)))

    out = []
    previous = None
    for kind, body in tokens:
        if kind in ("ul", "ol"):
            body = f"<{kind}>{body}</{kind}>"
        if kind == "line" and previous == "line":
            out.append("<br>")
        out.append(body)
        previous = kind
    return "".join(out)


def render(markup: str) -> str:
    """Render stored rich text to an HTML fragment."""
    if not markup:
        return ""
    segments = _FENCE.split(html.escape(markup, quote=False))
    last = len(segments) - 1
    out = []
    for index, segment in enumerate(segments):
        if index % 2:
            out.append(f"<pre><code>{segment.strip(chr(10))}</code></pre>")
            continue
        if index > 0 and segment.startswith("\n"):
            segment = segment[1:]
        if index < last and segment.endswith("\n"):
            segment = segment[:-1]
        if segment:
            out.append(_render_lines(segment))
    return "".join(out)
