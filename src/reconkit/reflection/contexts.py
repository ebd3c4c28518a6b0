# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Syntactic context of a reflected value.

Every occurrence of the value in the body is located and classified against the same fixed
set of pattern classes: comments, script blocks, style blocks, tag attributes (with event
handler, ``style`` and URL-bearing attributes singled out) and plain text between tags.
Classification is a pure function of ``(body, value)``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..models.reflection import ReflectionContext

COMMENT_RE = re.compile(r"<!--.*?(?:-->|\Z)", re.DOTALL)
SCRIPT_BLOCK_RE = re.compile(r"<script\b[^>]*>(.*?)(?:</script\s*>|\Z)", re.DOTALL | re.IGNORECASE)
STYLE_BLOCK_RE = re.compile(r"<style\b[^>]*>(.*?)(?:</style\s*>|\Z)", re.DOTALL | re.IGNORECASE)
TAG_RE = re.compile(r"""<[a-zA-Z](?:"[^"]*"|'[^']*'|[^'">])*>?""")
ATTRIBUTE_RE = re.compile(r"""([^\s"'<>/=]+)\s*=\s*(?:"([^"]*)"?|'([^']*)'?|([^\s"'=<>`]+))""")

URL_ATTRIBUTES = frozenset({"href", "src", "action", "formaction", "data", "poster", "background", "srcset"})

CONTEXT_ORDER = (
    ReflectionContext.HTML_BODY,
    ReflectionContext.HTML_ATTRIBUTE,
    ReflectionContext.SCRIPT,
    ReflectionContext.URL,
    ReflectionContext.CSS,
    ReflectionContext.HTML_COMMENT,
)

EXCERPT_RADIUS = 40


@dataclass(frozen=True)
class _Attribute:
    name: str
    start: int
    end: int
    value: str


def _spans(pattern: re.Pattern[str], body: str, group: int = 0) -> list[tuple[int, int]]:
    return [match.span(group) for match in pattern.finditer(body)]


def _inside(position: int, spans: list[tuple[int, int]]) -> bool:
    return any(start <= position < end for start, end in spans)


def _block_spans(pattern: re.Pattern[str], body: str, comments: list[tuple[int, int]]) -> list[tuple[int, int]]:
    """Content spans of blocks whose opening tag is not itself commented out."""
    return [match.span(1) for match in pattern.finditer(body) if not _inside(match.start(), comments)]


def _attributes(body: str, tag_spans: list[tuple[int, int]]) -> list[_Attribute]:
    attributes: list[_Attribute] = []
    for tag_start, tag_end in tag_spans:
        for match in ATTRIBUTE_RE.finditer(body, tag_start, tag_end):
            for group in (2, 3, 4):
                if match.group(group) is not None:
                    start, end = match.span(group)
                    attributes.append(_Attribute(match.group(1).lower(), start, end, match.group(group)))
                    break
    return attributes


def _occurrences(body: str, value: str) -> list[int]:
    positions: list[int] = []
    start = body.find(value)
    while start != -1:
        positions.append(start)
        start = body.find(value, start + 1)
    return positions


def _classify_position(
    position: int,
    *,
    comments: list[tuple[int, int]],
    scripts: list[tuple[int, int]],
    styles: list[tuple[int, int]],
    tags: list[tuple[int, int]],
    attributes: list[_Attribute],
) -> set[ReflectionContext]:
    if _inside(position, comments):
        return {ReflectionContext.HTML_COMMENT}
    if _inside(position, scripts):
        return {ReflectionContext.SCRIPT}
    if _inside(position, styles):
        return {ReflectionContext.CSS}
    if not _inside(position, tags):
        return {ReflectionContext.HTML_BODY}

    # Inside a tag but outside every attribute value (tag or attribute name): UNKNOWN.
    found: set[ReflectionContext] = set()
    for attribute in attributes:
        if not attribute.start <= position < attribute.end:
            continue
        found.add(ReflectionContext.HTML_ATTRIBUTE)
        if attribute.name.startswith("on"):
            found.add(ReflectionContext.SCRIPT)
        elif attribute.name == "style":
            found.add(ReflectionContext.CSS)
        elif attribute.name in URL_ATTRIBUTES:
            found.add(ReflectionContext.URL)
            if attribute.value.lstrip().lower().startswith("javascript:"):
                found.add(ReflectionContext.SCRIPT)
    return found or {ReflectionContext.UNKNOWN}


def locate_contexts(body: str, value: str) -> dict[ReflectionContext, int]:
    """
    Map each detected context to the first body offset where ``value`` lands in it.

    Empty when ``value`` does not occur in ``body``.
    """
    if not value or not body:
        return {}
    positions = _occurrences(body, value)
    if not positions:
        return {}

    # <!-- inside a script or style block is source text, not a comment.
    raw_comments = _spans(COMMENT_RE, body)
    scripts = _block_spans(SCRIPT_BLOCK_RE, body, raw_comments)
    styles = _block_spans(STYLE_BLOCK_RE, body, raw_comments)
    comments = [span for span in raw_comments if not _inside(span[0], scripts + styles)]
    tags = [span for span in _spans(TAG_RE, body) if not _inside(span[0], comments)]
    attributes = _attributes(body, tags)

    located: dict[ReflectionContext, int] = {}
    for position in positions:
        for context in _classify_position(
            position,
            comments=comments,
            scripts=scripts,
            styles=styles,
            tags=tags,
            attributes=attributes,
        ):
            located.setdefault(context, position)

    return {context: located[context] for context in (*CONTEXT_ORDER, ReflectionContext.UNKNOWN) if context in located}


def detect_contexts(body: str, value: str) -> tuple[ReflectionContext, ...]:
    """Contexts in fixed order; ``(UNKNOWN,)`` when the value is present but unclassifiable."""
    return tuple(locate_contexts(body, value))


def excerpt(body: str, position: int, length: int, radius: int = EXCERPT_RADIUS) -> str:
    """Slice of ``body`` around a reflection, flattened onto one line."""
    start = max(0, position - radius)
    end = min(len(body), position + length + radius)
    snippet = body[start:end].replace("\r", " ").replace("\n", " ")
    prefix = "..." if start > 0 else ""
    suffix = "..." if end < len(body) else ""
    return f"{prefix}{snippet}{suffix}"


__all__ = ["CONTEXT_ORDER", "detect_contexts", "excerpt", "locate_contexts"]
