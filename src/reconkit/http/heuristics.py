# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Heuristics for interpreting HTTP responses."""

from __future__ import annotations

from typing import Any

from .headers import header_value

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")
DIRECTORY_MARKERS = ("<html", "index of")


def is_html_content_type(content_type: str | None) -> bool:
    lowered = str(content_type or "").lower()
    return any(marker in lowered for marker in HTML_CONTENT_TYPES)


def renders_html(headers: Any) -> bool:
    """
    True unless the response declares a non-HTML content type.

    A missing content type is given the benefit of the doubt, since browsers sniff it.
    """
    content_type = header_value(headers, "content-type")
    return not content_type or "html" in content_type.lower()


def has_directory_signals(body: str | None) -> bool:
    """Directory index pages and generic HTML pages are worth descending into."""
    text = str(body or "").lower()
    return any(marker in text for marker in DIRECTORY_MARKERS)


__all__ = [
    "DIRECTORY_MARKERS",
    "HTML_CONTENT_TYPES",
    "has_directory_signals",
    "is_html_content_type",
    "renders_html",
]
