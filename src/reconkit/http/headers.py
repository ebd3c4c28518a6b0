# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header normalization utilities.

HTTP header field names are case-insensitive (RFC 9110). Responses are stored with plain
dict headers, so reads go through these helpers to avoid casing surprises between the
httpx client and stubbed fixtures.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def _coerce_headers_mapping(headers: Any) -> Mapping[object, object] | None:
    """
    Best-effort coercion of "dict-like" header containers into a Mapping.

    Accepts plain dicts, httpx.Headers and iterables of pairs.
    """
    if not headers:
        return None
    if isinstance(headers, Mapping):
        return headers

    items = getattr(headers, "items", None)
    if callable(items):
        try:
            return dict(items())
        except (TypeError, ValueError):
            pass

    try:
        return dict(headers)
    except (TypeError, ValueError):
        return None


def normalize_headers(headers: Any) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping."""
    coerced = _coerce_headers_mapping(headers)
    if not coerced:
        return {}
    out: dict[str, str] = {}
    for key, value in coerced.items():
        if key is None:
            continue
        name = str(key).strip().lower()
        if not name:
            continue
        out[name] = "" if value is None else str(value)
    return out


def header_value(headers: Any, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive key matching."""
    if not headers or not name:
        return default

    coerced = _coerce_headers_mapping(headers)
    if not coerced:
        return default

    lower = str(name).lower()
    for key in (name, lower, lower.title()):
        if key in coerced:
            value = coerced.get(key)
            return default if value is None else str(value).strip()

    for key, value in coerced.items():
        if key is None:
            continue
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


def parse_header_pairs(raw: str | None) -> dict[str, str]:
    """
    Parse ``Name:Value,Name2:Value2`` into a header dict.

    Pairs without a colon are ignored; only the first colon splits so values may contain ``:``.
    """
    out: dict[str, str] = {}
    for pair in str(raw or "").split(","):
        name, sep, value = pair.partition(":")
        if not sep or not name.strip():
            continue
        out[name.strip()] = value.strip()
    return out


__all__ = ["header_value", "normalize_headers", "parse_header_pairs"]
