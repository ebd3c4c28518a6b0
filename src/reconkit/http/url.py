# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared across probes."""

from __future__ import annotations

from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from ..errors import InvalidTargetError


def validate_target(url: str) -> str:
    """
    Return the trimmed target URL, or raise InvalidTargetError.

    Targets must be absolute http(s) URLs with a host.
    """
    raw = str(url or "").strip()
    if not raw.startswith(("http://", "https://")):
        raise InvalidTargetError(raw)
    try:
        parts = urlsplit(raw)
    except ValueError as exc:
        raise InvalidTargetError(raw, str(exc)) from exc
    if not parts.netloc:
        raise InvalidTargetError(raw, "missing host")
    return raw


def join_path(base_url: str, segment: str) -> str:
    """
    Append a wordlist segment to the path of ``base_url``.

    Example:
      http://host/app/ + admin.php -> http://host/app/admin.php

    Query and fragment of the base are dropped; raises ValueError for unparseable bases.
    """
    parts = urlsplit(str(base_url))
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"not an absolute URL: {base_url!r}")
    escaped = quote(segment.lstrip("/"), safe="/~@!$&'()*+,;=:")
    path = f"{parts.path.rstrip('/')}/{escaped}"
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def query_params(url: str) -> list[tuple[str, str]]:
    """Return the query string of ``url`` as ordered (name, value) pairs, keeping blanks."""
    return parse_qsl(urlsplit(str(url)).query, keep_blank_values=True)


def set_query_param(url: str, name: str, value: str) -> str:
    """
    Return ``url`` with ``name`` set to ``value``.

    An existing parameter is replaced in place (first occurrence, later duplicates dropped);
    otherwise the pair is appended.
    """
    parts = urlsplit(str(url))
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    out: list[tuple[str, str]] = []
    replaced = False
    for key, current in pairs:
        if key == name:
            if not replaced:
                out.append((key, value))
                replaced = True
            continue
        out.append((key, current))
    if not replaced:
        out.append((name, value))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(out), parts.fragment))


def add_query_params(url: str, params: dict[str, str]) -> str:
    """Append ``params`` to the existing query string of ``url``."""
    if not params:
        return str(url)
    parts = urlsplit(str(url))
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    pairs.extend(params.items())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(pairs), parts.fragment))


__all__ = ["add_query_params", "join_path", "query_params", "set_query_param", "validate_target"]
