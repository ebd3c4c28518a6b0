# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wordlist expansion into path candidates."""

from __future__ import annotations

from collections.abc import Iterable


def normalize_extensions(extensions: Iterable[str] | None) -> list[str]:
    """``["php", ".bak", ""]`` -> ``[".php", ".bak"]``."""
    out: list[str] = []
    for ext in extensions or ():
        ext = str(ext).strip()
        if not ext:
            continue
        out.append(ext if ext.startswith(".") else f".{ext}")
    return out


def expand_wordlist(words: Iterable[str], extensions: Iterable[str] | None = None) -> list[str]:
    """
    Expand each entry into the bare segment plus one segment per extension.

    Entries are trimmed and stripped of leading slashes; blanks are dropped. Duplicates are kept
    so the candidate count is always ``words x (1 + extensions)``.
    """
    exts = normalize_extensions(extensions)
    segments: list[str] = []
    for word in words:
        word = str(word).strip().lstrip("/")
        if not word:
            continue
        segments.append(word)
        segments.extend(f"{word}{ext}" for ext in exts)
    return segments


def looks_like_file(url: str, extensions: Iterable[str]) -> bool:
    """True when ``url`` ends in one of the configured extensions, i.e. a leaf rather than a directory."""
    return any(url.endswith(ext) for ext in normalize_extensions(extensions))


__all__ = ["expand_wordlist", "looks_like_file", "normalize_extensions"]
