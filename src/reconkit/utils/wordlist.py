# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wordlist and target-list loading."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from ..errors import ConfigurationError
from .ordered_set import OrderedSet


def clean_entries(lines: Iterable[str]) -> list[str]:
    """Trim entries and drop blanks. Duplicates are kept; callers decide whether they matter."""
    return [stripped for stripped in (str(line).strip() for line in lines) if stripped]


def read_lines(path: str | Path) -> list[str]:
    """Read a newline-delimited list (wordlist or targets) into trimmed, non-empty entries."""
    file_path = Path(path)
    try:
        with file_path.open(encoding="utf-8", errors="replace") as handle:
            return clean_entries(handle)
    except OSError as exc:
        raise ConfigurationError(f"Failed to read {file_path}: {exc}") from exc


def merge_unique(*lists: Iterable[str]) -> list[str]:
    """Concatenate lists keeping the first occurrence of each entry."""
    merged: OrderedSet[str] = OrderedSet()
    for items in lists:
        merged.add_many(*items)
    return merged.to_list()


__all__ = ["clean_entries", "merge_unique", "read_lines"]
