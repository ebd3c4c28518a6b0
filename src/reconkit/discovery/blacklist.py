# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Noise filtering for discovered paths.

Each category is an independent filter: a response matching any rule in any category is
rejected (soft-404 pages, WAF block pages, catch-all routes and so on).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..models.probe import ProbeResult

logger = logging.getLogger(__name__)


def parse_int_list(raw: str | None) -> list[int]:
    """Parse ``"404, 500"`` into ints, skipping blanks and non-integers."""
    out: list[int] = []
    for part in str(raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            out.append(int(part))
        except ValueError:
            logger.warning("Ignoring non-integer blacklist value %r", part)
    return out


def parse_str_list(raw: str | None) -> list[str]:
    """Parse ``"error, not found"`` into stripped, non-empty strings."""
    return [part.strip() for part in str(raw or "").split(",") if part.strip()]


def compile_patterns(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    """Compile blacklist regexes; invalid ones are skipped with a warning."""
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        if not pattern:
            continue
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            logger.warning("Invalid blacklist regex %r: %s", pattern, exc)
    return tuple(compiled)


@dataclass(frozen=True)
class BlacklistCriteria:
    status_codes: frozenset[int] = field(default_factory=frozenset)
    lengths: frozenset[int] = field(default_factory=frozenset)
    word_counts: frozenset[int] = field(default_factory=frozenset)
    line_counts: frozenset[int] = field(default_factory=frozenset)
    search_words: tuple[str, ...] = ()
    patterns: tuple[re.Pattern[str], ...] = ()

    @classmethod
    def build(
        cls,
        *,
        status_codes: Iterable[int] = (),
        lengths: Iterable[int] = (),
        word_counts: Iterable[int] = (),
        line_counts: Iterable[int] = (),
        search_words: Iterable[str] = (),
        regexes: Iterable[str] = (),
    ) -> BlacklistCriteria:
        return cls(
            status_codes=frozenset(status_codes),
            lengths=frozenset(lengths),
            word_counts=frozenset(word_counts),
            line_counts=frozenset(line_counts),
            search_words=tuple(word.strip().lower() for word in search_words if word.strip()),
            patterns=compile_patterns(regexes),
        )

    @classmethod
    def from_strings(
        cls,
        *,
        status_codes: str | None = None,
        lengths: str | None = None,
        word_counts: str | None = None,
        line_counts: str | None = None,
        search_words: str | None = None,
        regexes: str | None = None,
    ) -> BlacklistCriteria:
        """Build criteria from the comma-separated configuration surface."""
        return cls.build(
            status_codes=parse_int_list(status_codes),
            lengths=parse_int_list(lengths),
            word_counts=parse_int_list(word_counts),
            line_counts=parse_int_list(line_counts),
            search_words=parse_str_list(search_words),
            regexes=parse_str_list(regexes),
        )

    def rejection_reason(self, result: ProbeResult) -> str | None:
        """Return the first matching rule as a short reason, or None when the result passes."""
        if result.status_code in self.status_codes:
            return f"status {result.status_code}"
        if result.length in self.lengths:
            return f"length {result.length}"
        if result.words in self.word_counts:
            return f"words {result.words}"
        if result.lines in self.line_counts:
            return f"lines {result.lines}"
        if self.search_words:
            lowered = result.body.lower()
            for word in self.search_words:
                if word in lowered:
                    return f"search word {word!r}"
        for pattern in self.patterns:
            if pattern.search(result.body):
                return f"regex {pattern.pattern!r}"
        return None

    def passes(self, result: ProbeResult) -> bool:
        return self.rejection_reason(result) is None


__all__ = ["BlacklistCriteria", "compile_patterns", "parse_int_list", "parse_str_list"]
