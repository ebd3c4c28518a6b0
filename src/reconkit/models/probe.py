# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe result model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..http.headers import header_value
from ..http.models import HttpResponse


def count_words(body: str) -> int:
    return len(body.split())


def count_nonempty_lines(body: str) -> int:
    return sum(1 for line in body.split("\n") if line.strip())


@dataclass
class ProbeResult:
    """Outcome of one HTTP exchange, measured the way the noise filters compare them."""

    url: str
    status_code: int
    length: int
    words: int
    lines: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    elapsed: float = 0.0

    @property
    def content_type(self) -> str:
        return header_value(self.headers, "content-type").lower()

    @property
    def location(self) -> str:
        return header_value(self.headers, "location")

    @classmethod
    def from_response(cls, response: HttpResponse, url: str | None = None) -> ProbeResult:
        body = response.text or ""
        length = len(response.content) if response.content else len(body.encode("utf-8"))
        return cls(
            url=url or response.url or "",
            status_code=int(response.status_code or 0),
            length=length,
            words=count_words(body),
            lines=count_nonempty_lines(body),
            headers=dict(response.headers),
            body=body,
            elapsed=response.elapsed,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "status_code": self.status_code,
            "length": self.length,
            "words": self.words,
            "lines": self.lines,
        }
