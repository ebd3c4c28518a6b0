# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across ReconKit."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .headers import header_value, normalize_headers

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    body: bytes | str | None = None


@dataclass
class HttpResponse:
    """Normalized HTTP response with the metadata the engines compare on."""

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    content: bytes = b""
    url: str | None = None
    elapsed: float = 0.0
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return header_value(self.headers, "content-type").lower()

    @property
    def location(self) -> str:
        return header_value(self.headers, "location")

    @property
    def is_redirect(self) -> bool:
        return self.status_code is not None and 300 <= self.status_code < 400

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> HttpResponse:
        """Helper to normalize dictionary-like responses (fixtures, recorded exchanges)."""
        headers = normalize_headers(data.get("headers"))

        raw_body = data.get("body")
        content: bytes = b""
        text: str = ""
        if isinstance(raw_body, (bytes, bytearray, memoryview)):
            content = bytes(raw_body)
            text = content.decode("utf-8", errors="replace")
        elif isinstance(raw_body, str):
            text = raw_body
            content = raw_body.encode("utf-8")

        ok = data.get("ok")
        if ok is None:
            ok = data.get("status_code") is not None

        return cls(
            ok=bool(ok),
            status_code=data.get("status_code"),
            headers=headers,
            text=text,
            content=content,
            url=data.get("url"),
            elapsed=float(data.get("elapsed") or 0.0),
            error_message=data.get("error_message"),
            error_type=data.get("error_type"),
            meta={
                k: v
                for k, v in data.items()
                if k not in {"ok", "status_code", "headers", "body", "url", "elapsed", "error_message", "error_type"}
            },
        )
