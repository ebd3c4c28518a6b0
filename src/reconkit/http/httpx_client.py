# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import time

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import categorize_exception
from .client import HttpClient
from .headers import normalize_headers
from .models import HttpRequest, HttpResponse


class HttpxClient(HttpClient):
    """
    Synchronous httpx client wrapper.

    One instance is shared by every worker thread of a run; ``httpx.Client`` pools connections
    and is thread-safe. Redirects are not followed unless ``RECONKIT_HTTP_REDIRECTS`` enables them, so 3xx responses
    and their ``Location`` header stay observable.
    """

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)

        max_body_bytes = self.settings.max_body_bytes
        if max_body_bytes <= 0:
            max_body_bytes = 16 * 1024 * 1024

        started = time.perf_counter()
        try:
            with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                content=request.body,
            ) as resp:
                content = bytearray()
                truncated = False
                for chunk in resp.iter_bytes():
                    if not chunk:
                        continue
                    remaining = max_body_bytes - len(content)
                    if remaining <= 0:
                        truncated = True
                        break
                    if len(chunk) > remaining:
                        content.extend(chunk[:remaining])
                        truncated = True
                        break
                    content.extend(chunk)

                encoding = resp.encoding or "utf-8"
                try:
                    text = bytes(content).decode(encoding, errors="replace")
                except LookupError:
                    text = bytes(content).decode("utf-8", errors="replace")

            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                headers=normalize_headers(resp.headers),
                text=text,
                content=bytes(content),
                url=str(resp.url),
                elapsed=time.perf_counter() - started,
                meta={
                    "body_truncated": truncated,
                    "body_bytes_read": len(content),
                    "body_bytes_limit": max_body_bytes,
                },
            )
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                url=request.url,
                elapsed=time.perf_counter() - started,
                error_message=str(exc),
                error_type=type(exc).__name__,
                meta={"error_category": categorize_exception(exc).value},
            )

    def close(self) -> None:
        self._client.close()
