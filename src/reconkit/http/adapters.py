# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Test doubles implementing the HttpClient protocol."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Any

from .client import HttpClient
from .models import HttpRequest, HttpResponse

Handler = Callable[[HttpRequest], HttpResponse]


class StubHttpClient(HttpClient):
    """
    Deterministic, programmable HttpClient for tests.

    Responses are looked up by exact URL first; otherwise the optional ``handler`` decides.
    Requests are recorded under a lock since engines call in from worker threads.
    """

    def __init__(
        self,
        responses: Mapping[str, HttpResponse | Mapping[str, Any]] | None = None,
        *,
        handler: Handler | None = None,
    ):
        self._responses: dict[str, HttpResponse] = {}
        for url, response in (responses or {}).items():
            self.add(url, response)
        self._handler = handler
        self._lock = threading.Lock()
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: HttpResponse | Mapping[str, Any]) -> None:
        if not isinstance(response, HttpResponse):
            response = HttpResponse.from_mapping(response)
        self._responses[url] = response

    def request(self, request: HttpRequest) -> HttpResponse:
        with self._lock:
            self.requests.append(request)
        if request.url in self._responses:
            return self._responses[request.url]
        if self._handler is not None:
            return self._handler(request)
        return HttpResponse(ok=False, status_code=None, url=request.url, error_message="No stubbed response configured")

    def requested_urls(self) -> list[str]:
        with self._lock:
            return [req.url for req in self.requests]

    def close(self) -> None:
        self.closed = True
