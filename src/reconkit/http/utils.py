# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared HTTP helpers for probes."""

from __future__ import annotations

from ..errors import ErrorCategory, ProbeError, categorize_exception
from .client import HttpClient
from .models import HttpRequest, HttpResponse


def send(client: HttpClient, request: HttpRequest) -> HttpResponse:
    """
    Issue ``request`` once and return a response that carries a status code.

    Transport failures (client errors or ``ok=False`` without a status) become ProbeError so the
    executor can record them as per-item failures.
    """
    try:
        response = client.request(request)
    except Exception as exc:  # noqa: BLE001
        raise ProbeError(str(exc), category=categorize_exception(exc), url=request.url) from exc

    if not response.ok and response.status_code is None:
        raw_category = response.meta.get("error_category")
        try:
            category = ErrorCategory(raw_category) if raw_category else ErrorCategory.UNKNOWN_ERROR
        except ValueError:
            category = ErrorCategory.UNKNOWN_ERROR
        raise ProbeError(
            response.error_message or "request failed",
            category=category,
            url=request.url,
        )
    if response.url is None:
        response.url = request.url
    return response


def fetch(
    client: HttpClient,
    url: str,
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    body: str | bytes | None = None,
) -> HttpResponse:
    """Convenience wrapper around :func:`send` for simple requests."""
    return send(client, HttpRequest(url=url, method=method, headers=headers, body=body))


__all__ = ["fetch", "send"]
