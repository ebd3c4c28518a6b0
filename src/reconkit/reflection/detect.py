# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Reflection detection: which query values come back verbatim in the rendered page."""

from __future__ import annotations

from dataclasses import dataclass

from ..http.client import HttpClient
from ..http.heuristics import renders_html
from ..http.models import HttpRequest, HttpResponse
from ..http.url import query_params, set_query_param
from ..http.utils import send


@dataclass
class ReflectionCheck:
    """The page fetched for ``url`` and the parameters whose values it reflects."""

    url: str
    response: HttpResponse
    reflected: dict[str, str]

    @property
    def body(self) -> str:
        return self.response.text or ""


def reflected_params(url: str, response: HttpResponse) -> dict[str, str]:
    """
    Return ``{name: value}`` for query parameters of ``url`` reflected verbatim in ``response``.

    Redirects and non-HTML responses never count: the value was not rendered.
    """
    if response.is_redirect or not renders_html(response.headers):
        return {}
    body = response.text or ""
    out: dict[str, str] = {}
    for name, value in query_params(url):
        if name in out or not value:
            continue
        if value in body:
            out[name] = value
    return out


def check_reflected(client: HttpClient, url: str, *, headers: dict[str, str] | None = None) -> ReflectionCheck:
    response = send(client, HttpRequest(url=url, headers=headers))
    return ReflectionCheck(url=url, response=response, reflected=reflected_params(url, response))


def check_append(
    client: HttpClient,
    url: str,
    param: str,
    value: str,
    *,
    headers: dict[str, str] | None = None,
) -> tuple[bool, ReflectionCheck]:
    """
    Re-request ``url`` with ``param`` set to ``value`` and report whether that exact value reflects.
    """
    mutated_url = set_query_param(url, param, value)
    check = check_reflected(client, mutated_url, headers=headers)
    return check.reflected.get(param) == value, check


__all__ = ["ReflectionCheck", "check_append", "check_reflected", "reflected_params"]
