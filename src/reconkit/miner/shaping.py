# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request shaping for parameter mining (GET / POST / JSON / XML)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from urllib.parse import urlencode
from xml.sax.saxutils import escape as xml_escape

from ..errors import ConfigurationError, UnsupportedMethodError
from ..http.models import HttpRequest
from ..http.url import add_query_params

SUPPORTED_METHODS = ("GET", "POST", "JSON", "XML")
XML_DATA_FIELD = "xml"


def normalize_method(method: str | None) -> str:
    normalized = str(method or "GET").strip().upper()
    if normalized not in SUPPORTED_METHODS:
        raise UnsupportedMethodError(str(method))
    return normalized


def parse_data_pairs(raw: str | None) -> dict[str, str]:
    """
    Parse ``key1:value1,key2:value2`` into body fields.

    Only the first colon splits a pair, so values such as URLs survive.
    """
    out: dict[str, str] = {}
    for pair in str(raw or "").split(","):
        key, sep, value = pair.partition(":")
        if not sep or not key.strip():
            continue
        out[key.strip()] = value.strip()
    return out


def _inject_xml_element(document: str, name: str, value: str) -> str:
    """Insert ``<name>value</name>`` just inside the closing tag of the root element."""
    element = f"<{name}>{xml_escape(value)}</{name}>"
    closing = document.rstrip().rfind("</")
    if closing == -1:
        return document + element
    return document[:closing] + element + document[closing:]


@dataclass
class RequestShape:
    """How the configured request is sent; the miner adds one extra field on top of it."""

    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    data: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = normalize_method(self.method)

    def validate(self) -> None:
        if self.method == "XML" and XML_DATA_FIELD not in self.data:
            raise ConfigurationError(f"XML requests need the raw payload in the {XML_DATA_FIELD!r} data field")

    def build(self, url: str, extra: dict[str, str] | None = None) -> HttpRequest:
        """Build the request for ``url`` with ``extra`` fields merged over the configured data."""
        headers = dict(self.headers)
        extra = dict(extra or {})

        if self.method == "GET":
            fields = {**self.data, **extra}
            return HttpRequest(url=add_query_params(url, fields), method="GET", headers=headers)

        if self.method == "POST":
            fields = {**self.data, **extra}
            headers.setdefault("Content-Type", "application/x-www-form-urlencoded")
            return HttpRequest(url=url, method="POST", headers=headers, body=urlencode(fields))

        if self.method == "JSON":
            fields = {**self.data, **extra}
            headers.setdefault("Content-Type", "application/json")
            return HttpRequest(url=url, method="POST", headers=headers, body=json.dumps(fields))

        self.validate()
        document = self.data[XML_DATA_FIELD]
        for name, value in extra.items():
            document = _inject_xml_element(document, name, value)
        headers.setdefault("Content-Type", "application/xml")
        return HttpRequest(url=url, method="POST", headers=headers, body=document)


__all__ = ["RequestShape", "SUPPORTED_METHODS", "XML_DATA_FIELD", "normalize_method", "parse_data_pairs"]
