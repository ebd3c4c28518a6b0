# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import StubHttpClient
from .client import HttpClient, create_default_http_client
from .headers import header_value, normalize_headers, parse_header_pairs
from .httpx_client import HttpxClient
from .models import Headers, HttpRequest, HttpResponse
from .url import add_query_params, join_path, query_params, set_query_param, validate_target
from .utils import fetch, send

__all__ = [
    "Headers",
    "HttpClient",
    "HttpxClient",
    "HttpRequest",
    "HttpResponse",
    "StubHttpClient",
    "add_query_params",
    "create_default_http_client",
    "fetch",
    "header_value",
    "join_path",
    "normalize_headers",
    "parse_header_pairs",
    "query_params",
    "send",
    "set_query_param",
    "validate_target",
]
