# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    WAF_SUSPECTED = "WAF_SUSPECTED"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class ReconError(Exception):
    """Base class for ReconKit errors."""


class ConfigurationError(ReconError):
    """Fatal run configuration problem (bad target, missing input, unsupported method)."""


class InvalidTargetError(ConfigurationError):
    def __init__(self, target: str, reason: str = "URL must start with http:// or https://"):
        self.target = target
        self.reason = reason
        super().__init__(f"Invalid target {target!r}: {reason}")


class UnsupportedMethodError(ConfigurationError):
    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Unsupported HTTP method: {method}")


class ProbeError(ReconError):
    """A single probe failed; the batch it belongs to carries on."""

    def __init__(self, message: str, *, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR, url: str | None = None):
        self.category = category
        self.url = url
        super().__init__(message)


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, ProbeError):
        return exc.category

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        cause = exc.__cause__ or exc.__context__
        if isinstance(cause, (ssl_module.SSLError, ssl_module.CertificateError)):
            return ErrorCategory.SSL_ERROR
        if isinstance(cause, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    if getattr(exc, "response", None) is not None:
        status = getattr(exc.response, "status_code", None)
        if status in (403, 429):
            return ErrorCategory.WAF_SUSPECTED

    return ErrorCategory.UNKNOWN_ERROR


__all__ = [
    "ConfigurationError",
    "ErrorCategory",
    "InvalidTargetError",
    "ProbeError",
    "ReconError",
    "UnsupportedMethodError",
    "categorize_exception",
]
