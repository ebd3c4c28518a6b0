# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
ReconKit package entrypoint.

This package provides directory discovery, differential parameter mining and
reflection-context classification for web application reconnaissance. HTTP
behavior is abstracted behind an injectable client interface, and every engine
shares the same bounded-concurrency primitives and run-scoped result sets.
"""

from .concurrency import BoundedExecutor, CancelToken, Deadline, Pipeline, Stage
from .config import HttpSettings, MinerSettings, ScanSettings, load_http_settings, load_scan_settings
from .discovery import BlacklistCriteria, DirectoryDiscoveryEngine, DiscoveryOptions
from .errors import ConfigurationError, InvalidTargetError, ProbeError, ReconError, UnsupportedMethodError
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    StubHttpClient,
    create_default_http_client,
)
from .log import setup_logging
from .miner import ParameterMiner, RequestShape
from .models import (
    DiscoverySet,
    ParameterAssessment,
    ProbeResult,
    ReflectionContext,
    ReflectionFinding,
    RiskLevel,
    ScanReport,
)
from .reflection import ReflectedParamFinder, ReflectionClassifier
from .runtime import ReconKit
from .version import __version__

__all__ = [
    "BlacklistCriteria",
    "BoundedExecutor",
    "CancelToken",
    "ConfigurationError",
    "Deadline",
    "DirectoryDiscoveryEngine",
    "DiscoveryOptions",
    "DiscoverySet",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "InvalidTargetError",
    "MinerSettings",
    "ParameterAssessment",
    "ParameterMiner",
    "Pipeline",
    "ProbeError",
    "ProbeResult",
    "ReconError",
    "ReconKit",
    "ReflectedParamFinder",
    "ReflectionClassifier",
    "ReflectionContext",
    "ReflectionFinding",
    "RequestShape",
    "RiskLevel",
    "ScanReport",
    "ScanSettings",
    "Stage",
    "StubHttpClient",
    "UnsupportedMethodError",
    "create_default_http_client",
    "load_http_settings",
    "load_scan_settings",
    "setup_logging",
    "__version__",
]
