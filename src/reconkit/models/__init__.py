# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for ReconKit."""

from ..http.models import Headers, HttpRequest, HttpResponse
from .miner import ParameterVerdict, ResponseFactors
from .probe import ProbeResult
from .reflection import (
    ParameterAssessment,
    ReflectedParameter,
    ReflectionContext,
    ReflectionFinding,
    RiskLevel,
    group_findings,
)
from .report import DiscoverySet, ScanReport

__all__ = [
    "DiscoverySet",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "ParameterAssessment",
    "ParameterVerdict",
    "ProbeResult",
    "ReflectedParameter",
    "ReflectionContext",
    "ReflectionFinding",
    "ResponseFactors",
    "RiskLevel",
    "ScanReport",
    "group_findings",
]
