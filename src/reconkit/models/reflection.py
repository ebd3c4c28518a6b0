# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Reflection classification models."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ReflectionContext(str, Enum):
    HTML_BODY = "HTML_BODY"
    HTML_ATTRIBUTE = "HTML_ATTRIBUTE"
    SCRIPT = "SCRIPT"
    URL = "URL"
    CSS = "CSS"
    HTML_COMMENT = "HTML_COMMENT"
    UNKNOWN = "UNKNOWN"


class RiskLevel(str, Enum):
    INFO = "INFO"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)


_RISK_ORDER = [RiskLevel.INFO, RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]


@dataclass
class ReflectedParameter:
    """A query parameter whose value was found verbatim in the rendered page."""

    url: str
    param: str
    value: str
    body: str = ""
    contexts: tuple[ReflectionContext, ...] = ()
    unfiltered: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReflectionFinding:
    url: str
    param: str
    context: ReflectionContext
    unfiltered: tuple[str, ...]
    risk: RiskLevel
    rationale: str
    evidence: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "param": self.param,
            "context": self.context.value,
            "unfiltered": list(self.unfiltered),
            "risk": self.risk.value,
            "rationale": self.rationale,
            "evidence": self.evidence,
        }


@dataclass
class ParameterAssessment:
    """All findings for one reflected parameter."""

    url: str
    param: str
    findings: list[ReflectionFinding] = field(default_factory=list)

    @property
    def vulnerable(self) -> bool:
        return bool(self.findings)

    @property
    def highest_risk(self) -> RiskLevel:
        if not self.findings:
            return RiskLevel.INFO
        return max((finding.risk for finding in self.findings), key=lambda risk: risk.rank)


def group_findings(findings: Iterable[ReflectionFinding]) -> list[ParameterAssessment]:
    """Group findings per (url, param), keeping first-seen order."""
    grouped: dict[tuple[str, str], ParameterAssessment] = {}
    for finding in findings:
        key = (finding.url, finding.param)
        if key not in grouped:
            grouped[key] = ParameterAssessment(url=finding.url, param=finding.param)
        grouped[key].findings.append(finding)
    return list(grouped.values())
