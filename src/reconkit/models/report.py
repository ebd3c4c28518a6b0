# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-target result accumulation and report models."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..utils.ordered_set import OrderedSet
from .probe import ProbeResult
from .reflection import ParameterAssessment, ReflectionFinding, group_findings


class DiscoverySet:
    """
    Deduplicated valid paths, parameters, reflected URLs and findings for one target.

    Workers write under a single lock; readers call the ``*_list`` accessors once the batch
    has finished.
    """

    def __init__(self, target: str):
        self.target = target
        self._lock = threading.Lock()
        self._paths: OrderedSet[str] = OrderedSet()
        self._path_results: dict[str, ProbeResult] = {}
        self._params: OrderedSet[str] = OrderedSet()
        self._findings: OrderedSet[ReflectionFinding] = OrderedSet()
        self._reflected: OrderedSet[str] = OrderedSet()

    def add_path(self, result: ProbeResult) -> bool:
        with self._lock:
            added = self._paths.add(result.url)
            if added:
                self._path_results[result.url] = result
            return added

    def add_param(self, name: str) -> bool:
        with self._lock:
            return self._params.add(name)

    def add_finding(self, finding: ReflectionFinding) -> bool:
        with self._lock:
            return self._findings.add(finding)

    def add_reflected(self, url: str) -> bool:
        with self._lock:
            return self._reflected.add(url)

    def path_list(self) -> list[str]:
        with self._lock:
            return self._paths.to_list()

    def path_results(self) -> list[ProbeResult]:
        with self._lock:
            return [self._path_results[url] for url in self._paths]

    def param_list(self) -> list[str]:
        with self._lock:
            return self._params.to_list()

    def finding_list(self) -> list[ReflectionFinding]:
        with self._lock:
            return self._findings.to_list()

    def reflected_list(self) -> list[str]:
        with self._lock:
            return self._reflected.to_list()


@dataclass
class ScanReport:
    """What a run hands to the result sink: ordered string lists plus structured findings."""

    target: str
    valid_paths: list[str] = field(default_factory=list)
    valid_params: list[str] = field(default_factory=list)
    reflected_urls: list[str] = field(default_factory=list)
    findings: list[ReflectionFinding] = field(default_factory=list)
    path_details: list[ProbeResult] = field(default_factory=list)
    stats: dict[str, dict[str, int]] = field(default_factory=dict)

    @classmethod
    def from_discovery(cls, discovery: DiscoverySet, *, stats: dict[str, dict[str, int]] | None = None) -> ScanReport:
        return cls(
            target=discovery.target,
            valid_paths=discovery.path_list(),
            valid_params=discovery.param_list(),
            reflected_urls=discovery.reflected_list(),
            findings=discovery.finding_list(),
            path_details=discovery.path_results(),
            stats=dict(stats or {}),
        )

    @property
    def vulnerable_params(self) -> list[ParameterAssessment]:
        return [assessment for assessment in group_findings(self.findings) if assessment.vulnerable]

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "valid_paths": list(self.valid_paths),
            "valid_params": list(self.valid_params),
            "reflected_urls": list(self.reflected_urls),
            "path_details": [result.to_dict() for result in self.path_details],
            "findings": [finding.to_dict() for finding in self.findings],
            "vulnerable_params": [
                {"url": item.url, "param": item.param, "highest_risk": item.highest_risk.value}
                for item in self.vulnerable_params
            ],
            "stats": {name: dict(values) for name, values in self.stats.items()},
        }
