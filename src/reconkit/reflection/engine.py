# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Reflection classifier.

URLs flow through three worker pools joined by bounded queues:

  reflect  fetch the URL and emit every query parameter whose value comes back verbatim
  append   re-request with ``<value><suffix>`` and locate where that marker lands
  inject   re-request once per special character with ``<value><char><suffix>``, then
           turn every detected context into a ReflectionFinding with a risk level

The suffix is random per classifier so markers never collide with page content.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterable
from dataclasses import replace

from ..concurrency import CancelToken, Deadline, Emit, Pipeline, Stage
from ..errors import ProbeError
from ..http.client import HttpClient
from ..models.reflection import ParameterAssessment, ReflectedParameter, ReflectionFinding, group_findings
from ..models.report import DiscoverySet
from .contexts import excerpt, locate_contexts
from .detect import check_append, check_reflected
from .risk import SPECIAL_CHARS, assess_risk

logger = logging.getLogger(__name__)


def random_suffix(length: int = 8) -> str:
    return secrets.token_hex((length + 1) // 2)[:length]


class ReflectionClassifier:
    def __init__(
        self,
        http_client: HttpClient,
        *,
        workers: int = 40,
        queue_size: int = 40,
        user_agent: str | None = None,
        batch_timeout: float | None = None,
        suffix: str | None = None,
        special_chars: Iterable[str] = SPECIAL_CHARS,
    ):
        self.http_client = http_client
        self.workers = workers
        self.queue_size = queue_size
        self.user_agent = user_agent
        self.batch_timeout = batch_timeout
        self.suffix = suffix or random_suffix()
        self.special_chars = tuple(special_chars)
        self.last_stats: dict[str, int] = {}

    @property
    def _headers(self) -> dict[str, str] | None:
        return {"User-Agent": self.user_agent} if self.user_agent else None

    def _reflect(self, url: str, emit: Emit) -> None:
        check = check_reflected(self.http_client, url, headers=self._headers)
        for name, value in check.reflected.items():
            logger.debug("Reflection of %r in %s", name, url)
            emit(ReflectedParameter(url=url, param=name, value=value))

    def _append(self, candidate: ReflectedParameter, emit: Emit) -> None:
        marker = candidate.value + self.suffix
        reflected, check = check_append(
            self.http_client, candidate.url, candidate.param, marker, headers=self._headers
        )
        if not reflected:
            logger.debug("Appended marker for %r not reflected in %s", candidate.param, candidate.url)
            return
        contexts = tuple(locate_contexts(check.body, marker))
        emit(replace(candidate, body=check.body, contexts=contexts))

    def unfiltered_chars(self, candidate: ReflectedParameter) -> tuple[str, ...]:
        """Special characters that survive verbatim between the original value and the suffix."""
        survived: list[str] = []
        for char in self.special_chars:
            mutated = f"{candidate.value}{char}{self.suffix}"
            try:
                reflected, _ = check_append(
                    self.http_client, candidate.url, candidate.param, mutated, headers=self._headers
                )
            except ProbeError as exc:
                logger.debug("Injection of %r into %r failed: %s", char, candidate.param, exc)
                continue
            if reflected:
                survived.append(char)
        return tuple(survived)

    def findings_for(self, candidate: ReflectedParameter) -> list[ReflectionFinding]:
        marker = candidate.value + self.suffix
        located = locate_contexts(candidate.body, marker)
        findings = []
        for context, position in located.items():
            risk, rationale = assess_risk(context, candidate.unfiltered)
            findings.append(
                ReflectionFinding(
                    url=candidate.url,
                    param=candidate.param,
                    context=context,
                    unfiltered=candidate.unfiltered,
                    risk=risk,
                    rationale=rationale,
                    evidence=excerpt(candidate.body, position, len(marker)),
                )
            )
        return findings

    def _inject(self, candidate: ReflectedParameter, emit: Emit) -> None:
        candidate = replace(candidate, unfiltered=self.unfiltered_chars(candidate))
        for finding in self.findings_for(candidate):
            emit(finding)

    def run(
        self,
        urls: Iterable[str],
        *,
        discovery: DiscoverySet | None = None,
        cancel_token: CancelToken | None = None,
    ) -> list[ReflectionFinding]:
        pipeline = Pipeline(
            [
                Stage("reflect", self._reflect, self.workers),
                Stage("append", self._append, self.workers),
                Stage("inject", self._inject, self.workers),
            ],
            queue_size=self.queue_size,
            deadline=Deadline(self.batch_timeout),
            cancel_token=cancel_token,
        )
        findings: list[ReflectionFinding] = pipeline.run(urls)
        self.last_stats = dict(pipeline.processed)

        if discovery is not None:
            for finding in findings:
                discovery.add_finding(finding)
        for assessment in group_findings(findings):
            logger.info(
                "Parameter %r on %s reflects unfiltered (highest risk %s)",
                assessment.param,
                assessment.url,
                assessment.highest_risk.value,
            )
        return findings

    def assess(self, url: str) -> list[ParameterAssessment]:
        """Classify a single URL and group the findings per parameter."""
        return group_findings(self.run([url]))


__all__ = ["ReflectionClassifier", "random_suffix"]
