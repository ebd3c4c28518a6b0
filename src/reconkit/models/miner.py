# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Differential parameter mining models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ResponseFactors:
    """
    Differences between a baseline response and the response with a candidate parameter set.

    ``same_code``, ``same_body``, ``same_plaintext`` and ``same_redirect`` hold the shared value
    when both responses agree and None otherwise.
    """

    same_code: int | None = None
    same_body: str | None = None
    same_plaintext: str | None = None
    header_changes: dict[str, str] = field(default_factory=dict)
    same_redirect: str | None = None
    param_missing: bool = False
    value_missing: bool = False
    baseline_time: float = 0.0
    response_time_diff: float = 0.0
    content_length_diff: int = 0
    javascript_vars: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "same_code": self.same_code,
            "same_body": self.same_body is not None,
            "same_plaintext": self.same_plaintext is not None,
            "header_changes": dict(self.header_changes),
            "same_redirect": self.same_redirect,
            "param_missing": self.param_missing,
            "value_missing": self.value_missing,
            "response_time_diff": round(self.response_time_diff, 4),
            "content_length_diff": self.content_length_diff,
            "javascript_vars": list(self.javascript_vars),
        }


@dataclass
class ParameterVerdict:
    param: str
    score: int
    accepted: bool
    reasons: list[str] = field(default_factory=list)
    factors: ResponseFactors | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "param": self.param,
            "score": self.score,
            "accepted": self.accepted,
            "reasons": list(self.reasons),
            "factors": self.factors.to_dict() if self.factors else None,
        }
