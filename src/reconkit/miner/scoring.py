# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Multi-factor scoring of response differences."""

from __future__ import annotations

from ..config import MinerSettings
from ..models.miner import ResponseFactors


def score_factors(factors: ResponseFactors, settings: MinerSettings | None = None) -> tuple[int, list[str]]:
    """
    Score how strongly the mutated response suggests the parameter is consumed.

    One point each for: the sentinel vanishing, the parameter name vanishing, a response time
    shift beyond ``response_time_ratio`` x baseline time, and a body size shift beyond
    ``content_length_threshold`` bytes.
    """
    cfg = settings or MinerSettings()
    score = 0
    reasons: list[str] = []

    if factors.value_missing:
        score += 1
        reasons.append("value_missing")
    if factors.param_missing:
        score += 1
        reasons.append("param_missing")
    if abs(factors.response_time_diff) > cfg.response_time_ratio * factors.baseline_time:
        score += 1
        reasons.append("response_time")
    if abs(factors.content_length_diff) > cfg.content_length_threshold:
        score += 1
        reasons.append("content_length")
    return score, reasons


def is_accepted(score: int, settings: MinerSettings | None = None) -> bool:
    cfg = settings or MinerSettings()
    return score >= cfg.score_threshold


__all__ = ["is_accepted", "score_factors"]
