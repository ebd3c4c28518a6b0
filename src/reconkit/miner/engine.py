# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Differential parameter miner.

For every candidate name the miner sends the configured request twice, once as-is and once
with ``name=<sentinel>`` added, then scores how the second response differs. The baseline is
re-issued per candidate rather than cached so each pair is timed under the same conditions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..concurrency import BatchStats, BoundedExecutor, CancelToken, Deadline
from ..config import MinerSettings
from ..errors import ProbeError
from ..http.client import HttpClient
from ..http.utils import send
from ..models.miner import ParameterVerdict
from ..models.report import DiscoverySet
from ..utils.wordlist import clean_entries, merge_unique
from .extractor import extract_potential_params
from .factors import compare_responses
from .scoring import is_accepted, score_factors
from .shaping import RequestShape

logger = logging.getLogger(__name__)


class ParameterMiner:
    def __init__(
        self,
        http_client: HttpClient,
        shape: RequestShape | None = None,
        *,
        settings: MinerSettings | None = None,
        concurrency: int = 5,
        batch_timeout: float | None = None,
    ):
        self.http_client = http_client
        self.shape = shape or RequestShape()
        self.settings = settings or MinerSettings()
        self.concurrency = concurrency
        self.batch_timeout = batch_timeout
        self.last_stats = BatchStats()
        self.last_verdicts: list[ParameterVerdict] = []

    def analyze(self, target_url: str, param: str) -> ParameterVerdict:
        """Score a single candidate. Raises ProbeError when either request fails."""
        sentinel = self.settings.sentinel
        baseline = send(self.http_client, self.shape.build(target_url))
        mutated = send(self.http_client, self.shape.build(target_url, {param: sentinel}))

        factors = compare_responses(baseline, mutated, param, sentinel)
        score, reasons = score_factors(factors, self.settings)
        return ParameterVerdict(
            param=param,
            score=score,
            accepted=is_accepted(score, self.settings),
            reasons=reasons,
            factors=factors,
        )

    def seed_from_baseline(self, target_url: str, wordlist: list[str]) -> list[str]:
        """Put names harvested from one baseline response at the front of the wordlist."""
        try:
            response = send(self.http_client, self.shape.build(target_url))
        except ProbeError as exc:
            logger.debug("Baseline extraction request failed for %s: %s", target_url, exc)
            return wordlist
        extracted, words_exist = extract_potential_params(response.text, response.headers)
        if not words_exist:
            return wordlist
        logger.info("Discovered %d candidate parameters from baseline response of %s", len(extracted), target_url)
        return merge_unique(extracted, wordlist)

    def run(
        self,
        target_url: str,
        wordlist: Iterable[str],
        *,
        discovery: DiscoverySet | None = None,
        cancel_token: CancelToken | None = None,
    ) -> DiscoverySet:
        # Configuration problems surface before anything is dispatched.
        self.shape.validate()
        self.shape.build(target_url)

        discovery = discovery or DiscoverySet(target_url)
        candidates = clean_entries(wordlist)
        if self.settings.extract_from_baseline:
            candidates = self.seed_from_baseline(target_url, candidates)
        if not candidates:
            logger.info("Empty parameter wordlist; nothing to mine on %s", target_url)
            self.last_verdicts = []
            return discovery

        executor: BoundedExecutor[str, ParameterVerdict] = BoundedExecutor(
            self.concurrency,
            deadline=Deadline(self.batch_timeout),
            cancel_token=cancel_token,
            name="miner",
        )

        def probe(param: str) -> ParameterVerdict:
            verdict = self.analyze(target_url, param)
            if verdict.accepted:
                logger.debug("Parameter %r flagged (score %d: %s)", param, verdict.score, ", ".join(verdict.reasons))
                discovery.add_param(param)
            return verdict

        logger.info("Mining %d candidate parameters on %s (%s)", len(candidates), target_url, self.shape.method)
        self.last_verdicts = executor.run(candidates, probe)
        self.last_stats = executor.stats
        logger.info("Discovered %d parameters on %s", len(discovery.param_list()), target_url)
        return discovery

    def accepted(self, threshold: int | None = None) -> list[str]:
        """Names from the last run whose score meets ``threshold`` (defaults to the configured one)."""
        limit = self.settings.score_threshold if threshold is None else threshold
        return sorted({verdict.param for verdict in self.last_verdicts if verdict.score >= limit})


__all__ = ["ParameterMiner"]
