# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Symbol-based reflected parameter discovery.

Each wordlist name is sent as ``name=<symbol>`` on the target URL; a name whose response body
contains the symbol is reflected. The resulting URLs already carry a controlled value, so they
can be handed straight to the ReflectionClassifier.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..concurrency import BatchStats, BoundedExecutor, CancelToken, Deadline
from ..config import DEFAULT_REFLECTION_SYMBOL
from ..errors import ConfigurationError, ProbeError
from ..http.client import HttpClient
from ..http.url import set_query_param
from ..http.utils import fetch
from ..models.report import DiscoverySet
from ..utils.wordlist import clean_entries

logger = logging.getLogger(__name__)


class ReflectedParamFinder:
    def __init__(
        self,
        http_client: HttpClient,
        *,
        symbol: str = DEFAULT_REFLECTION_SYMBOL,
        concurrency: int = 5,
        batch_timeout: float | None = None,
    ):
        if not symbol:
            raise ConfigurationError("reflection symbol must not be empty")
        self.http_client = http_client
        self.symbol = symbol
        self.concurrency = concurrency
        self.batch_timeout = batch_timeout
        self.last_stats = BatchStats()

    def check(self, target_url: str, param: str) -> str | None:
        """Return the probed URL when the symbol comes back in the body, else None."""
        url = set_query_param(target_url, param, self.symbol)
        response = fetch(self.http_client, url)
        if self.symbol in response.text:
            return url
        return None

    def _warn_if_symbol_in_baseline(self, target_url: str) -> None:
        try:
            baseline = fetch(self.http_client, target_url)
        except ProbeError as exc:
            logger.debug("Baseline request failed for %s: %s", target_url, exc)
            return
        if self.symbol in baseline.text:
            logger.warning(
                "Symbol %r already appears on %s; every parameter will look reflected. Pick a rarer symbol.",
                self.symbol,
                target_url,
            )

    def run(
        self,
        target_url: str,
        wordlist: Iterable[str],
        *,
        discovery: DiscoverySet | None = None,
        cancel_token: CancelToken | None = None,
    ) -> DiscoverySet:
        discovery = discovery or DiscoverySet(target_url)
        candidates = clean_entries(wordlist)
        if not candidates:
            logger.info("Empty parameter wordlist; nothing to check on %s", target_url)
            return discovery

        self._warn_if_symbol_in_baseline(target_url)
        executor: BoundedExecutor[str, str] = BoundedExecutor(
            self.concurrency,
            deadline=Deadline(self.batch_timeout),
            cancel_token=cancel_token,
            name="reflect-params",
        )

        def probe(param: str) -> str | None:
            url = self.check(target_url, param)
            if url is not None:
                logger.info("Found reflected parameter %r: %s", param, url)
                discovery.add_param(param)
                discovery.add_reflected(url)
            return url

        logger.info("Checking %d parameters for reflection of %r on %s", len(candidates), self.symbol, target_url)
        executor.run(candidates, probe)
        self.last_stats = executor.stats
        return discovery


__all__ = ["ReflectedParamFinder"]
