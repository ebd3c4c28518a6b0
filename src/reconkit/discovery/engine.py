# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Directory discovery: wordlist brute force with noise filtering and bounded recursive descent.

Recursion is expressed as follow-up ``DirectoryJob`` items submitted back into the running
executor, each carrying its own depth, rather than as nested calls.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..concurrency import BatchStats, BoundedExecutor, CancelToken, Deadline
from ..http.client import HttpClient
from ..http.heuristics import has_directory_signals, is_html_content_type
from ..http.models import HttpRequest
from ..http.url import join_path
from ..http.utils import send
from ..models.probe import ProbeResult
from ..models.report import DiscoverySet
from .blacklist import BlacklistCriteria
from .candidates import expand_wordlist, looks_like_file

logger = logging.getLogger(__name__)

RECURSE_STATUS_CODES = frozenset({200, 301, 302, 403})


@dataclass(frozen=True)
class DirectoryJob:
    url: str
    depth: int


@dataclass
class DiscoveryOptions:
    extensions: list[str] = field(default_factory=list)
    max_depth: int = 2
    concurrency: int = 5
    blacklist: BlacklistCriteria = field(default_factory=BlacklistCriteria)
    user_agent: str | None = None
    batch_timeout: float | None = None


class DirectoryDiscoveryEngine:
    """Find valid paths under a base URL."""

    def __init__(self, http_client: HttpClient, options: DiscoveryOptions | None = None):
        self.http_client = http_client
        self.options = options or DiscoveryOptions()
        self.last_stats = BatchStats()

    def should_descend(self, result: ProbeResult, depth: int) -> bool:
        """Only directory-like HTML pages below the depth ceiling get fuzzed again."""
        if depth >= self.options.max_depth:
            return False
        if result.status_code not in RECURSE_STATUS_CODES:
            return False
        if not is_html_content_type(result.content_type):
            return False
        if looks_like_file(result.url, self.options.extensions):
            return False
        return has_directory_signals(result.body)

    def run(
        self,
        base_url: str,
        wordlist: Iterable[str],
        *,
        discovery: DiscoverySet | None = None,
        cancel_token: CancelToken | None = None,
    ) -> DiscoverySet:
        discovery = discovery or DiscoverySet(base_url)
        segments = expand_wordlist(wordlist, self.options.extensions)
        if not segments:
            logger.info("Empty wordlist; nothing to fuzz on %s", base_url)
            return discovery

        try:
            initial = [DirectoryJob(join_path(base_url, segment), 0) for segment in segments]
        except ValueError as exc:
            logger.warning("Skipping base URL %s: %s", base_url, exc)
            return discovery

        visited = {base_url.rstrip("/")}
        visited_lock = threading.Lock()
        executor: BoundedExecutor[DirectoryJob, ProbeResult] = BoundedExecutor(
            self.options.concurrency,
            deadline=Deadline(self.options.batch_timeout),
            cancel_token=cancel_token,
            name="dirfuzz",
        )

        def claim(url: str) -> bool:
            key = url.rstrip("/")
            with visited_lock:
                if key in visited:
                    return False
                visited.add(key)
                return True

        def probe(job: DirectoryJob) -> ProbeResult | None:
            result = self._probe(job.url)
            reason = self.options.blacklist.rejection_reason(result)
            if reason is not None:
                logger.debug("Filtered %s (%s)", job.url, reason)
                return None

            if discovery.add_path(result):
                logger.info(
                    "Found: %s (Status: %d, Length: %d, Words: %d, Lines: %d)",
                    result.url,
                    result.status_code,
                    result.length,
                    result.words,
                    result.lines,
                )

            if self.should_descend(result, job.depth) and claim(result.url):
                logger.debug("Descending into %s at depth %d", result.url, job.depth + 1)
                for segment in segments:
                    try:
                        child = join_path(result.url, segment)
                    except ValueError as exc:
                        logger.warning("Skipping base URL %s: %s", result.url, exc)
                        break
                    if not executor.submit(DirectoryJob(child, job.depth + 1)):
                        break
            return result

        logger.info("Starting directory fuzzing on %s (%d candidates per level)", base_url, len(segments))
        executor.run(initial, probe)
        self.last_stats = executor.stats
        logger.info(
            "Directory fuzzing on %s completed: %d probes, %d failed, %d valid paths",
            base_url,
            executor.stats.dispatched,
            executor.stats.failed,
            len(discovery.path_list()),
        )
        return discovery

    def _probe(self, url: str) -> ProbeResult:
        headers = {"User-Agent": self.options.user_agent} if self.options.user_agent else None
        response = send(self.http_client, HttpRequest(url=url, headers=headers))
        return ProbeResult.from_response(response, url=url)


__all__ = ["DirectoryDiscoveryEngine", "DirectoryJob", "DiscoveryOptions", "RECURSE_STATUS_CODES"]
