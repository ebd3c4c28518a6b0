# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level ReconKit facade for discovery, mining and reflection workflows."""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import suppress

from .concurrency import CancelToken
from .config import MinerSettings, ScanSettings, load_http_settings, load_miner_settings, load_scan_settings
from .discovery import BlacklistCriteria, DirectoryDiscoveryEngine, DiscoveryOptions
from .http.client import HttpClient, create_default_http_client
from .http.url import validate_target
from .miner import ParameterMiner, RequestShape
from .models import DiscoverySet, ScanReport
from .reflection import ReflectedParamFinder, ReflectionClassifier


class ReconKit:
    """
    Convenience wrapper that wires a shared HTTP client across the engines.

    Every method validates its targets first (InvalidTargetError is a ConfigurationError)
    and returns a ScanReport built from a run-scoped DiscoverySet.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        scan_settings: ScanSettings | None = None,
        miner_settings: MinerSettings | None = None,
    ):
        self.http_settings = load_http_settings()
        self.scan_settings = scan_settings or load_scan_settings()
        self.miner_settings = miner_settings or load_miner_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings)
        self.cancel_token = CancelToken()

    def _discovery_engine(
        self,
        extensions: Iterable[str] | None,
        blacklist: BlacklistCriteria | None,
        max_depth: int | None,
    ) -> DirectoryDiscoveryEngine:
        options = DiscoveryOptions(
            extensions=list(extensions or []),
            max_depth=self.scan_settings.max_depth if max_depth is None else max_depth,
            concurrency=self.scan_settings.concurrency,
            blacklist=blacklist or BlacklistCriteria(),
            batch_timeout=self.scan_settings.batch_timeout,
        )
        return DirectoryDiscoveryEngine(self.http_client, options)

    def _miner(self, shape: RequestShape | None) -> ParameterMiner:
        return ParameterMiner(
            self.http_client,
            shape,
            settings=self.miner_settings,
            concurrency=self.scan_settings.concurrency,
            batch_timeout=self.scan_settings.batch_timeout,
        )

    def _classifier(self) -> ReflectionClassifier:
        return ReflectionClassifier(
            self.http_client,
            workers=self.scan_settings.validator_concurrency,
            queue_size=self.scan_settings.validator_concurrency,
            batch_timeout=self.scan_settings.batch_timeout,
        )

    def discover(
        self,
        target: str,
        wordlist: Iterable[str],
        *,
        extensions: Iterable[str] | None = None,
        blacklist: BlacklistCriteria | None = None,
        max_depth: int | None = None,
    ) -> ScanReport:
        target = validate_target(target)
        engine = self._discovery_engine(extensions, blacklist, max_depth)
        discovery = engine.run(target, wordlist, cancel_token=self.cancel_token)
        return ScanReport.from_discovery(discovery, stats={"discovery": engine.last_stats.to_dict()})

    def mine(self, target: str, wordlist: Iterable[str], *, shape: RequestShape | None = None) -> ScanReport:
        target = validate_target(target)
        miner = self._miner(shape)
        discovery = miner.run(target, wordlist, cancel_token=self.cancel_token)
        return ScanReport.from_discovery(discovery, stats={"miner": miner.last_stats.to_dict()})

    def validate(self, urls: Iterable[str]) -> ScanReport:
        targets = [validate_target(url) for url in urls]
        discovery = DiscoverySet(targets[0] if targets else "")
        classifier = self._classifier()
        classifier.run(targets, discovery=discovery, cancel_token=self.cancel_token)
        return ScanReport.from_discovery(discovery, stats={"reflection": classifier.last_stats})

    def reflect_params(
        self,
        target: str,
        wordlist: Iterable[str],
        *,
        symbol: str | None = None,
        classify: bool = False,
    ) -> ScanReport:
        """
        Find parameters that echo ``symbol`` back, optionally classifying each reflected URL.

        ``report.reflected_urls`` is valid input for :meth:`validate`.
        """
        target = validate_target(target)
        finder = ReflectedParamFinder(
            self.http_client,
            symbol=symbol or self.scan_settings.reflection_symbol,
            concurrency=self.scan_settings.concurrency,
            batch_timeout=self.scan_settings.batch_timeout,
        )
        discovery = finder.run(target, wordlist, cancel_token=self.cancel_token)
        stats = {"reflect": finder.last_stats.to_dict()}

        reflected = discovery.reflected_list()
        if classify and reflected and not self.cancel_token.cancelled:
            classifier = self._classifier()
            classifier.run(reflected, discovery=discovery, cancel_token=self.cancel_token)
            stats["reflection"] = classifier.last_stats
        return ScanReport.from_discovery(discovery, stats=stats)

    def hybrid(
        self,
        target: str,
        dir_wordlist: Iterable[str],
        param_wordlist: Iterable[str],
        *,
        seeds: Iterable[str] = (),
        extensions: Iterable[str] | None = None,
        blacklist: BlacklistCriteria | None = None,
        max_depth: int | None = None,
        shape: RequestShape | None = None,
    ) -> ScanReport:
        """Fuzz directories under the target and every seed URL, then mine parameters on the target."""
        target = validate_target(target)
        bases = [target, *(validate_target(seed) for seed in seeds)]
        words = list(dir_wordlist)
        discovery = DiscoverySet(target)

        engine = self._discovery_engine(extensions, blacklist, max_depth)
        discovery_stats: dict[str, int] = {}
        for base in bases:
            if self.cancel_token.cancelled:
                break
            engine.run(base, words, discovery=discovery, cancel_token=self.cancel_token)
            for key, value in engine.last_stats.to_dict().items():
                discovery_stats[key] = discovery_stats.get(key, 0) + value

        miner = self._miner(shape)
        miner.run(target, param_wordlist, discovery=discovery, cancel_token=self.cancel_token)
        return ScanReport.from_discovery(
            discovery,
            stats={"discovery": discovery_stats, "miner": miner.last_stats.to_dict()},
        )

    def cancel(self) -> None:
        self.cancel_token.cancel()

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> ReconKit:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["ReconKit"]
