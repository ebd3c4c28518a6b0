# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for ReconKit."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"ReconKit/{__version__} (+https://github.com/reconkit/reconkit)"
DEFAULT_SENTINEL = "test-value"
DEFAULT_REFLECTION_SYMBOL = "test"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional_float_env(name: str, default: float | None) -> float | None:
    try:
        value = os.getenv(name)
        if value is None:
            return default
        parsed = float(value)
        return parsed if parsed > 0 else None
    except ValueError:
        return default


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = False
    verify_ssl: bool = True
    max_body_bytes: int = 16 * 1024 * 1024

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("RECONKIT_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        timeout = _float_env("RECONKIT_HTTP_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        return cls(
            timeout=timeout,
            user_agent=os.getenv("RECONKIT_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("RECONKIT_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("RECONKIT_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
        )


@dataclass
class ScanSettings:
    """Per-run knobs shared by the discovery, mining and validation engines."""

    concurrency: int = 5
    validator_concurrency: int = 40
    max_depth: int = 2
    batch_timeout: float | None = None
    reflection_symbol: str = DEFAULT_REFLECTION_SYMBOL
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "ScanSettings":
        concurrency = _int_env("RECONKIT_CONCURRENCY", cls.concurrency)
        validator_concurrency = _int_env("RECONKIT_VALIDATOR_CONCURRENCY", cls.validator_concurrency)
        return cls(
            concurrency=concurrency if concurrency > 0 else cls.concurrency,
            validator_concurrency=validator_concurrency if validator_concurrency > 0 else cls.validator_concurrency,
            max_depth=max(0, _int_env("RECONKIT_MAX_DEPTH", cls.max_depth)),
            batch_timeout=_optional_float_env("RECONKIT_BATCH_TIMEOUT", cls.batch_timeout),
            reflection_symbol=os.getenv("RECONKIT_REFLECTION_SYMBOL", cls.reflection_symbol) or cls.reflection_symbol,
            verbose=_bool_env("RECONKIT_VERBOSE", cls.verbose),
        )


@dataclass
class MinerSettings:
    """Scoring thresholds for differential parameter mining."""

    sentinel: str = DEFAULT_SENTINEL
    response_time_ratio: float = 1.3
    content_length_threshold: int = 100
    score_threshold: int = 2
    extract_from_baseline: bool = True

    @classmethod
    def from_env(cls) -> "MinerSettings":
        return cls(
            sentinel=os.getenv("RECONKIT_MINER_SENTINEL", cls.sentinel) or cls.sentinel,
            response_time_ratio=_float_env("RECONKIT_MINER_TIME_RATIO", cls.response_time_ratio),
            content_length_threshold=_int_env("RECONKIT_MINER_LENGTH_THRESHOLD", cls.content_length_threshold),
            score_threshold=_int_env("RECONKIT_MINER_SCORE_THRESHOLD", cls.score_threshold),
            extract_from_baseline=_bool_env("RECONKIT_MINER_EXTRACT", cls.extract_from_baseline),
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


def load_scan_settings() -> ScanSettings:
    return ScanSettings.from_env()


def load_miner_settings() -> MinerSettings:
    return MinerSettings.from_env()
