# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for ReconKit."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("RECONKIT_LOG_LEVEL", "WARNING").upper()


def setup_logging(level: str | None = None, *, verbose: bool = False) -> None:
    """
    Configure standard logging for CLI/library use.

    Verbose runs surface per-item probe diagnostics, which are emitted at DEBUG.
    """
    effective_level = "DEBUG" if verbose else (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO; keep it quiet unless explicitly debugging.
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["setup_logging"]
