# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded concurrency primitives shared by the discovery, mining and validation engines."""

from .executor import BatchStats, BoundedExecutor, CancelToken, Deadline, ResultAggregator, run_bounded
from .pipeline import Emit, Pipeline, Stage

__all__ = [
    "BatchStats",
    "BoundedExecutor",
    "CancelToken",
    "Deadline",
    "Emit",
    "Pipeline",
    "ResultAggregator",
    "Stage",
    "run_bounded",
]
