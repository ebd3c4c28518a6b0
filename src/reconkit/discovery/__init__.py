# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Directory discovery engine."""

from .blacklist import BlacklistCriteria
from .candidates import expand_wordlist, normalize_extensions
from .engine import DirectoryDiscoveryEngine, DirectoryJob, DiscoveryOptions

__all__ = [
    "BlacklistCriteria",
    "DirectoryDiscoveryEngine",
    "DirectoryJob",
    "DiscoveryOptions",
    "expand_wordlist",
    "normalize_extensions",
]
