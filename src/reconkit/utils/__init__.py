# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Utility exports."""

from .ordered_set import OrderedSet
from .wordlist import clean_entries, merge_unique, read_lines

__all__ = ["OrderedSet", "clean_entries", "merge_unique", "read_lines"]
