# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Differential parameter miner."""

from .engine import ParameterMiner
from .extractor import extract_potential_params
from .factors import compare_responses, extract_js_variables, strip_tags
from .scoring import is_accepted, score_factors
from .shaping import RequestShape, normalize_method, parse_data_pairs

__all__ = [
    "ParameterMiner",
    "RequestShape",
    "compare_responses",
    "extract_js_variables",
    "extract_potential_params",
    "is_accepted",
    "normalize_method",
    "parse_data_pairs",
    "score_factors",
    "strip_tags",
]
