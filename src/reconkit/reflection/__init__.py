# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Reflection detection, context classification and risk assessment."""

from .contexts import detect_contexts, excerpt, locate_contexts
from .detect import ReflectionCheck, check_append, check_reflected, reflected_params
from .engine import ReflectionClassifier, random_suffix
from .risk import SPECIAL_CHARS, assess_risk
from .symbol import ReflectedParamFinder

__all__ = [
    "ReflectedParamFinder",
    "ReflectionCheck",
    "ReflectionClassifier",
    "SPECIAL_CHARS",
    "assess_risk",
    "check_append",
    "check_reflected",
    "detect_contexts",
    "excerpt",
    "locate_contexts",
    "random_suffix",
    "reflected_params",
]
