# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Harvest likely parameter names from a baseline response."""

from __future__ import annotations

import json
import re
from typing import Any

from ..http.headers import header_value
from ..utils.ordered_set import OrderedSet

WORD_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
NOT_JUNK_RE = re.compile(r"^[A-Za-z0-9_]+$")
INPUT_RE = re.compile(r"""<(?:input|textarea|select)[^>]+?(?:id|name)=["']?([^"'\s>]+)""", re.IGNORECASE)
JS_VAR_RE = re.compile(r"\b(?:var|let|const)\s+(\w+)\s*=")
EMPTY_VAR_RE = re.compile(r"""(?:[;\n]|\bvar|\blet|\bconst)\s+(\w+)\s*=\s*(?:["']{1,2}|true|false|null)""")
MAP_KEY_RE = re.compile(r"""["'](\w+?)["']\s*:\s*["']""")

ERROR_HINTS = ("required", "missing", "not found", "requires")
PARAM_HINTS = ("param", "parameter", "field")
SHORT_TEXT_LIMIT = 200


def _json_keys(data: Any) -> list[str]:
    keys: list[str] = []
    if isinstance(data, dict):
        for key, value in data.items():
            keys.append(str(key))
            keys.extend(_json_keys(value))
    elif isinstance(data, list):
        for item in data:
            keys.extend(_json_keys(item))
    return keys


def extract_potential_params(text: str, headers: Any = None) -> tuple[list[str], bool]:
    """
    Return ``(names, words_exist)``.

    ``words_exist`` is True when the response looks like it talks about parameters at all
    (JSON keys, a short "missing parameter" error, or any harvested name).
    """
    words_exist = False
    candidates: list[str] = []
    content_type = header_value(headers, "content-type").lower()

    if content_type.startswith("application/json"):
        try:
            keys = _json_keys(json.loads(text))
        except ValueError:
            keys = []
        candidates.extend(keys)
        words_exist = bool(keys)
    elif content_type.startswith("text/plain") and len(text) < SHORT_TEXT_LIMIT:
        lowered = text.lower()
        if any(hint in lowered for hint in ERROR_HINTS) and any(hint in lowered for hint in PARAM_HINTS):
            words_exist = True
        candidates.extend(WORD_RE.findall(text))

    for pattern in (INPUT_RE, JS_VAR_RE, EMPTY_VAR_RE, MAP_KEY_RE):
        candidates.extend(pattern.findall(text))

    found: OrderedSet[str] = OrderedSet(name for name in candidates if NOT_JUNK_RE.match(name))
    if found:
        words_exist = True
    return found.to_list(), words_exist


__all__ = ["extract_potential_params"]
