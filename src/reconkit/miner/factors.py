# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Baseline-vs-mutated response comparison."""

from __future__ import annotations

import re

from ..http.headers import header_value
from ..http.models import HttpResponse
from ..models.miner import ResponseFactors

TAG_RE = re.compile(r"<.*?>")
JS_VAR_RE = re.compile(r"\b(?:var|let|const)\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*=")


def strip_tags(html: str) -> str:
    return TAG_RE.sub("", html)


def extract_js_variables(text: str) -> list[str]:
    return JS_VAR_RE.findall(text)


def compare_responses(baseline: HttpResponse, mutated: HttpResponse, param: str, value: str) -> ResponseFactors:
    factors = ResponseFactors()

    if baseline.status_code == mutated.status_code:
        factors.same_code = baseline.status_code

    for name, before in baseline.headers.items():
        after = header_value(mutated.headers, name)
        if before != after:
            factors.header_changes[name] = f"{before} -> {after}"

    body1 = baseline.text or ""
    body2 = mutated.text or ""
    if body1 == body2:
        factors.same_body = body1
    else:
        plain1 = strip_tags(body1)
        if plain1 == strip_tags(body2):
            factors.same_plaintext = plain1

    # Something the baseline rendered vanished once the parameter was supplied.
    factors.param_missing = param in body1 and param not in body2
    factors.value_missing = value in body1 and value not in body2

    location1 = baseline.location
    location2 = mutated.location
    if location1 and location2 and location1 == location2:
        factors.same_redirect = location1

    factors.baseline_time = baseline.elapsed
    factors.response_time_diff = mutated.elapsed - baseline.elapsed
    len1 = len(baseline.content) if baseline.content else len(body1.encode("utf-8"))
    len2 = len(mutated.content) if mutated.content else len(body2.encode("utf-8"))
    factors.content_length_diff = len2 - len1
    factors.javascript_vars = extract_js_variables(body2)
    return factors


__all__ = ["compare_responses", "extract_js_variables", "strip_tags"]
