# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Map (context, unfiltered characters) to a risk level and a short exploit narrative."""

from __future__ import annotations

from collections.abc import Iterable

from ..models.reflection import ReflectionContext, RiskLevel

SPECIAL_CHARS = ('"', "'", "<", ">", "$", "|", "(", ")", "`", ":", ";", "{", "}")
QUOTES = frozenset({'"', "'"})


def _has_angles(chars: frozenset[str]) -> bool:
    return "<" in chars and ">" in chars


def _html_body(chars: frozenset[str]) -> tuple[RiskLevel, str] | None:
    if _has_angles(chars):
        return RiskLevel.CRITICAL, "Arbitrary tag injection: < and > survive in HTML text"
    return None


def _attribute(chars: frozenset[str]) -> tuple[RiskLevel, str] | None:
    quotes = chars & QUOTES
    if quotes and _has_angles(chars):
        return RiskLevel.CRITICAL, "Attribute breakout into new markup: quote and angle brackets survive"
    if quotes:
        return RiskLevel.HIGH, f"Event-handler injection: {''.join(sorted(quotes))} closes the attribute value"
    return None


def _script(chars: frozenset[str]) -> tuple[RiskLevel, str] | None:
    if chars & QUOTES or ";" in chars:
        return RiskLevel.CRITICAL, "Script breakout: string delimiter or statement separator survives"
    if _has_angles(chars):
        return RiskLevel.CRITICAL, "Script block can be closed: < and > survive inside script"
    return None


def _url(chars: frozenset[str]) -> tuple[RiskLevel, str] | None:
    if chars & QUOTES:
        return RiskLevel.HIGH, "URL attribute breakout: quote survives"
    if ":" in chars:
        return RiskLevel.MEDIUM, "Scheme control: ':' survives, javascript: URLs may be possible"
    return None


def _css(chars: frozenset[str]) -> tuple[RiskLevel, str] | None:
    if ";" in chars or "(" in chars or ")" in chars:
        return RiskLevel.MEDIUM, "CSS injection: declarations or function calls can be added"
    return None


def _comment(chars: frozenset[str]) -> tuple[RiskLevel, str] | None:
    if ">" in chars:
        return RiskLevel.MEDIUM, "Comment breakout: > survives, --> may close the comment"
    return None


def _unknown(chars: frozenset[str]) -> tuple[RiskLevel, str] | None:
    if _has_angles(chars):
        return RiskLevel.MEDIUM, "Angle brackets survive in an unclassified context"
    return None


_RULES = {
    ReflectionContext.HTML_BODY: _html_body,
    ReflectionContext.HTML_ATTRIBUTE: _attribute,
    ReflectionContext.SCRIPT: _script,
    ReflectionContext.URL: _url,
    ReflectionContext.CSS: _css,
    ReflectionContext.HTML_COMMENT: _comment,
    ReflectionContext.UNKNOWN: _unknown,
}


def assess_risk(context: ReflectionContext, unfiltered: Iterable[str]) -> tuple[RiskLevel, str]:
    chars = frozenset(unfiltered)
    escalation = _RULES[context](chars)
    if escalation is not None:
        return escalation
    if chars:
        listed = " ".join(char for char in SPECIAL_CHARS if char in chars)
        return RiskLevel.LOW, f"Unfiltered characters ({listed}) without a breakout for this context"
    return RiskLevel.INFO, "Reflected, but every probed special character is filtered"


__all__ = ["QUOTES", "SPECIAL_CHARS", "assess_risk"]
