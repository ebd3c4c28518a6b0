# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import html

import pytest

from reconkit.errors import ConfigurationError
from reconkit.http import StubHttpClient
from reconkit.http.models import HttpResponse
from reconkit.http.url import query_params
from reconkit.models import DiscoverySet, ReflectionContext, RiskLevel
from reconkit.reflection import (
    SPECIAL_CHARS,
    ReflectedParamFinder,
    ReflectionClassifier,
    assess_risk,
    check_append,
    detect_contexts,
    excerpt,
    locate_contexts,
    reflected_params,
)

HTML = {"content-type": "text/html; charset=utf-8"}
C = ReflectionContext


def _query(url):
    return dict(query_params(url))


def echo_body(request):
    q = _query(request.url).get("q", "")
    return HttpResponse(ok=True, status_code=200, headers=dict(HTML), text=f"<html><body><b>{q}</b></body></html>")


def escaped_attribute(request):
    q = html.escape(_query(request.url).get("q", ""), quote=True)
    return HttpResponse(ok=True, status_code=200, headers=dict(HTML), text=f'<form><input name="q" value="{q}"></form>')


def fixed_value(request):  # noqa: ARG001
    return HttpResponse(ok=True, status_code=200, headers=dict(HTML), text="<b>test</b>")


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ("<html><body><b>MARK</b></body></html>", (C.HTML_BODY,)),
        ('<input value="MARK">', (C.HTML_ATTRIBUTE,)),
        ("<input value=MARK>", (C.HTML_ATTRIBUTE,)),
        ('<a href="/go?x=MARK">go</a>', (C.HTML_ATTRIBUTE, C.URL)),
        ('<a href="javascript:MARK">go</a>', (C.HTML_ATTRIBUTE, C.SCRIPT, C.URL)),
        ("<div onclick=\"run('MARK')\">x</div>", (C.HTML_ATTRIBUTE, C.SCRIPT)),
        ('<p style="color:MARK">x</p>', (C.HTML_ATTRIBUTE, C.CSS)),
        ("<script>var q = 'MARK';</script>", (C.SCRIPT,)),
        ("<style>body{color:MARK}</style>", (C.CSS,)),
        ("<!-- MARK -->", (C.HTML_COMMENT,)),
        ("<p>MARK</p><!-- MARK -->", (C.HTML_BODY, C.HTML_COMMENT)),
        ("<div MARK>x</div>", (C.UNKNOWN,)),
        ("<script type=\"text/javascript\"><!--\nvar q = 'MARK';\n//--></script>", (C.SCRIPT,)),
        ("<style><!--\nbody{color:MARK}\n--></style>", (C.CSS,)),
        ("<!-- <script>MARK</script> -->", (C.HTML_COMMENT,)),
        ('<input title="a > b" value="MARK">', (C.HTML_ATTRIBUTE,)),
        ("<p>nothing here</p>", ()),
    ],
)
def test_detect_contexts(body, expected):
    assert detect_contexts(body, "MARK") == expected


def test_context_detection_is_idempotent_and_locates_first_hit():
    body = "<p>MARK</p>\n<input value='MARK'>"
    assert detect_contexts(body, "MARK") == detect_contexts(body, "MARK")
    located = locate_contexts(body, "MARK")
    assert located[C.HTML_BODY] == 3
    assert located[C.HTML_ATTRIBUTE] == body.index("MARK", 4)
    assert locate_contexts("", "MARK") == {}
    assert locate_contexts("<p>MARK</p>", "") == {}


def test_excerpt_window():
    body = "a" * 100 + "MARK" + "b" * 100
    assert excerpt(body, 100, 4) == "..." + "a" * 40 + "MARK" + "b" * 40 + "..."
    assert excerpt("x\nMARK\ny", 2, 4) == "x MARK y"


@pytest.mark.parametrize(
    ("context", "chars", "risk"),
    [
        (C.HTML_BODY, "<>", RiskLevel.CRITICAL),
        (C.HTML_BODY, '"', RiskLevel.LOW),
        (C.HTML_ATTRIBUTE, '"', RiskLevel.HIGH),
        (C.HTML_ATTRIBUTE, "'<>", RiskLevel.CRITICAL),
        (C.HTML_ATTRIBUTE, "'<", RiskLevel.HIGH),
        (C.HTML_ATTRIBUTE, "<>", RiskLevel.LOW),
        (C.SCRIPT, "'", RiskLevel.CRITICAL),
        (C.SCRIPT, ";", RiskLevel.CRITICAL),
        (C.SCRIPT, "(", RiskLevel.LOW),
        (C.URL, '"', RiskLevel.HIGH),
        (C.URL, ":", RiskLevel.MEDIUM),
        (C.CSS, ";", RiskLevel.MEDIUM),
        (C.CSS, ")", RiskLevel.MEDIUM),
        (C.CSS, "{", RiskLevel.LOW),
        (C.HTML_COMMENT, ">", RiskLevel.MEDIUM),
        (C.UNKNOWN, "<>", RiskLevel.MEDIUM),
        (C.UNKNOWN, "", RiskLevel.INFO),
    ],
)
def test_assess_risk_table(context, chars, risk):
    level, rationale = assess_risk(context, chars)
    assert level == risk
    assert rationale


def test_quote_breakout_in_legacy_commented_script_is_critical():
    body = "<script type=\"text/javascript\"><!--\nvar q = 'MARK';\n//--></script>"
    (context,) = detect_contexts(body, "MARK")
    assert assess_risk(context, ("'",))[0] == RiskLevel.CRITICAL


def test_more_unfiltered_characters_never_lower_risk():
    for context in ReflectionContext:
        ranks = [assess_risk(context, SPECIAL_CHARS[:n])[0].rank for n in range(len(SPECIAL_CHARS) + 1)]
        assert ranks == sorted(ranks), context


def test_reflected_params_rules():
    body = HttpResponse(ok=True, status_code=200, headers=dict(HTML), text="<b>test</b>")
    url = "http://x/s?q=test&empty=&n=zzz"
    assert reflected_params(url, body) == {"q": "test"}

    untyped = HttpResponse(ok=True, status_code=200, text="<b>test</b>")
    assert reflected_params(url, untyped) == {"q": "test"}

    redirect = HttpResponse(ok=True, status_code=302, headers=dict(HTML), text="<b>test</b>")
    assert reflected_params(url, redirect) == {}

    as_json = HttpResponse(ok=True, status_code=200, headers={"content-type": "application/json"}, text='"test"')
    assert reflected_params(url, as_json) == {}


def test_check_append_requires_exact_value():
    stub = StubHttpClient(handler=echo_body)
    reflected, check = check_append(stub, "http://x/s?q=test", "q", "test<zz")
    assert reflected is True
    assert "<b>test<zz</b>" in check.body
    assert check.url == "http://x/s?q=test%3Czz"

    fixed = StubHttpClient(handler=fixed_value)
    assert check_append(fixed, "http://x/s?q=test", "q", "testzz")[0] is False


def test_unfiltered_angle_brackets_in_html_body_are_critical():
    stub = StubHttpClient(handler=echo_body)
    classifier = ReflectionClassifier(stub, workers=2, suffix="zz9")

    findings = classifier.run(["http://x/search?q=test"])

    assert len(findings) == 1
    finding = findings[0]
    assert finding.param == "q"
    assert finding.context == C.HTML_BODY
    assert finding.unfiltered == SPECIAL_CHARS
    assert finding.risk == RiskLevel.CRITICAL
    assert "testzz9" in finding.evidence
    assert classifier.last_stats == {"reflect": 1, "append": 1, "inject": 1}

    assessments = classifier.assess("http://x/search?q=test")
    assert [(item.param, item.vulnerable, item.highest_risk) for item in assessments] == [
        ("q", True, RiskLevel.CRITICAL)
    ]


def test_html_escaped_attribute_only_leaks_harmless_characters():
    classifier = ReflectionClassifier(StubHttpClient(handler=escaped_attribute), workers=3, suffix="zz9")

    findings = classifier.run(["http://x/form?q=test"])

    assert [finding.context for finding in findings] == [C.HTML_ATTRIBUTE]
    assert set(findings[0].unfiltered) == set("$|()`:;{}")
    assert findings[0].risk == RiskLevel.LOW


def test_classifier_drops_values_the_tester_does_not_control():
    stub = StubHttpClient(handler=fixed_value)
    classifier = ReflectionClassifier(stub, workers=2, suffix="zz9")

    assert classifier.run(["http://x/s?q=test"]) == []
    # Reflection check plus the appended-suffix check; no character probes.
    assert len(stub.requested_urls()) == 2


def test_classifier_records_findings_and_skips_failures():
    def handler(request):
        if "/down" in request.url:
            raise RuntimeError("connection reset")
        return echo_body(request)

    discovery = DiscoverySet("http://x/")
    classifier = ReflectionClassifier(StubHttpClient(handler=handler), workers=4, suffix="zz9")

    findings = classifier.run(
        ["http://x/down?q=test", "http://x/a?q=one", "http://x/b?other=1"],
        discovery=discovery,
    )

    assert sorted(finding.url for finding in findings) == ["http://x/a?q=one"]
    assert discovery.finding_list() == findings
    assert classifier.last_stats["reflect"] == 3


def test_random_suffix_per_classifier():
    first = ReflectionClassifier(StubHttpClient())
    second = ReflectionClassifier(StubHttpClient())
    assert len(first.suffix) == 8
    assert first.suffix.isalnum()
    assert first.suffix != second.suffix


def test_finder_flags_parameters_that_echo_the_symbol():
    def handler(request):
        params = _query(request.url)
        if params.get("boom"):
            raise RuntimeError("connection reset")
        return echo_body(request)

    stub = StubHttpClient(handler=handler)
    finder = ReflectedParamFinder(stub, symbol="zz7", concurrency=2)

    discovery = finder.run("http://x/s?page=1", ["q", " id ", "", "boom"])

    assert discovery.param_list() == ["q"]
    assert discovery.reflected_list() == ["http://x/s?page=1&q=zz7"]
    assert finder.last_stats.to_dict() == {"dispatched": 3, "completed": 2, "failed": 1, "skipped": 0}
    # Baseline request first, then one request per candidate.
    assert stub.requested_urls()[0] == "http://x/s?page=1"


def test_finder_reflected_urls_feed_the_classifier():
    stub = StubHttpClient(handler=echo_body)
    discovery = ReflectedParamFinder(stub, symbol="zz7").run("http://x/s", ["q"])

    findings = ReflectionClassifier(stub, workers=2, suffix="k9").run(discovery.reflected_list())

    assert [(finding.param, finding.context, finding.risk) for finding in findings] == [
        ("q", C.HTML_BODY, RiskLevel.CRITICAL)
    ]


def test_finder_warns_when_symbol_is_already_on_the_page(caplog):
    finder = ReflectedParamFinder(StubHttpClient(handler=fixed_value))

    with caplog.at_level("WARNING"):
        discovery = finder.run("http://x/s", ["q", "id"])

    assert "already appears" in caplog.text
    assert sorted(discovery.param_list()) == ["id", "q"]


def test_finder_rejects_empty_symbol_and_skips_empty_wordlists():
    with pytest.raises(ConfigurationError):
        ReflectedParamFinder(StubHttpClient(), symbol="")

    stub = StubHttpClient(handler=echo_body)
    assert ReflectedParamFinder(stub).run("http://x/s", ["", "  "]).param_list() == []
    assert stub.requested_urls() == []
