# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import itertools
import json

import pytest

from reconkit.config import MinerSettings
from reconkit.errors import ConfigurationError, UnsupportedMethodError
from reconkit.http import StubHttpClient
from reconkit.http.models import HttpResponse
from reconkit.miner import (
    ParameterMiner,
    RequestShape,
    compare_responses,
    extract_potential_params,
    is_accepted,
    parse_data_pairs,
    score_factors,
    strip_tags,
)
from reconkit.models.miner import ResponseFactors

NO_EXTRACT = MinerSettings(extract_from_baseline=False)


def _resp(text, *, status=200, headers=None, elapsed=0.0):
    return HttpResponse(ok=True, status_code=status, headers=dict(headers or {}), text=text, content=text.encode(), elapsed=elapsed)


def test_identical_responses_score_zero():
    factors = compare_responses(_resp("Hello"), _resp("Hello"), "debug", "test-value")

    assert factors.same_code == 200
    assert factors.same_body == "Hello"
    assert factors.content_length_diff == 0
    assert factors.header_changes == {}
    score, reasons = score_factors(factors)
    assert (score, reasons) == (0, [])
    assert not is_accepted(score)


def test_compare_responses_collects_every_factor():
    baseline = _resp(
        "<b>welcome</b> debug test-value",
        headers={"x-cache": "HIT", "location": "/home"},
        elapsed=0.1,
    )
    mutated = _resp(
        "<i>welcome</i> <script>var token = 1; const mode = 2;</script>",
        status=500,
        headers={"x-cache": "MISS", "location": "/home"},
        elapsed=0.5,
    )

    factors = compare_responses(baseline, mutated, "debug", "test-value")

    assert factors.same_code is None
    assert factors.same_body is None
    assert factors.same_plaintext is None
    assert factors.header_changes == {"x-cache": "HIT -> MISS"}
    assert factors.same_redirect == "/home"
    assert factors.param_missing is True
    assert factors.value_missing is True
    assert factors.response_time_diff == pytest.approx(0.4)
    assert factors.baseline_time == pytest.approx(0.1)
    assert factors.javascript_vars == ["token", "mode"]
    assert factors.to_dict()["same_body"] is False


def test_plaintext_equality_ignores_markup():
    factors = compare_responses(_resp("<b>Hi</b>"), _resp("<i>Hi</i>"), "p", "test-value")
    assert factors.same_body is None
    assert factors.same_plaintext == "Hi"
    assert strip_tags("<p class='x'>a</p><br/>b") == "ab"


def test_score_counts_each_factor_once():
    settings = MinerSettings()
    for value_missing, param_missing, slow, grown in itertools.product([False, True], repeat=4):
        factors = ResponseFactors(
            value_missing=value_missing,
            param_missing=param_missing,
            baseline_time=1.0,
            response_time_diff=2.0 if slow else 0.5,
            content_length_diff=-150 if grown else 100,
        )
        score, reasons = score_factors(factors, settings)
        assert score == sum([value_missing, param_missing, slow, grown])
        assert len(reasons) == score
        assert is_accepted(score, settings) == (score >= 2)


def test_thresholds_are_configurable():
    factors = ResponseFactors(content_length_diff=50)
    assert score_factors(factors)[0] == 0
    loose = MinerSettings(content_length_threshold=10, score_threshold=1)
    score, reasons = score_factors(factors, loose)
    assert reasons == ["content_length"]
    assert is_accepted(score, loose)


def test_request_shaping_per_method():
    get = RequestShape(data={"a": "1"}).build("http://x/p?z=9", {"q": "test-value"})
    assert get.method == "GET"
    assert get.url == "http://x/p?z=9&a=1&q=test-value"
    assert get.body is None

    post = RequestShape("post", data={"a": "1"}).build("http://x/p", {"q": "v"})
    assert post.method == "POST"
    assert post.body == "a=1&q=v"
    assert post.headers["Content-Type"] == "application/x-www-form-urlencoded"

    as_json = RequestShape("JSON", data={"a": "1"}).build("http://x/p", {"q": "v"})
    assert as_json.method == "POST"
    assert json.loads(as_json.body) == {"a": "1", "q": "v"}
    assert as_json.headers["Content-Type"] == "application/json"

    xml = RequestShape("XML", data={"xml": "<root><a>1</a></root>"}).build("http://x/p", {"q": "<v>"})
    assert xml.body == "<root><a>1</a><q>&lt;v&gt;</q></root>"
    assert xml.headers["Content-Type"] == "application/xml"


def test_request_shape_headers_are_copied():
    shape = RequestShape(headers={"Cookie": "a=b"})
    request = shape.build("http://x/")
    request.headers["X-Extra"] = "1"
    assert shape.headers == {"Cookie": "a=b"}
    assert request.headers["Cookie"] == "a=b"


def test_request_shape_configuration_errors():
    with pytest.raises(UnsupportedMethodError):
        RequestShape("PATCH")
    with pytest.raises(ConfigurationError):
        RequestShape("XML").validate()
    assert parse_data_pairs("user:admin,next:http://h/x,bad") == {"user": "admin", "next": "http://h/x"}


def test_extract_params_from_json_html_and_errors():
    names, found = extract_potential_params(
        json.dumps({"user": {"id": 1}, "items": [{"token": "x"}]}),
        {"content-type": "application/json"},
    )
    assert found is True
    assert names == ["user", "id", "items", "token"]

    html = '<input name="csrf"><textarea id="comment"></textarea><script>var page = 1; let q = "";</script>'
    names, found = extract_potential_params(html, {"content-type": "text/html"})
    assert found is True
    assert names == ["csrf", "comment", "page", "q"]

    names, found = extract_potential_params("Missing required parameter: token", {"content-type": "text/plain"})
    assert found is True
    assert "token" in names

    assert extract_potential_params("<p>hello</p>", {"content-type": "text/html"}) == ([], False)


def _debug_aware(request):
    if "debug=" in request.url:
        return _resp("x" * 500, elapsed=1.0)
    if "broken=" in request.url:
        raise RuntimeError("connection reset")
    return _resp("Hello", elapsed=0.1)


def test_miner_flags_parameters_that_change_the_response():
    stub = StubHttpClient(handler=_debug_aware)
    miner = ParameterMiner(stub, settings=NO_EXTRACT, concurrency=3)

    discovery = miner.run("http://x/search", ["debug", "page", "lang"])

    assert discovery.param_list() == ["debug"]
    verdicts = {verdict.param: verdict for verdict in miner.last_verdicts}
    assert verdicts["debug"].score == 2
    assert sorted(verdicts["debug"].reasons) == ["content_length", "response_time"]
    assert verdicts["page"].score == 0
    assert miner.accepted() == ["debug"]
    assert miner.accepted(threshold=0) == ["debug", "lang", "page"]
    # Baseline is re-issued for every candidate.
    assert stub.requested_urls().count("http://x/search") == 3


def test_miner_skips_candidates_whose_requests_fail():
    stub = StubHttpClient(handler=_debug_aware)
    miner = ParameterMiner(stub, settings=NO_EXTRACT)

    discovery = miner.run("http://x/search", ["broken", "debug"])

    assert discovery.param_list() == ["debug"]
    assert miner.last_stats.failed == 1
    assert [verdict.param for verdict in miner.last_verdicts] == ["debug"]


def test_miner_rejects_bad_configuration_before_probing():
    stub = StubHttpClient(handler=_debug_aware)
    miner = ParameterMiner(stub, RequestShape("XML"), settings=NO_EXTRACT)

    with pytest.raises(ConfigurationError):
        miner.run("http://x/api", ["debug"])
    assert stub.requested_urls() == []


def test_miner_empty_wordlist_is_not_an_error():
    stub = StubHttpClient(handler=_debug_aware)
    miner = ParameterMiner(stub, settings=NO_EXTRACT)
    assert miner.run("http://x/", ["", " "]).param_list() == []
    assert stub.requested_urls() == []


def test_miner_seeds_candidates_from_baseline():
    def handler(request):
        if request.url == "http://x/api":
            return _resp(json.dumps({"secret": "1"}), headers={"content-type": "application/json"})
        return _resp("{}", headers={"content-type": "application/json"})

    miner = ParameterMiner(StubHttpClient(handler=handler))
    miner.run("http://x/api", ["page"])

    assert sorted(verdict.param for verdict in miner.last_verdicts) == ["page", "secret"]
