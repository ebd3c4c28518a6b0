# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
from urllib.parse import parse_qsl, urlsplit

import pytest

from reconkit.cli import main as cli_main
from reconkit.cli.main import _truncate_text_bytes, build_parser
from reconkit.config import MinerSettings, ScanSettings
from reconkit.discovery import BlacklistCriteria
from reconkit.errors import InvalidTargetError
from reconkit.http import StubHttpClient
from reconkit.http.models import HttpResponse
from reconkit.models import RiskLevel
from reconkit.runtime import ReconKit

HTML = {"content-type": "text/html"}


def site(request):
    """A tiny target: /admin exists, ?debug changes the page, ?q is echoed, the rest is a 404."""
    parts = urlsplit(request.url)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    if "debug" in query:
        return HttpResponse(ok=True, status_code=200, headers=dict(HTML), text="x" * 500, elapsed=1.0)
    if "q" in query:
        return HttpResponse(ok=True, status_code=200, headers=dict(HTML), text=f"<p>{query['q']}</p>")
    if parts.path == "/admin":
        return HttpResponse(ok=True, status_code=200, headers={"content-type": "text/plain"}, text="admin panel")
    return HttpResponse(ok=True, status_code=404, headers=dict(HTML), text="Hello", elapsed=0.1)


def _kit(stub):
    return ReconKit(
        http_client=stub,
        scan_settings=ScanSettings(concurrency=2, validator_concurrency=2),
        miner_settings=MinerSettings(extract_from_baseline=False),
    )


def test_build_parser_subcommands():
    parser = build_parser()

    fuzz = parser.parse_args(
        ["fuzz", "-u", "http://x/", "-w", "dirs.txt", "-e", "php,html", "-d", "3", "-bs", "404", "-bl", "512", "-bsw", "Not Found"]
    )
    assert fuzz.command == "fuzz"
    assert fuzz.depth == 3
    assert fuzz.extensions == "php,html"
    assert fuzz.blacklist_status == "404"
    assert fuzz.blacklist_length == "512"
    assert fuzz.blacklist_search == "Not Found"

    mine = parser.parse_args(["mine", "-tl", "targets.txt", "-m", "json", "-d", "a:1", "-H", "X-Api:1", "-v"])
    assert mine.target_list == "targets.txt"
    assert mine.method == "json"
    assert mine.data == "a:1"
    assert mine.headers == "X-Api:1"
    assert mine.verbose is True

    hybrid = parser.parse_args(["hybrid", "-u", "http://x/", "-p", "params.txt", "--data", "k:v", "-ua", "Agent/1"])
    assert hybrid.param_wordlist == "params.txt"
    assert hybrid.data == "k:v"
    assert hybrid.user_agent == "Agent/1"
    assert hybrid.wordlist == "wordlist.txt"


def test_parser_requires_exactly_one_target_source():
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["validate"])
    with pytest.raises(SystemExit):
        parser.parse_args(["validate", "-u", "http://x/", "-tl", "targets.txt"])


def test_truncate_text_bytes():
    assert _truncate_text_bytes("short", 100) == "short"
    truncated = _truncate_text_bytes("a" * 100, 20)
    assert truncated.endswith("...[truncated]")
    assert len(truncated.encode("utf-8")) == 20


def test_reconkit_facade_engines_share_one_client():
    stub = StubHttpClient(handler=site)
    with _kit(stub) as kit:
        paths = kit.discover("http://x/", ["admin", "nope"], blacklist=BlacklistCriteria.build(status_codes=[404]))
        params = kit.mine("http://x/", ["debug", "page"])
        reflections = kit.validate(["http://x/search?q=test"])

    assert paths.valid_paths == ["http://x/admin"]
    assert paths.stats["discovery"]["dispatched"] == 2
    assert params.valid_params == ["debug"]
    assert params.stats["miner"]["completed"] == 2
    assert [(item.param, item.highest_risk) for item in reflections.vulnerable_params] == [("q", RiskLevel.CRITICAL)]
    assert stub.closed is True


def test_reconkit_hybrid_fuzzes_seeds_then_mines_target():
    stub = StubHttpClient(handler=site)
    kit = _kit(stub)

    report = kit.hybrid(
        "http://x/",
        ["admin", "nope"],
        ["debug", "page"],
        seeds=["http://x/admin"],
        blacklist=BlacklistCriteria.build(status_codes=[404]),
    )

    assert report.target == "http://x/"
    assert report.valid_paths == ["http://x/admin"]
    assert report.valid_params == ["debug"]
    assert "http://x/admin/nope" in stub.requested_urls()
    assert report.stats["discovery"]["dispatched"] == 4
    assert set(report.stats) == {"discovery", "miner"}


def test_reconkit_rejects_invalid_targets_before_probing():
    stub = StubHttpClient(handler=site)
    kit = _kit(stub)
    with pytest.raises(InvalidTargetError):
        kit.discover("ftp://x/", ["admin"])
    with pytest.raises(InvalidTargetError):
        kit.validate(["http://x/?q=1", "x.example"])
    assert stub.requested_urls() == []


@pytest.fixture
def stub_cli(monkeypatch):
    stub = StubHttpClient(handler=site)
    monkeypatch.setattr(cli_main, "create_default_http_client", lambda settings: stub)
    monkeypatch.setenv("RECONKIT_VALIDATOR_CONCURRENCY", "2")
    return stub


def test_cli_validate_prints_json(stub_cli, capsys):
    assert cli_main.main(["validate", "-u", "http://x/search?q=test"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["target"] == "http://x/search?q=test"
    assert payload["findings"][0]["param"] == "q"
    assert payload["findings"][0]["risk"] == "CRITICAL"
    assert stub_cli.closed is True


def test_cli_fuzz_writes_output_file(stub_cli, tmp_path):
    words = tmp_path / "dirs.txt"
    words.write_text("admin\nnope\n", encoding="utf-8")
    out = tmp_path / "out.json"

    code = cli_main.main(["fuzz", "-u", "http://x/", "-w", str(words), "-bs", "404", "-o", str(out)])

    assert code == 0
    assert json.loads(out.read_text(encoding="utf-8"))["valid_paths"] == ["http://x/admin"]


def test_cli_mine_target_list_emits_one_report_per_target(stub_cli, tmp_path, capsys):
    targets = tmp_path / "targets.txt"
    targets.write_text("http://x/\nhttp://x/other\n", encoding="utf-8")
    words = tmp_path / "params.txt"
    words.write_text("debug\n", encoding="utf-8")

    code = cli_main.main(["mine", "-tl", str(targets), "-w", str(words), "--no-extract"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [report["valid_params"] for report in payload] == [["debug"], ["debug"]]


@pytest.mark.parametrize(
    "argv",
    [
        ["validate", "-u", "ftp://x/"],
        ["fuzz", "-u", "http://x/", "-w", "/nonexistent/wordlist.txt"],
        ["mine", "-u", "http://x/", "-w", "/nonexistent/wordlist.txt", "-m", "DELETE"],
        ["hybrid", "-u", "http://x/", "-m", "XML"],
        ["fuzz", "-u", "http://x/", "-c", "0"],
        ["validate", "-u", "http://x/?q=1", "-c", "-3"],
    ],
)
def test_cli_configuration_errors_exit_2(stub_cli, capsys, argv, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "wordlist.txt").write_text("admin\n", encoding="utf-8")
    (tmp_path / "param_wordlist.txt").write_text("debug\n", encoding="utf-8")

    assert cli_main.main(argv) == 2
    assert "error:" in capsys.readouterr().err
    assert stub_cli.requested_urls() == []


@pytest.mark.parametrize(("env", "argv_flag", "expected"), [("1", [], True), ("0", ["-v"], True), ("0", [], False)])
def test_cli_verbose_from_flag_or_environment(stub_cli, monkeypatch, env, argv_flag, expected):
    calls = []
    monkeypatch.setattr(cli_main, "setup_logging", lambda level, verbose=False: calls.append(verbose))
    monkeypatch.setenv("RECONKIT_VERBOSE", env)

    assert cli_main.main(["validate", "-u", "http://x/search?q=test", *argv_flag]) == 0
    assert calls == [expected]


def test_reconkit_reflect_params_then_classify():
    stub = StubHttpClient(handler=site)
    kit = _kit(stub)

    plain = kit.reflect_params("http://x/", ["q", "page", "debug"], symbol="zz7")
    assert plain.valid_params == ["q"]
    assert plain.reflected_urls == ["http://x/?q=zz7"]
    assert plain.findings == []
    assert set(plain.stats) == {"reflect"}

    classified = kit.reflect_params("http://x/", ["q"], symbol="zz7", classify=True)
    assert [(item.param, item.highest_risk) for item in classified.vulnerable_params] == [("q", RiskLevel.CRITICAL)]
    assert classified.stats["reflection"]["inject"] == 1


def test_cli_reflect_uses_symbol_flag(stub_cli, tmp_path, capsys):
    words = tmp_path / "params.txt"
    words.write_text("q\npage\n", encoding="utf-8")

    assert cli_main.main(["reflect", "-u", "http://x/", "-w", str(words), "-s", "zz7"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["reflected_urls"] == ["http://x/?q=zz7"]
    assert payload["valid_params"] == ["q"]
