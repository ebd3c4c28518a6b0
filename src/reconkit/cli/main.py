# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""ReconKit CLI."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, TextIO

from ..config import load_http_settings, load_scan_settings
from ..discovery import BlacklistCriteria
from ..errors import ConfigurationError
from ..http import create_default_http_client, parse_header_pairs
from ..log import setup_logging
from ..miner import RequestShape, parse_data_pairs
from ..models import ScanReport
from ..runtime import ReconKit
from ..utils.wordlist import read_lines
from ..version import __version__

logger = logging.getLogger(__name__)

CLI_TEXT_TRUNCATION_BYTES = 4096
EXIT_CONFIG_ERROR = 2


def _add_common(parser: argparse.ArgumentParser, *, output: str) -> None:
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("-u", "--url", help="Target URL")
    target.add_argument("-tl", "--target-list", help="File with one target URL per line")
    parser.add_argument("-o", "--output", default=None, help=f"Write JSON results to this file (e.g. {output})")
    parser.add_argument("-c", "--concurrency", type=int, default=None, help="Concurrent requests per pool")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every probe failure and filter decision")
    parser.add_argument("-ua", "--user-agent", default=None, help="User-Agent header sent with every request")
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    parser.add_argument("--batch-timeout", type=float, default=None, help="Stop dispatching new probes after N seconds")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    parser.add_argument("--log-level", default=None, help="Logging level when not verbose (default: INFO)")


def _add_blacklist(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("blacklist", "Comma-separated values; a probe matching any of them is dropped")
    group.add_argument("-bs", "--blacklist-status", default=None, help="Status codes, e.g. 404,500")
    group.add_argument("-bl", "--blacklist-length", default=None, help="Exact body lengths in bytes")
    group.add_argument("-bw", "--blacklist-words", default=None, help="Exact word counts")
    group.add_argument("-blc", "--blacklist-lines", default=None, help="Exact non-empty line counts")
    group.add_argument("-bsw", "--blacklist-search", default=None, help="Case-insensitive substrings")
    group.add_argument("-br", "--blacklist-regex", default=None, help="Regular expressions searched in the body")


def _add_request_shape(parser: argparse.ArgumentParser, *, data_flags: tuple[str, ...]) -> None:
    parser.add_argument("-m", "--method", default="GET", help="GET, POST, JSON or XML (default: GET)")
    parser.add_argument("-H", "--headers", default=None, help="Custom headers, e.g. 'Header1:Value1,Header2:Value2'")
    parser.add_argument(*data_flags, dest="data", default=None, help="Request data, e.g. 'key1:value1,key2:value2'")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reconkit",
        description="ReconKit web reconnaissance (directory fuzzing, parameter mining, reflection analysis)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    fuzz = commands.add_parser("fuzz", help="Brute-force directories and files")
    _add_common(fuzz, output="fuzz_results.json")
    fuzz.add_argument("-w", "--wordlist", default="wordlist.txt", help="Directory wordlist (default: wordlist.txt)")
    fuzz.add_argument("-e", "--extensions", default="", help="Extensions to try, e.g. php,html")
    fuzz.add_argument("-d", "--depth", type=int, default=None, help="Maximum recursion depth (default: 2)")
    _add_blacklist(fuzz)

    mine = commands.add_parser("mine", help="Discover hidden request parameters")
    _add_common(mine, output="miner_results.json")
    mine.add_argument("-w", "--wordlist", default="wordlist.txt", help="Parameter wordlist (default: wordlist.txt)")
    _add_request_shape(mine, data_flags=("-d", "--data"))
    mine.add_argument("--no-extract", action="store_true", help="Do not harvest names from the baseline response")

    validate = commands.add_parser("validate", help="Classify reflected query parameters")
    _add_common(validate, output="validator_results.json")

    reflect = commands.add_parser("reflect", help="Find parameters that echo a marker value back")
    _add_common(reflect, output="reflect_results.json")
    reflect.add_argument("-w", "--wordlist", default="wordlist.txt", help="Parameter wordlist (default: wordlist.txt)")
    reflect.add_argument("-s", "--symbol", default=None, help="Value to look for in responses (default: test)")
    reflect.add_argument("--classify", action="store_true", help="Run context and risk analysis on every reflected URL")

    hybrid = commands.add_parser("hybrid", help="Fuzz directories, then mine parameters")
    _add_common(hybrid, output="hybrid_results.json")
    hybrid.add_argument("-w", "--wordlist", default="wordlist.txt", help="Directory wordlist (default: wordlist.txt)")
    hybrid.add_argument(
        "-p", "--param-wordlist", default="param_wordlist.txt", help="Parameter wordlist (default: param_wordlist.txt)"
    )
    hybrid.add_argument("-s", "--seeds", default=None, help="File with extra seed URLs to fuzz")
    hybrid.add_argument("-e", "--extensions", default="", help="Extensions to try, e.g. php,html")
    hybrid.add_argument("-d", "--depth", type=int, default=None, help="Maximum recursion depth (default: 2)")
    _add_request_shape(hybrid, data_flags=("--data",))
    _add_blacklist(hybrid)
    return parser


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    keep = max_bytes - len(suffix.encode("utf-8"))
    if keep <= 0:
        return suffix.encode("utf-8")[:max_bytes].decode("utf-8", errors="ignore")
    return raw[:keep].decode("utf-8", errors="ignore") + suffix


def _truncate_for_cli(value: Any, *, max_bytes: int) -> Any:
    if isinstance(value, str):
        return _truncate_text_bytes(value, max_bytes)
    if isinstance(value, dict):
        return {k: _truncate_for_cli(v, max_bytes=max_bytes) for k, v in value.items()}
    if isinstance(value, list):
        return [_truncate_for_cli(v, max_bytes=max_bytes) for v in value]
    return value


def _print_json(data: dict[str, Any] | Any, stream: TextIO | None = None) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    out = stream or sys.stdout
    json.dump(_truncate_for_cli(payload, max_bytes=CLI_TEXT_TRUNCATION_BYTES), out, indent=2, sort_keys=True)
    out.write("\n")


def _emit(reports: list[ScanReport], output: str | None) -> None:
    payload: dict[str, Any] | list[dict[str, Any]]
    payload = reports[0].to_dict() if len(reports) == 1 else [report.to_dict() for report in reports]
    if not output:
        _print_json(payload)
        return
    try:
        with open(output, "w", encoding="utf-8") as handle:
            _print_json(payload, handle)
    except OSError as exc:
        raise ConfigurationError(f"Failed to write {output}: {exc}") from exc
    logger.info("Results saved to %s", output)


def _targets(args: argparse.Namespace) -> list[str]:
    if args.target_list:
        targets = read_lines(args.target_list)
        if not targets:
            raise ConfigurationError(f"No targets in {args.target_list}")
        return targets
    return [args.url]


def _blacklist(args: argparse.Namespace) -> BlacklistCriteria:
    return BlacklistCriteria.from_strings(
        status_codes=args.blacklist_status,
        lengths=args.blacklist_length,
        word_counts=args.blacklist_words,
        line_counts=args.blacklist_lines,
        search_words=args.blacklist_search,
        regexes=args.blacklist_regex,
    )


def _shape(args: argparse.Namespace) -> RequestShape:
    shape = RequestShape(
        method=args.method,
        headers=parse_header_pairs(args.headers),
        data=parse_data_pairs(args.data),
    )
    shape.validate()
    return shape


def _extensions(raw: str) -> list[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


def _run(args: argparse.Namespace) -> list[ScanReport]:
    http_settings = load_http_settings()
    if args.ignore_ssl_errors:
        http_settings.verify_ssl = False
    if args.user_agent:
        http_settings.user_agent = args.user_agent
    if args.timeout is not None:
        http_settings.timeout = args.timeout

    scan_settings = load_scan_settings()
    if args.concurrency is not None:
        if args.concurrency < 1:
            raise ConfigurationError(f"concurrency must be at least 1 (got {args.concurrency})")
        scan_settings.concurrency = args.concurrency
        scan_settings.validator_concurrency = args.concurrency
    if args.batch_timeout is not None:
        scan_settings.batch_timeout = args.batch_timeout

    targets = _targets(args)
    http_client = create_default_http_client(http_settings)
    reports: list[ScanReport] = []

    with ReconKit(http_client=http_client, scan_settings=scan_settings) as kit:
        if args.command == "fuzz":
            wordlist = read_lines(args.wordlist)
            blacklist = _blacklist(args)
            for target in targets:
                logger.info("Processing target: %s", target)
                reports.append(
                    kit.discover(
                        target,
                        wordlist,
                        extensions=_extensions(args.extensions),
                        blacklist=blacklist,
                        max_depth=args.depth,
                    )
                )
        elif args.command == "mine":
            if args.no_extract:
                kit.miner_settings.extract_from_baseline = False
            wordlist = read_lines(args.wordlist)
            shape = _shape(args)
            for target in targets:
                logger.info("Processing target: %s", target)
                reports.append(kit.mine(target, wordlist, shape=shape))
        elif args.command == "validate":
            reports.append(kit.validate(targets))
        elif args.command == "reflect":
            wordlist = read_lines(args.wordlist)
            for target in targets:
                logger.info("Processing target: %s", target)
                reports.append(kit.reflect_params(target, wordlist, symbol=args.symbol, classify=args.classify))
        elif args.command == "hybrid":
            dir_words = read_lines(args.wordlist)
            param_words = read_lines(args.param_wordlist)
            seeds = read_lines(args.seeds) if args.seeds else []
            shape = _shape(args)
            blacklist = _blacklist(args)
            for target in targets:
                logger.info("Processing target: %s", target)
                reports.append(
                    kit.hybrid(
                        target,
                        dir_words,
                        param_words,
                        seeds=seeds,
                        extensions=_extensions(args.extensions),
                        blacklist=blacklist,
                        max_depth=args.depth,
                        shape=shape,
                    )
                )
    return reports


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    verbose = args.verbose or load_scan_settings().verbose
    setup_logging(args.log_level or os.getenv("RECONKIT_LOG_LEVEL", "INFO"), verbose=verbose)

    try:
        reports = _run(args)
        _emit(reports, args.output)
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        print("interrupted", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
