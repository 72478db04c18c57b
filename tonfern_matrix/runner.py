"""
Full-matrix run orchestrator.

Runs the scenario library once per requested browser, strictly one after the
other, then writes report.md and summary.json into a timestamped run directory.

Usage:
  python -m tonfern_matrix
  python -m tonfern_matrix --browsers chromium,firefox --url http://127.0.0.1:4173/Tonfernpdf.html
  python -m tonfern_matrix --base-pdf a.pdf --base-pdf b.pdf --headful --debug

The exit code only reflects whether the run itself completed. Failed cases are
reported in the artifacts; pass --strict to also exit 1 when any case failed.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import traceback
from pathlib import Path

from playwright.async_api import async_playwright

from tonfern_matrix.config import SUPPORTED_BROWSERS, MatrixConfig, parse_browsers
from tonfern_matrix.log import banner, log, set_debug
from tonfern_matrix.report import machine_summary, render_report
from tonfern_matrix.results import SuiteSummary, run_stamp
from tonfern_matrix.suite import run_environment_suite, write_json


async def _run_isolated(pw, browser_name: str, run_dir: Path, config: MatrixConfig) -> SuiteSummary:
    if browser_name not in SUPPORTED_BROWSERS:
        log(f"Unsupported browser: {browser_name}", "warning")
        return SuiteSummary.failed(browser_name, config.url, "browser.unsupported", f"Unsupported browser {browser_name}")
    try:
        return await run_environment_suite(browser_name, getattr(pw, browser_name), run_dir, config)
    except Exception as e:
        log(f"{browser_name} suite failed: {e}", "error")
        return SuiteSummary.failed(
            browser_name,
            config.url,
            "browser.run_failed",
            f"{type(e).__name__}: {e}\n{traceback.format_exc()}",
        )


async def run_matrix(config: MatrixConfig, run_dir: Path) -> list[SuiteSummary]:
    suites: list[SuiteSummary] = []
    async with async_playwright() as pw:
        for browser_name in config.browsers:
            suites.append(await _run_isolated(pw, browser_name, run_dir, config))
    return suites


def write_artifacts(run_dir: Path, stamp: str, suites: list[SuiteSummary], config: MatrixConfig) -> dict:
    report_path = run_dir / "report.md"
    report_path.write_text(render_report(stamp, suites, config.url, config.base_pdfs), encoding="utf-8")
    summary = machine_summary(stamp, report_path, suites)
    write_json(run_dir / "summary.json", summary)
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Full-matrix Playwright regression run for the TonfernPDF page.")
    parser.add_argument("--url", help="Page under test (default: $TONFERN_URL or the local preview server).")
    parser.add_argument("--browsers", help="Comma-separated engines: chromium, firefox, webkit (default: chromium,webkit).")
    parser.add_argument(
        "--base-pdf",
        action="append",
        type=Path,
        dest="base_pdfs",
        help="Baseline PDF; pass twice. Generated in-page when omitted.",
    )
    parser.add_argument("--out-root", type=Path, help="Parent directory for timestamped run directories.")
    parser.add_argument("--headful", action="store_true", help="Show browser windows.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("--strict", action="store_true", help="Exit 1 when any case failed.")
    return parser


def main(argv: list[str]) -> int:
    args = build_parser().parse_args(argv)
    config = MatrixConfig.from_env().with_overrides(
        url=args.url,
        browsers=parse_browsers(args.browsers) if args.browsers else None,
        base_pdfs=tuple(args.base_pdfs) if args.base_pdfs else None,
        out_root=args.out_root,
        headless=False if args.headful else None,
        debug=True if args.debug else None,
    )
    set_debug(config.debug)
    config.validate()

    stamp = run_stamp()
    run_dir = config.out_root / stamp
    run_dir.mkdir(parents=True, exist_ok=True)

    banner("TONFERNPDF FULL-MATRIX RUN")
    log(f"URL: {config.url}", "info")
    log(f"Browsers: {', '.join(config.browsers)}", "info")
    log(f"Run directory: {run_dir}", "info")

    suites = asyncio.run(run_matrix(config, run_dir))
    summary = write_artifacts(run_dir, stamp, suites, config)

    banner("SUMMARY")
    for s in suites:
        print(f"{s.browser:10s} pass {s.pass_count:3d}  fail {s.fail_count:3d}")
    print(json.dumps(summary, indent=2))

    if args.strict and any(s.fail_count for s in suites):
        return 1
    return 0


def cli() -> None:
    try:
        rc = main(sys.argv[1:])
    except KeyboardInterrupt:
        print("\n\n⚠️  Run interrupted by user")
        rc = 1
    except Exception as e:
        log(f"Fatal error: {e}", "error")
        traceback.print_exc()
        rc = 1
    raise SystemExit(rc)
