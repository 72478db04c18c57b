"""
Run orchestrator tests: environment isolation, artifacts, exit codes.

Playwright and the per-browser suite are replaced with fakes so no browser
is launched.
"""

from __future__ import annotations

import json
import sys
from contextlib import asynccontextmanager

import pytest

from tonfern_matrix import runner
from tonfern_matrix.results import ScenarioResult, SuiteSummary


class FakePlaywright:
    chromium = "chromium-type"
    firefox = "firefox-type"
    webkit = "webkit-type"


@asynccontextmanager
async def fake_async_playwright():
    yield FakePlaywright()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ["TONFERN_URL", "TONFERN_BROWSERS", "TONFERN_BASE_PDF_1", "TONFERN_BASE_PDF_2", "TONFERN_HEADFUL"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("TONFERN_OUT_ROOT", str(tmp_path / "runs"))
    monkeypatch.setattr(runner, "async_playwright", fake_async_playwright)


@pytest.fixture
def calls(monkeypatch):
    seen: list[tuple[str, object]] = []

    async def fake_suite(browser_name, browser_type, run_dir, config):
        seen.append((browser_name, browser_type))
        if browser_name == "webkit":
            raise RuntimeError("browserType.launch: Executable doesn't exist")
        return SuiteSummary(
            browser=browser_name,
            timestamp="ts",
            url=config.url,
            results=(
                ScenarioResult("preflight.load_and_tools", True, "t0", "t1"),
                ScenarioResult("merge.main_reorder_download", False, "t0", "t1", {"error": "ScenarioError: empty"}),
            ),
        )

    monkeypatch.setattr(runner, "run_environment_suite", fake_suite)
    return seen


def _only_run_dir(tmp_path):
    runs = list((tmp_path / "runs").iterdir())
    assert len(runs) == 1
    return runs[0]


def test_environment_failures_are_isolated(calls, tmp_path, capsys):
    rc = runner.main(["--browsers", "chromium,webkit,netscape,firefox"])
    assert rc == 0
    assert calls == [("chromium", "chromium-type"), ("webkit", "webkit-type"), ("firefox", "firefox-type")]

    run_dir = _only_run_dir(tmp_path)
    summary = json.loads((run_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["suites"] == [
        {"browser": "chromium", "pass": 1, "fail": 1},
        {"browser": "webkit", "pass": 0, "fail": 1},
        {"browser": "netscape", "pass": 0, "fail": 1},
        {"browser": "firefox", "pass": 1, "fail": 1},
    ]
    assert summary["report"] == str(run_dir / "report.md")

    report = (run_dir / "report.md").read_text(encoding="utf-8")
    assert "| browser.run_failed | FAIL | RuntimeError: browserType.launch: Executable doesn't exist |" in report
    assert "| browser.unsupported | FAIL | Unsupported browser netscape |" in report
    assert "- chromium: pass 1, fail 1" in report

    out = capsys.readouterr().out
    assert '"runStamp"' in out
    print("✓ one failed environment does not stop the others")


def test_default_browsers(calls):
    assert runner.main([]) == 0
    assert [name for name, _ in calls] == ["chromium", "webkit"]


def test_strict_exit_code(calls):
    assert runner.main(["--browsers", "chromium", "--strict"]) == 1


def test_missing_baseline_is_fatal(calls, tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["tonfern-matrix", "--base-pdf", str(tmp_path / "nope.pdf")])
    with pytest.raises(SystemExit) as exc:
        runner.cli()
    assert exc.value.code == 1
    assert calls == []


def test_cli_success_exits_zero(calls, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["tonfern-matrix", "--browsers", "chromium"])
    with pytest.raises(SystemExit) as exc:
        runner.cli()
    assert exc.value.code == 0


def test_overrides_reach_suite(monkeypatch, tmp_path):
    seen = {}

    async def fake_suite(browser_name, browser_type, run_dir, config):
        seen["config"] = config
        seen["run_dir"] = run_dir
        return SuiteSummary(browser_name, "ts", config.url, ())

    monkeypatch.setattr(runner, "run_environment_suite", fake_suite)
    a = tmp_path / "a.pdf"
    b = tmp_path / "b.pdf"
    a.write_bytes(b"%PDF-1.4")
    b.write_bytes(b"%PDF-1.4")
    rc = runner.main(
        ["--url", "http://host/Tonfernpdf.html", "--browsers", "firefox", "--base-pdf", str(a), "--base-pdf", str(b), "--headful"]
    )
    assert rc == 0
    cfg = seen["config"]
    assert cfg.url == "http://host/Tonfernpdf.html"
    assert cfg.browsers == ("firefox",)
    assert cfg.base_pdfs == (a, b)
    assert cfg.headless is False
    assert seen["run_dir"].parent == tmp_path / "runs"
