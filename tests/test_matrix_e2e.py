"""
Live full-matrix run against a served TonfernPDF page.

Skipped unless TONFERN_E2E=1. Needs the page reachable at TONFERN_URL and the
Playwright browsers installed (`playwright install chromium`).

  TONFERN_E2E=1 TONFERN_BROWSERS=chromium pytest tests/test_matrix_e2e.py -s
"""

from __future__ import annotations

import asyncio
import json
import os

import pytest

from tonfern_matrix.config import MatrixConfig
from tonfern_matrix.runner import run_matrix, write_artifacts
from tonfern_matrix.results import run_stamp
from tonfern_matrix.scenarios import scenario_ids


pytestmark = [
    pytest.mark.e2e,
    pytest.mark.skipif(os.environ.get("TONFERN_E2E") != "1", reason="set TONFERN_E2E=1 to drive real browsers"),
]


def test_full_matrix(tmp_path):
    config = MatrixConfig.from_env().with_overrides(out_root=tmp_path)
    stamp = run_stamp()
    run_dir = tmp_path / stamp
    run_dir.mkdir()

    suites = asyncio.run(run_matrix(config, run_dir))
    write_artifacts(run_dir, stamp, suites, config)

    assert [s.browser for s in suites] == list(config.browsers)
    for s in suites:
        ids = [r.id for r in s.results]
        assert ids == scenario_ids(), f"{s.browser}: {s.results[0].note if s.results else 'no results'}"
        for r in s.results:
            assert r.ended_at >= r.started_at
        on_disk = json.loads((run_dir / s.browser / "results.json").read_text(encoding="utf-8"))
        assert on_disk["passCount"] == s.pass_count
        failed = [f"{r.id}: {r.note}" for r in s.results if not r.passed]
        print(f"\n{s.browser}: pass {s.pass_count}, fail {s.fail_count}")
        for line in failed:
            print(f"  ✗ {line}")

    assert (run_dir / "report.md").exists()
    assert (run_dir / "summary.json").exists()
