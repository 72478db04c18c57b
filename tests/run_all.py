"""
Unified test runner for this repo.

Goal: provide a single entry point that can be used on Windows/macOS/Linux, while
keeping deterministic, inspectable behavior.

Usage (recommended):
  python tests/run_all.py                      # unit tests only (no browser)
  python tests/run_all.py --with-matrix        # + live full-matrix run against $TONFERN_URL
  python tests/run_all.py --with-matrix --browsers chromium --strict
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class StepResult:
    name: str
    status: str  # PASS | FAIL | SKIP
    rc: int


def _run_step(*, name: str, argv: list[str], cwd: Path, env: dict[str, str] | None = None) -> StepResult:
    print("\n" + "=" * 70)
    print(f"[step] {name}")
    print("=" * 70)
    print(" ".join(argv))
    print("")

    proc = subprocess.run(argv, cwd=str(cwd), env=env, text=True)
    if proc.returncode == 0:
        return StepResult(name=name, status="PASS", rc=0)
    return StepResult(name=name, status="FAIL", rc=proc.returncode)


def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(description="Unified test runner (unit tests + optional live matrix + housekeeping).")
    parser.add_argument("--with-matrix", action="store_true", help="Run the live full-matrix suite (needs the page served).")
    parser.add_argument("--browsers", help="Engines for the live matrix (default: $TONFERN_BROWSERS or chromium,webkit).")
    parser.add_argument("--headful", action="store_true")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--strict", action="store_true", help="Fail this step when any matrix case failed.")
    parser.add_argument("--keep-runs", type=int, default=5, help="Run directories kept by the cleanup step.")
    parser.add_argument("--skip-unit", action="store_true")
    parser.add_argument("--skip-cleanup", action="store_true")
    args = parser.parse_args(argv)

    py = sys.executable
    results: list[StepResult] = []

    if not args.skip_unit:
        results.append(
            _run_step(
                name="Unit tests (no browser)",
                argv=[py, "-m", "pytest", "-q", "tests", "-m", "not e2e"],
                cwd=PROJECT_ROOT,
            )
        )
        if results[-1].status == "FAIL":
            return results[-1].rc

    if args.with_matrix:
        matrix_args = [py, "-m", "tonfern_matrix"]
        if args.browsers:
            matrix_args.extend(["--browsers", args.browsers])
        if args.headful:
            matrix_args.append("--headful")
        if args.debug:
            matrix_args.append("--debug")
        if args.strict:
            matrix_args.append("--strict")
        results.append(_run_step(name="Playwright: full matrix", argv=matrix_args, cwd=PROJECT_ROOT, env=dict(os.environ)))
        if results[-1].status == "FAIL":
            return results[-1].rc
    else:
        results.append(StepResult(name="Playwright: full matrix", status="SKIP", rc=0))

    if not args.skip_cleanup:
        results.append(
            _run_step(
                name=f"Cleanup full-matrix runs (keep {args.keep_runs} most recent)",
                argv=[py, "lib/tools/cleanup_matrix_runs.py", "--keep", str(args.keep_runs)],
                cwd=PROJECT_ROOT,
            )
        )
        if results[-1].status == "FAIL":
            return results[-1].rc

    print("\n" + "=" * 70)
    print("SUMMARY")
    print("=" * 70)
    for r in results:
        print(f"{r.status:4s}  {r.name}")
    print("=" * 70)

    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
