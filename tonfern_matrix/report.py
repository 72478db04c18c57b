"""
Render run results. Pure functions of their inputs; no file or network access.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

from tonfern_matrix.results import SuiteSummary


def _cell(text: str) -> str:
    return text.replace("|", "\\|")


def render_report(
    run_stamp: str,
    suites: Sequence[SuiteSummary],
    url: str,
    baseline_pdfs: Sequence[Path] = (),
) -> str:
    lines: list[str] = []
    lines.append("# TonfernPDF Full-Matrix Test Report")
    lines.append("")
    lines.append(f"- Run: {run_stamp}")
    lines.append(f"- URL: {url}")
    if baseline_pdfs:
        lines.append("- Baseline files: " + ", ".join(f"`{p}`" for p in baseline_pdfs))
    else:
        lines.append("- Baseline files: generated in-page per browser (`edge-data/baseline-*.pdf`)")
    lines.append("")

    for s in suites:
        lines.append(f"## {s.browser}")
        lines.append("")
        lines.append(f"- Pass: {s.pass_count}")
        lines.append(f"- Fail: {s.fail_count}")
        lines.append(f"- Console errors: {len(s.console_errors)}")
        lines.append(f"- Console warnings: {len(s.console_warnings)}")
        lines.append("")
        lines.append("### Cases")
        lines.append("")
        lines.append("| Case | Status | Notes |")
        lines.append("|---|---|---|")
        for r in s.results:
            status = "PASS" if r.passed else "FAIL"
            lines.append(f"| {r.id} | {status} | {_cell(r.note)} |")
        lines.append("")

    lines.append("## Cross-Browser Comparison")
    lines.append("")
    if len(suites) >= 2:
        for s in suites:
            lines.append(f"- {s.browser}: pass {s.pass_count}, fail {s.fail_count}")
        ids_by_suite = [{r.id: r.passed for r in s.results} for s in suites]
        diverging = sorted(
            case_id
            for case_id in set().union(*ids_by_suite)
            if len({outcome.get(case_id) for outcome in ids_by_suite}) > 1
        )
        if diverging:
            lines.append("")
            lines.append("Cases with different outcomes across browsers:")
            lines.append("")
            for case_id in diverging:
                cells = ", ".join(
                    f"{s.browser}={_status(outcome.get(case_id))}" for s, outcome in zip(suites, ids_by_suite)
                )
                lines.append(f"- {case_id}: {cells}")
    else:
        lines.append("- Only one browser ran; nothing to compare.")
    lines.append("")
    return "\n".join(lines)


def _status(passed: bool | None) -> str:
    if passed is None:
        return "n/a"
    return "PASS" if passed else "FAIL"


def machine_summary(run_stamp: str, report_path: Path, suites: Sequence[SuiteSummary]) -> dict[str, Any]:
    return {
        "runStamp": run_stamp,
        "report": str(report_path),
        "suites": [
            {"browser": s.browser, "pass": s.pass_count, "fail": s.fail_count}
            for s in suites
        ],
    }
