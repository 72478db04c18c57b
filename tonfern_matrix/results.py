"""
Result model and the per-scenario isolation boundary.

`run_case` is the only place a scenario failure is caught: whatever a scenario
raises becomes a failed `ScenarioResult` and the suite carries on.
"""

from __future__ import annotations

import traceback
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping

from tonfern_matrix.log import log


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def run_stamp() -> str:
    """Filesystem-safe UTC timestamp used to name a run directory."""
    return now_iso().replace(":", "-").replace(".", "-")


class ScenarioError(AssertionError):
    """An observable outcome did not match what the scenario expects."""


def expect(condition: object, message: str) -> None:
    if not condition:
        raise ScenarioError(message)


@dataclass(frozen=True)
class DownloadArtifact:
    suggested: str
    path: str
    bytes: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScenarioResult:
    id: str
    passed: bool
    started_at: str
    ended_at: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def note(self) -> str:
        """One-line report note: download name on success, first error line on failure."""
        if self.passed:
            download = self.details.get("download")
            if isinstance(download, DownloadArtifact):
                return download.suggested
            if isinstance(download, dict) and download.get("suggested"):
                return str(download["suggested"])
            return "ok"
        error = self.details.get("error")
        if not error:
            return "error"
        return str(error).strip().split("\n")[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pass": self.passed,
            "startedAt": self.started_at,
            "endedAt": self.ended_at,
            "details": _jsonable(self.details),
        }


@dataclass(frozen=True)
class SuiteSummary:
    browser: str
    timestamp: str
    url: str
    results: tuple[ScenarioResult, ...]
    console_errors: tuple[str, ...] = ()
    console_warnings: tuple[str, ...] = ()

    @property
    def pass_count(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def fail_count(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @classmethod
    def failed(cls, browser: str, url: str, case_id: str, error: str) -> "SuiteSummary":
        """Degenerate summary for an environment that could not run at all."""
        ts = now_iso()
        return cls(
            browser=browser,
            timestamp=ts,
            url=url,
            results=(ScenarioResult(case_id, False, ts, ts, {"error": error}),),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "browser": self.browser,
            "timestamp": self.timestamp,
            "url": self.url,
            "passCount": self.pass_count,
            "failCount": self.fail_count,
            "results": [r.to_dict() for r in self.results],
            "consoleErrors": list(self.console_errors),
            "consoleWarnings": list(self.console_warnings),
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, DownloadArtifact):
        return value.to_dict()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


async def run_case(
    results: list[ScenarioResult],
    case_id: str,
    fn: Callable[[], Awaitable[Mapping[str, Any] | None]],
) -> ScenarioResult:
    """Run one scenario and append exactly one result. Never raises."""
    started_at = now_iso()
    log(f"[CASE][START] {case_id}", "debug")
    try:
        returned = await fn()
        if returned is not None and not isinstance(returned, Mapping):
            raise TypeError(f"scenario returned {type(returned).__name__}, expected a mapping")
        details = dict(returned or {})
    except Exception as e:
        result = ScenarioResult(
            id=case_id,
            passed=False,
            started_at=started_at,
            ended_at=now_iso(),
            details={"error": f"{type(e).__name__}: {e}\n{traceback.format_exc()}"},
        )
        results.append(result)
        log(f"[CASE][FAIL] {case_id}: {result.note}", "error")
        return result

    result = ScenarioResult(
        id=case_id,
        passed=True,
        started_at=started_at,
        ended_at=now_iso(),
        details=details,
    )
    results.append(result)
    log(f"[CASE][PASS] {case_id}", "success")
    return result
