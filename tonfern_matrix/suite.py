"""
Run the whole scenario library against one browser engine.
"""

from __future__ import annotations

import json
from pathlib import Path

from playwright.async_api import BrowserType

from tonfern_matrix.config import MatrixConfig
from tonfern_matrix.driver import launch_environment
from tonfern_matrix.fixtures import create_edge_assets
from tonfern_matrix.log import banner, log
from tonfern_matrix.results import ScenarioResult, SuiteSummary, now_iso, run_case
from tonfern_matrix.scenarios import SCENARIOS, SuiteContext


def write_json(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


async def run_environment_suite(
    browser_name: str,
    browser_type: BrowserType,
    run_dir: Path,
    config: MatrixConfig,
) -> SuiteSummary:
    """Launch one environment, run every scenario in order, persist results.json.

    Scenario failures are recorded, never raised. Anything raised from here
    (launch, navigation, fixture building) is an environment-level failure for
    the caller to handle.
    """
    banner(f"SUITE: {browser_name}")
    browser_dir = run_dir / browser_name
    downloads_dir = browser_dir / "downloads"
    edge_dir = browser_dir / "edge-data"
    downloads_dir.mkdir(parents=True, exist_ok=True)
    edge_dir.mkdir(parents=True, exist_ok=True)

    results: list[ScenarioResult] = []
    async with launch_environment(browser_name, browser_type, downloads_dir, headless=config.headless) as driver:
        await driver.load(config.url)
        assets = await create_edge_assets(driver.surface, edge_dir, config.base_pdfs)
        ctx = SuiteContext(driver=driver, assets=assets)

        for case_id, scenario in SCENARIOS:
            await run_case(results, case_id, lambda scenario=scenario: scenario(ctx))

        summary = SuiteSummary(
            browser=browser_name,
            timestamp=now_iso(),
            url=config.url,
            results=tuple(results),
            console_errors=tuple(driver.console_errors),
            console_warnings=tuple(driver.console_warnings),
        )

    write_json(browser_dir / "results.json", summary.to_dict())
    log(f"{browser_name}: pass {summary.pass_count}, fail {summary.fail_count}", "info")
    return summary
