from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

from playwright.async_api import Page

from tonfern_matrix.driver import EnvironmentDriver, TonfernSurface
from tonfern_matrix.fixtures import EdgeAssets


@dataclass
class SuiteContext:
    """Everything one environment's scenarios share.

    `protected_pdf` is written by `protect.main_download` and read by the
    unlock scenarios; it stays None when the protect scenario failed.
    """

    driver: EnvironmentDriver
    assets: EdgeAssets
    protected_pdf: Path | None = None

    @property
    def page(self) -> Page:
        return self.driver.page

    @property
    def surface(self) -> TonfernSurface:
        return self.driver.surface


Scenario = Callable[[SuiteContext], Awaitable[dict[str, Any]]]
