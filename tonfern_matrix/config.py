"""
Run configuration.

Every setting comes from a TONFERN_* environment variable and can be overridden
by the matching runner flag:

  TONFERN_URL          --url          page under test
  TONFERN_BROWSERS     --browsers     comma-separated Playwright engines
  TONFERN_BASE_PDF_1/2 --base-pdf     baseline documents (generated in-page when unset)
  TONFERN_OUT_ROOT     --out-root     parent of the timestamped run directories
  TONFERN_HEADFUL=1    --headful      show browser windows
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping


DEFAULT_URL = "http://127.0.0.1:4173/Tonfernpdf.html"
DEFAULT_BROWSERS = ("chromium", "webkit")
OUT_ROOT_PARTS = (".agent", "artifacts", "full-matrix")

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

_TRUTHY = {"1", "true", "yes", "on"}


def default_out_root() -> Path:
    """Run directories live under the current working directory."""
    return Path.cwd().joinpath(*OUT_ROOT_PARTS)


def parse_browsers(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated engine list; blanks are dropped, order kept."""
    if raw is None:
        return DEFAULT_BROWSERS
    names = tuple(s.strip() for s in raw.split(",") if s.strip())
    return names or DEFAULT_BROWSERS


@dataclass(frozen=True)
class MatrixConfig:
    url: str = DEFAULT_URL
    browsers: tuple[str, ...] = DEFAULT_BROWSERS
    base_pdfs: tuple[Path, ...] = field(default_factory=tuple)
    out_root: Path = field(default_factory=default_out_root)
    headless: bool = True
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "MatrixConfig":
        env = os.environ if environ is None else environ
        base = tuple(
            Path(env[key]).expanduser()
            for key in ("TONFERN_BASE_PDF_1", "TONFERN_BASE_PDF_2")
            if env.get(key, "").strip()
        )
        out_root = env.get("TONFERN_OUT_ROOT", "").strip()
        return cls(
            url=env.get("TONFERN_URL", "").strip() or DEFAULT_URL,
            browsers=parse_browsers(env.get("TONFERN_BROWSERS")),
            base_pdfs=base,
            out_root=Path(out_root).expanduser() if out_root else default_out_root(),
            headless=env.get("TONFERN_HEADFUL", "").strip().lower() not in _TRUTHY,
        )

    def with_overrides(self, **changes) -> "MatrixConfig":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def validate(self) -> None:
        if not self.url:
            raise ValueError("target URL is empty")
        if self.base_pdfs and len(self.base_pdfs) != 2:
            raise ValueError(f"expected exactly 2 baseline PDFs, got {len(self.base_pdfs)}")
        for p in self.base_pdfs:
            if not p.is_file():
                raise ValueError(f"baseline PDF not found: {p}")
