"""
Synthetic input files built once per environment.

PNGs are written from embedded base64; PDFs are built inside the page through
its own PDFLib so they match what the page can read back.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path

from tonfern_matrix.driver import TonfernSurface
from tonfern_matrix.log import log


PNG_RED = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/x8AAwMCAO6lL4sAAAAASUVORK5CYII="
PNG_BLUE = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNk+A8AAwMBAXKUx9kAAAAASUVORK5CYII="


@dataclass(frozen=True)
class EdgeAssets:
    img1: Path
    img2: Path
    no_image_pdf: Path
    image_pdf: Path
    base_pdf_1: Path
    base_pdf_2: Path

    @property
    def baselines(self) -> tuple[Path, Path]:
        return (self.base_pdf_1, self.base_pdf_2)


def write_png_fixtures(edge_dir: Path) -> tuple[Path, Path]:
    edge_dir.mkdir(parents=True, exist_ok=True)
    img1 = edge_dir / "edge-red.png"
    img2 = edge_dir / "edge-blue.png"
    img1.write_bytes(base64.b64decode(PNG_RED))
    img2.write_bytes(base64.b64decode(PNG_BLUE))
    return img1, img2


async def create_edge_assets(
    surface: TonfernSurface,
    edge_dir: Path,
    base_pdfs: tuple[Path, ...] = (),
) -> EdgeAssets:
    img1, img2 = write_png_fixtures(edge_dir)

    no_image_pdf = edge_dir / "no-image.pdf"
    no_image_pdf.write_bytes(
        await surface.build_pdf(["Tonfern QA No-Image PDF - extract-image negative test"])
    )

    image_pdf = edge_dir / "with-image.pdf"
    image_pdf.write_bytes(await surface.build_pdf(["Tonfern QA Image PDF"], image_png_b64=PNG_RED))

    if base_pdfs:
        base_1, base_2 = base_pdfs
    else:
        base_1 = edge_dir / "baseline-1.pdf"
        base_2 = edge_dir / "baseline-2.pdf"
        base_1.write_bytes(await surface.build_pdf([f"Tonfern baseline A - page {i}" for i in (1, 2, 3)]))
        base_2.write_bytes(await surface.build_pdf([f"Tonfern baseline B - page {i}" for i in (1, 2)]))
        log("No baseline PDFs configured; generated baseline-1.pdf and baseline-2.pdf", "debug")

    return EdgeAssets(
        img1=img1,
        img2=img2,
        no_image_pdf=no_image_pdf,
        image_pdf=image_pdf,
        base_pdf_1=base_1,
        base_pdf_2=base_2,
    )
