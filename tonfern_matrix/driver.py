"""
Environment driver: one browser, one context, one page per environment.

`TonfernSurface` is the only code that reaches into the page's own globals
(`showPage`, `showNotification`, `downloadBlob`, `PDFLib`, ...). Scenarios talk
to the page through it and through the Playwright page for plain DOM actions.
"""

from __future__ import annotations

import asyncio
import re
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable

from playwright.async_api import Browser, BrowserContext, BrowserType, Page

from tonfern_matrix.log import log
from tonfern_matrix.results import DownloadArtifact, ScenarioError


TOOL_PAGE: dict[str, str] = {
    "merge": "mergePage",
    "split": "splitPage",
    "compress": "compressPage",
    "pdf-jpg": "pdfToJpgPage",
    "jpg-pdf": "jpgToPdfPage",
    "pdf-word": "pdfToWordPage",
    "extract-img": "pdfToWordPage",
    "unlock": "unlockPage",
    "protect": "protectPage",
    "organize": "organizePage",
    "sign": "signPage",
    "watermark": "watermarkPage",
    "add-text": "addTextPage",
    "delete-pages": "deletePagesPage",
}

READY_SELECTOR = "#toolsGrid"
NOTIFICATION_SELECTOR = ".notification"
STALE_ATTR = "data-matrix-stale"


def basename_safe(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9._-]+", "_", name)


class _Undefined:
    def __repr__(self) -> str:
        return "undefined"


# JS `undefined` keyword sample; JSON only carries null.
UNDEFINED = _Undefined()


class TonfernSurface:
    """Explicit wrapper around the page-level functions the page exposes."""

    def __init__(self, page: Page):
        self.page = page

    async def show_page(self, tool_id: str) -> None:
        await self.page.evaluate("(id) => window.showPage(id)", tool_id)

    async def show_home_page(self) -> None:
        await self.page.evaluate("() => window.showHomePage()")

    async def notification_text(self) -> str:
        """Text of the newest notification not marked stale, or an empty string."""
        return await self.page.evaluate(
            """
            ({ sel, stale }) => {
                const nodes = [...document.querySelectorAll(sel)].filter((n) => !n.hasAttribute(stale));
                const n = nodes[nodes.length - 1];
                return n ? n.innerText : "";
            }
            """,
            {"sel": NOTIFICATION_SELECTOR, "stale": STALE_ATTR},
        )

    async def mark_notifications_stale(self) -> None:
        """Hide the notifications on screen now from later reads."""
        await self.page.evaluate(
            "({ sel, stale }) => document.querySelectorAll(sel).forEach((n) => n.setAttribute(stale, '1'))",
            {"sel": NOTIFICATION_SELECTOR, "stale": STALE_ATTR},
        )

    async def notification_count(self) -> int:
        return await self.page.evaluate(
            "(sel) => document.querySelectorAll(sel).length", NOTIFICATION_SELECTOR
        )

    async def burst_notifications(self, messages: list[str], settle_ms: int = 0) -> int:
        """Fire every message back to back, optionally settle, return visible count."""
        return await self.page.evaluate(
            """
            async ({ messages, settleMs, sel }) => {
                for (const m of messages) window.showNotification(m);
                if (settleMs > 0) await new Promise((r) => setTimeout(r, settleMs));
                return document.querySelectorAll(sel).length;
            }
            """,
            {"messages": messages, "settleMs": settle_ms, "sel": NOTIFICATION_SELECTOR},
        )

    async def download_blob(self, data: bytes, name: str, mime: str) -> None:
        await self.page.evaluate(
            """
            async ({ data, name, mime }) => {
                await window.downloadBlob(new Uint8Array(data), name, mime);
            }
            """,
            {"data": list(data), "name": name, "mime": mime},
        )

    async def remove_save_picker(self) -> None:
        await self.page.evaluate(
            """
            () => {
                try {
                    delete window.showSaveFilePicker;
                } catch (e) {
                    // non-configurable in some engines
                }
                window.showSaveFilePicker = undefined;
            }
            """
        )

    async def abort_save_picker(self) -> None:
        await self.page.evaluate(
            """
            () => {
                window.showSaveFilePicker = async () => {
                    const err = new Error("aborted");
                    err.name = "AbortError";
                    throw err;
                };
            }
            """
        )

    async def keywords_round_trip(self, keywords: list[str]) -> list[str]:
        """Set keywords on a fresh PDFLib document, save, reload, return what comes back."""
        return await self.page.evaluate(
            """
            async (keywords) => {
                const { PDFDocument } = PDFLib;
                const doc = await PDFDocument.create();
                doc.setKeywords(keywords);
                const loaded = await PDFDocument.load(await doc.save());
                const raw = loaded.getKeywords();
                if (!raw) return [];
                if (Array.isArray(raw)) return raw.map(String);
                return String(raw).split(/[;,\\s]+/).filter(Boolean);
            }
            """,
            keywords,
        )

    async def normalize_keywords(self, samples: list[Any]) -> list[list[str]]:
        """Run the page-side keyword normalisation over each sample.

        `None` arrives as JS null; pass `UNDEFINED` to get JS undefined.
        """
        return await self.page.evaluate(
            """
            ({ samples, undefinedAt }) => samples.map((input, i) => {
                if (undefinedAt.includes(i)) input = undefined;
                return Array.isArray(input)
                    ? input.map((k) => String(k).trim()).filter(Boolean)
                    : String(input || "").split(",").map((k) => k.trim()).filter(Boolean);
            })
            """,
            {
                "samples": [None if s is UNDEFINED else s for s in samples],
                "undefinedAt": [i for i, s in enumerate(samples) if s is UNDEFINED],
            },
        )

    async def body_before_z_index(self) -> float:
        return await self.page.evaluate(
            "() => parseInt(window.getComputedStyle(document.body, '::before').zIndex, 10)"
        )

    async def centre_hit_test(self) -> dict[str, Any]:
        return await self.page.evaluate(
            """
            () => {
                const el = document.elementFromPoint(window.innerWidth / 2, window.innerHeight / 2);
                const inApp = !!el && !!el.closest("#homePage, .merge-page.active");
                return {
                    tag: el ? el.tagName : null,
                    className: el ? String(el.className) : null,
                    inApp,
                };
            }
            """
        )

    async def build_pdf(self, pages: list[str], image_png_b64: str | None = None) -> bytes:
        """Build a PDF in-page with one text line per page and an optional embedded PNG."""
        data = await self.page.evaluate(
            """
            async ({ pages, png }) => {
                const { PDFDocument, StandardFonts } = PDFLib;
                const d = await PDFDocument.create();
                const f = await d.embedFont(StandardFonts.Helvetica);
                const img = png ? await d.embedPng(png) : null;
                for (const text of pages) {
                    const p = d.addPage([595, 842]);
                    p.drawText(text, { x: 60, y: 780, size: 20, font: f });
                    if (img) p.drawImage(img, { x: 60, y: 400, width: 200, height: 200 });
                }
                return Array.from(await d.save());
            }
            """,
            {"pages": pages, "png": image_png_b64},
        )
        return bytes(data)


class EnvironmentDriver:
    """Page-level actions shared by every scenario of one environment."""

    def __init__(self, name: str, page: Page, downloads_dir: Path):
        self.name = name
        self.page = page
        self.surface = TonfernSurface(page)
        self.downloads_dir = downloads_dir
        self.console_errors: list[str] = []
        self.console_warnings: list[str] = []

    def attach_console(self) -> None:
        self.page.on("console", self._on_console)

    def _on_console(self, msg) -> None:
        kind = msg.type
        if kind == "error":
            self.console_errors.append(msg.text)
            log(f"[{self.name}] console error: {msg.text}", "debug")
        elif kind == "warning":
            self.console_warnings.append(msg.text)

    async def load(self, url: str, nav_timeout_ms: int = 180_000, ready_timeout_ms: int = 45_000) -> None:
        log(f"[{self.name}] Loading test page: {url}", "info")
        await self.page.goto(url, wait_until="domcontentloaded", timeout=nav_timeout_ms)
        await self.page.wait_for_selector(READY_SELECTOR, timeout=ready_timeout_ms)
        log(f"[{self.name}] Test page ready", "success")

    async def open_tool(self, tool_id: str, timeout_ms: int = 15_000) -> None:
        if tool_id not in TOOL_PAGE:
            raise ValueError(f"Unknown tool id: {tool_id}")
        await self.surface.show_page(tool_id)
        await self.page.wait_for_selector(f"#{TOOL_PAGE[tool_id]}.active", timeout=timeout_ms)

    async def back_home(self, timeout_ms: int = 10_000) -> None:
        await self.surface.show_home_page()
        await self.page.wait_for_selector("#homePage", timeout=timeout_ms)

    async def wait_notification(self, timeout_ms: int = 8000, poll_s: float = 0.12) -> str:
        """Poll the notification surface; empty string when nothing shows up in time."""
        deadline = time.monotonic() + timeout_ms / 1000
        while time.monotonic() < deadline:
            msg = await self.surface.notification_text()
            if msg:
                return msg
            await asyncio.sleep(poll_s)
        return ""

    async def expect_notification(
        self,
        needle: str,
        timeout_ms: int = 8000,
        action: Callable[[], Awaitable[Any]] | None = None,
    ) -> str:
        """Require a notification containing `needle`.

        With `action`, toasts already on screen are ignored and only one raised
        after the action counts.
        """
        if action is not None:
            await self.surface.mark_notifications_stale()
            await action()
        msg = await self.wait_notification(timeout_ms)
        if needle.lower() not in msg.lower():
            raise ScenarioError(f"Expected notification containing {needle!r}, got: {msg!r}")
        return msg

    async def capture_download(
        self,
        clicker: Callable[[], Awaitable[Any]],
        timeout_ms: int = 120_000,
    ) -> DownloadArtifact:
        """Force the anchor-download path, click, and save the resulting file."""
        await self.surface.remove_save_picker()
        async with self.page.expect_download(timeout=timeout_ms) as info:
            await clicker()
        download = await info.value
        suggested = download.suggested_filename
        out = self.downloads_dir / f"{int(time.time() * 1000)}-{basename_safe(suggested)}"
        await download.save_as(out)
        artifact = DownloadArtifact(suggested=suggested, path=str(out), bytes=out.stat().st_size)
        log(f"[{self.name}] saved {suggested} ({artifact.bytes} bytes)", "debug")
        return artifact

    async def expect_blocked(
        self,
        clicker: Callable[[], Awaitable[Any]],
        needle: str | None = None,
        notify_timeout_ms: int = 10_000,
        quiet_ms: int = 2000,
    ) -> str:
        """Click, collect the notification, and require that no download started.

        Returns the notification text. When `needle` is given the text must contain it.
        """
        downloads: list[Any] = []
        on_download = downloads.append
        self.page.on("download", on_download)
        try:
            await self.surface.remove_save_picker()
            await self.surface.mark_notifications_stale()
            await clicker()
            msg = await self.wait_notification(notify_timeout_ms if needle else quiet_ms)
            await asyncio.sleep(quiet_ms / 1000)
        finally:
            self.page.remove_listener("download", on_download)
        if downloads:
            raise ScenarioError(f"Unexpected download: {downloads[0].suggested_filename}")
        if needle and needle.lower() not in msg.lower():
            raise ScenarioError(f"Expected notification containing {needle!r}, got: {msg!r}")
        return msg

    async def draw_on_canvas(self, selector: str) -> None:
        box = await self.page.locator(selector).bounding_box()
        if not box:
            raise ScenarioError(f"Canvas not visible: {selector}")
        x = box["x"] + min(20, box["width"] / 4)
        y = box["y"] + box["height"] / 2
        await self.page.mouse.move(x, y)
        await self.page.mouse.down()
        await self.page.mouse.move(x + 60, y - 8, steps=5)
        await self.page.mouse.move(x + 120, y + 10, steps=5)
        await self.page.mouse.up()

    async def drag_by(self, selector: str, dx: float, dy: float) -> bool:
        """Drag the centre of an element by an offset; False when it is not rendered."""
        loc = self.page.locator(selector)
        if not await loc.count():
            return False
        box = await loc.first.bounding_box()
        if not box:
            return False
        cx = box["x"] + box["width"] / 2
        cy = box["y"] + box["height"] / 2
        await self.page.mouse.move(cx, cy)
        await self.page.mouse.down()
        await self.page.mouse.move(cx + dx, cy + dy, steps=4)
        await self.page.mouse.up()
        return True

    async def drag_first_handle_to_second(self, container: str) -> None:
        handles = self.page.locator(f"{container} .file-handle")
        await handles.first.drag_to(handles.nth(1))
        await asyncio.sleep(0.3)


@asynccontextmanager
async def launch_environment(
    name: str,
    browser_type: BrowserType,
    downloads_dir: Path,
    headless: bool = True,
) -> AsyncIterator[EnvironmentDriver]:
    """Launch a browser with one downloads-enabled context; always torn down on exit."""
    log(f"Setting up {name}...", "info")
    browser: Browser = await browser_type.launch(headless=headless)
    context: BrowserContext | None = None
    try:
        context = await browser.new_context(accept_downloads=True)
        page = await context.new_page()
        driver = EnvironmentDriver(name, page, downloads_dir)
        driver.attach_console()
        log(f"{name} launched", "success")
        yield driver
    finally:
        if context is not None:
            await context.close()
        await browser.close()
        log(f"{name} closed", "debug")
