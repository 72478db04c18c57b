"""
Per-tool workflows: happy paths that must save a file and edge paths that
must be blocked.
"""

from __future__ import annotations

from pathlib import Path

from tonfern_matrix.results import DownloadArtifact, ScenarioError, expect
from tonfern_matrix.scenarios.context import SuiteContext


PROTECT_PASSWORD = "tonfern123"
WRONG_PASSWORD = "wrong-password"


def expect_saved(dl: DownloadArtifact, suffix: str | None = None) -> DownloadArtifact:
    expect(dl.bytes > 0, f"Saved file is empty: {dl.suggested}")
    if suffix:
        expect(
            dl.suggested.lower().endswith(suffix),
            f"Expected a {suffix} file, got {dl.suggested}",
        )
    return dl


async def merge_reorder_download(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("merge")
    await page.set_input_files("#fileInput", [str(p) for p in ctx.assets.baselines])
    await page.wait_for_selector("#filesList .file-card:nth-child(2)", timeout=30_000)
    names = page.locator("#filesList .file-card .file-name")
    before = await names.first.inner_text()
    await ctx.driver.drag_first_handle_to_second("#filesList")
    after = await names.first.inner_text()
    dl = await ctx.driver.capture_download(lambda: page.click("#mergeBtn"), timeout_ms=180_000)
    expect_saved(dl, ".pdf")
    return {"firstBefore": before, "firstAfter": after, "download": dl}


async def split_range_download(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("split")
    await page.set_input_files("#splitFileInput", str(ctx.assets.base_pdf_1))
    await page.wait_for_selector("#splitRange", timeout=60_000)
    await page.fill("#splitRange", "1-2")
    dl = await ctx.driver.capture_download(lambda: page.click("#splitBtn"))
    return {"range": "1-2", "download": expect_saved(dl)}


async def compress_download(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("compress")
    await page.set_input_files("#compressFileInput", str(ctx.assets.base_pdf_2))
    await page.wait_for_selector("#compressBtn:not([disabled])", timeout=60_000)
    dl = await ctx.driver.capture_download(lambda: page.click("#compressBtn"))
    return {"download": expect_saved(dl, ".pdf")}


async def pdf_to_jpg_download(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("pdf-jpg")
    await page.set_input_files("#pdfJpgFileInput", str(ctx.assets.base_pdf_2))
    await page.wait_for_selector("#convertToJpgBtn:not([disabled])", timeout=60_000)
    dl = await ctx.driver.capture_download(lambda: page.click("#convertToJpgBtn"))
    return {"download": expect_saved(dl)}


async def jpg_to_pdf_two_images(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("jpg-pdf")
    await page.set_input_files("#jpgFileInput", [str(ctx.assets.img1), str(ctx.assets.img2)])
    await page.wait_for_selector("#jpgList .file-card:nth-child(2)", timeout=30_000)
    dl = await ctx.driver.capture_download(lambda: page.click("#jpgToPdfBtn"))
    return {"images": 2, "download": expect_saved(dl, ".pdf")}


async def pdf_to_word_download(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("pdf-word")
    await page.set_input_files("#wordFileInput", str(ctx.assets.base_pdf_1))
    await page.wait_for_selector("#convertToWordBtn:not([disabled])", timeout=60_000)
    dl = await ctx.driver.capture_download(lambda: page.click("#convertToWordBtn"))
    return {"download": expect_saved(dl)}


async def extract_images_none(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("extract-img")
    await page.set_input_files("#wordFileInput", str(ctx.assets.no_image_pdf))
    await page.wait_for_selector("#extractImagesBtn:not([disabled])", timeout=60_000)
    msg = await ctx.driver.expect_blocked(lambda: page.click("#extractImagesBtn"), "no embedded images")
    return {"message": msg}


async def extract_images_zip(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("extract-img")
    await page.set_input_files("#wordFileInput", str(ctx.assets.image_pdf))
    await page.wait_for_selector("#extractImagesBtn:not([disabled])", timeout=60_000)
    dl = await ctx.driver.capture_download(lambda: page.click("#extractImagesBtn"))
    return {"download": expect_saved(dl, ".zip")}


async def _fill_protect(ctx: SuiteContext, password: str, confirm: str) -> None:
    page = ctx.page
    await ctx.driver.open_tool("protect")
    await page.set_input_files("#protectFileInput", str(ctx.assets.base_pdf_1))
    await page.wait_for_selector("#protectPassword", timeout=30_000)
    await page.fill("#protectPassword", password)
    await page.fill("#protectConfirm", confirm)


async def protect_password_mismatch(ctx: SuiteContext) -> dict:
    await _fill_protect(ctx, PROTECT_PASSWORD, PROTECT_PASSWORD + "-typo")
    msg = await ctx.driver.expect_blocked(lambda: ctx.page.click("#protectBtn"))
    return {"blocked": True, "message": msg}


async def protect_download(ctx: SuiteContext) -> dict:
    await _fill_protect(ctx, PROTECT_PASSWORD, PROTECT_PASSWORD)
    dl = await ctx.driver.capture_download(lambda: ctx.page.click("#protectBtn"))
    expect_saved(dl, ".pdf")
    ctx.protected_pdf = Path(dl.path)
    return {"download": dl}


async def _fill_unlock(ctx: SuiteContext, password: str) -> None:
    if ctx.protected_pdf is None:
        raise ScenarioError("No protected PDF available; protect.main_download did not produce one")
    page = ctx.page
    await ctx.driver.open_tool("unlock")
    await page.set_input_files("#unlockFileInput", str(ctx.protected_pdf))
    await page.wait_for_selector("#unlockPassword", timeout=30_000)
    await page.fill("#unlockPassword", password)


async def unlock_wrong_password(ctx: SuiteContext) -> dict:
    await _fill_unlock(ctx, WRONG_PASSWORD)
    msg = await ctx.driver.expect_blocked(lambda: ctx.page.click("#unlockBtn"), "failed to unlock")
    return {"message": msg}


async def unlock_correct_password(ctx: SuiteContext) -> dict:
    await _fill_unlock(ctx, PROTECT_PASSWORD)
    dl = await ctx.driver.capture_download(lambda: ctx.page.click("#unlockBtn"))
    return {"source": str(ctx.protected_pdf), "download": expect_saved(dl, ".pdf")}


async def organize_reorder_save(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("organize")
    await page.set_input_files("#organizeFileInput", str(ctx.assets.base_pdf_1))
    await page.wait_for_selector("#organizeGrid .organize-page-card:nth-child(2)", timeout=60_000)
    await ctx.driver.drag_first_handle_to_second("#organizeGrid")
    dl = await ctx.driver.capture_download(lambda: page.click("#saveOrganizedBtn", force=True))
    return {"download": expect_saved(dl)}


async def sign_with_opacity_and_page_nav(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("sign")
    await page.set_input_files("#signFileInput", str(ctx.assets.base_pdf_1))
    await page.wait_for_selector("#signEditor", timeout=60_000)
    await ctx.driver.draw_on_canvas("#signaturePad")
    moved = await ctx.driver.drag_by("#sigBox", 60, 40)
    await page.fill("#signOpacity", "0.5")
    await page.click("#nextSignPage")
    await page.click("#prevSignPage")
    dl = await ctx.driver.capture_download(lambda: page.click("#saveSignedBtn"))
    return {"boxMoved": moved, "download": expect_saved(dl)}


async def watermark_and_edge_style(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("watermark")
    await page.set_input_files("#wmFileInput", str(ctx.assets.base_pdf_2))
    await page.wait_for_selector("#wmEditor", timeout=15_000)
    style = {"#wmText": "QA-WM", "#wmSize": "42", "#wmOpacity": "0.4", "#wmAngle": "30", "#wmColor": "#D40018"}
    for selector, value in style.items():
        await page.fill(selector, value)
    dl = await ctx.driver.capture_download(lambda: page.click("#wmApplyBtn"))
    return {"download": expect_saved(dl)}


async def add_text_and_edge_remove(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("add-text")
    await page.set_input_files("#textFileInput", str(ctx.assets.base_pdf_2))
    await page.wait_for_selector("#textEditor", timeout=60_000)
    ob = await page.locator("#textOverlay").bounding_box()
    if not ob:
        raise ScenarioError("Text overlay not visible")

    # right-click removes a box
    await page.mouse.click(ob["x"] + 80, ob["y"] + 120)
    first = page.locator("#textOverlay input").last
    await first.fill("QA-remove")
    await first.click(button="right")

    await page.mouse.click(ob["x"] + 120, ob["y"] + 180)
    second = page.locator("#textOverlay input").last
    await second.fill("Tonfern QA text")
    boxes = await page.locator("#textOverlay input").count()
    dl = await ctx.driver.capture_download(lambda: page.click("#saveTextBtn"))
    return {"boxes": boxes, "download": expect_saved(dl)}


async def delete_some_pages(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("delete-pages")
    await page.set_input_files("#delFileInput", str(ctx.assets.base_pdf_1))
    await page.wait_for_selector("#delPagesGrid .page-thumb", timeout=60_000)
    await page.locator("#delPagesGrid .page-thumb").first.click()
    dl = await ctx.driver.capture_download(lambda: page.click("#delConfirmBtn"))
    return {"deleted": 1, "download": expect_saved(dl)}


async def block_delete_all(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("delete-pages")
    await page.set_input_files("#delFileInput", str(ctx.assets.base_pdf_2))
    await page.wait_for_selector("#delPagesGrid .page-thumb", timeout=60_000)
    pages = await page.locator("#delPagesGrid .page-thumb").count()
    await page.evaluate(
        "() => document.querySelectorAll('#delPagesGrid .page-thumb').forEach((el) => el.classList.add('selected'))"
    )
    msg = await ctx.driver.expect_blocked(lambda: page.click("#delConfirmBtn"), "cannot delete all")
    return {"message": msg, "pages": pages}
