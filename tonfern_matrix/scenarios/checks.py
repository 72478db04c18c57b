"""
Preflight, pure-logic regression and cross-cutting checks.
"""

from __future__ import annotations

import asyncio

from tonfern_matrix.driver import TOOL_PAGE, UNDEFINED
from tonfern_matrix.results import ScenarioError, expect
from tonfern_matrix.scenarios.context import SuiteContext


EXPECTED_TOOL_COUNT = 14

# (input, expected normalised length)
KEYWORD_SAMPLES = [
    (None, 0),
    (UNDEFINED, 0),
    ("", 0),
    ("   ", 0),
    (["tag1", "", "  ", "tag2"], 2),
]

BENIGN_CONSOLE_ERRORS = ("favicon.ico",)


def non_benign_errors(errors: list[str]) -> list[str]:
    return [e for e in errors if not any(marker in e for marker in BENIGN_CONSOLE_ERRORS)]


async def load_and_tools(ctx: SuiteContext) -> dict:
    count = await ctx.page.locator("#toolsGrid .tool-card").count()
    expect(count == EXPECTED_TOOL_COUNT, f"Expected {EXPECTED_TOOL_COUNT} tools, got {count}")
    return {"title": await ctx.page.title(), "tools": count}


async def filters_and_persona(ctx: SuiteContext) -> dict:
    page = ctx.page
    cards = page.locator("#toolsGrid .tool-card")
    await page.get_by_role("button", name="Convert PDF").click()
    await asyncio.sleep(0.2)
    convert_count = await cards.count()
    await page.get_by_text("Engineer", exact=True).click()
    await asyncio.sleep(0.2)
    engineer_count = await cards.count()
    await page.get_by_role("button", name="All").click()
    await page.get_by_text("Overall", exact=True).click()
    expect(
        convert_count >= 1 and engineer_count >= 1,
        f"Bad filter results convert={convert_count} engineer={engineer_count}",
    )
    return {"convertCount": convert_count, "engineerCount": engineer_count}


async def metadata_keywords(ctx: SuiteContext) -> dict:
    keywords = await ctx.surface.keywords_round_trip(["test1", "test2"])
    expect(
        "test1" in keywords and "test2" in keywords,
        f"Keywords did not survive save/load: {keywords!r}",
    )
    return {"keywords": keywords}


async def metadata_negative_inputs(ctx: SuiteContext) -> dict:
    outputs = await ctx.surface.normalize_keywords([s for s, _ in KEYWORD_SAMPLES])
    for i, ((sample, expected), got) in enumerate(zip(KEYWORD_SAMPLES, outputs)):
        expect(
            len(got) == expected,
            f"Metadata sample {i} ({sample!r}) unexpected length={len(got)}",
        )
    return {"outputs": outputs}


async def zindex(ctx: SuiteContext) -> dict:
    zi = await ctx.surface.body_before_z_index()
    # NaN (no ::before rule) fails this comparison too
    expect(zi is not None and zi < 0, f"Expected z-index < 0, got {zi}")
    return {"zIndexBefore": zi}


async def pointer_safety(ctx: SuiteContext) -> dict:
    check = await ctx.surface.centre_hit_test()
    expect(
        check.get("inApp"),
        f"Pointer safety failed: element={check.get('tag')} class={check.get('className')}",
    )
    return check


async def notification_dedupe(ctx: SuiteContext) -> dict:
    count = await ctx.surface.burst_notifications(["Test 1", "Test 2"])
    expect(count == 1, f"Expected 1 notification, got {count}")
    return {"count": count}


async def notification_stress(ctx: SuiteContext) -> dict:
    count = await ctx.surface.burst_notifications([f"Spam {i}" for i in range(5)], settle_ms=120)
    expect(count == 1, f"Expected 1 notification after stress, got {count}")
    return {"count": count}


async def navigation_home_tool(ctx: SuiteContext) -> dict:
    for tool_id in TOOL_PAGE:
        await ctx.driver.open_tool(tool_id)
        await ctx.driver.back_home()
    return {"toolsVisited": len(TOOL_PAGE)}


async def save_cancel_notification(ctx: SuiteContext) -> dict:
    await ctx.surface.abort_save_picker()
    msg = await ctx.driver.expect_notification(
        "save cancelled",
        timeout_ms=6000,
        action=lambda: ctx.surface.download_blob(bytes([1, 2, 3]), "cancel_test.pdf", "application/pdf"),
    )
    return {"message": msg}


async def saved_locally_notification(ctx: SuiteContext) -> dict:
    page = ctx.page
    await ctx.driver.open_tool("merge")
    await page.set_input_files("#fileInput", [str(p) for p in ctx.assets.baselines])
    await page.wait_for_selector("#filesList .file-card:nth-child(2)", timeout=30_000)
    await ctx.surface.remove_save_picker()
    msg = await ctx.driver.expect_notification("saved locally", timeout_ms=12_000, action=lambda: page.click("#mergeBtn"))
    return {"message": msg}


async def console_non_blocking_only(ctx: SuiteContext) -> dict:
    errors = list(ctx.driver.console_errors)
    bad = non_benign_errors(errors)
    if bad:
        raise ScenarioError(f"Console errors found: {bad!r}")
    return {
        "errors": errors,
        "warnings": list(ctx.driver.console_warnings),
        "nonBenignCount": len(bad),
    }
