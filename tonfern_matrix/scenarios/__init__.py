"""
Ordered scenario library for one environment.

Order is part of the contract: the navigation check runs before the tool
workflows, `protect.main_download` runs before both unlock cases, and the
console check runs last so it sees every message the suite produced.
"""

from __future__ import annotations

from tonfern_matrix.scenarios import checks, tools
from tonfern_matrix.scenarios.context import Scenario, SuiteContext


SCENARIOS: tuple[tuple[str, Scenario], ...] = (
    ("preflight.load_and_tools", checks.load_and_tools),
    ("preflight.filters_and_persona", checks.filters_and_persona),
    ("regression.metadata_keywords", checks.metadata_keywords),
    ("regression.metadata_negative_inputs", checks.metadata_negative_inputs),
    ("regression.zindex", checks.zindex),
    ("regression.pointer_safety", checks.pointer_safety),
    ("regression.notification_dedupe", checks.notification_dedupe),
    ("regression.notification_stress", checks.notification_stress),
    ("global.navigation_home_tool", checks.navigation_home_tool),
    ("merge.main_reorder_download", tools.merge_reorder_download),
    ("split.main_range_download", tools.split_range_download),
    ("compress.main_download", tools.compress_download),
    ("pdf_jpg.main_download", tools.pdf_to_jpg_download),
    ("jpg_pdf.main_two_images", tools.jpg_to_pdf_two_images),
    ("pdf_word.main_download", tools.pdf_to_word_download),
    ("extract_img.edge_no_images", tools.extract_images_none),
    ("extract_img.main_zip", tools.extract_images_zip),
    ("protect.edge_password_mismatch", tools.protect_password_mismatch),
    ("protect.main_download", tools.protect_download),
    ("unlock.edge_wrong_password", tools.unlock_wrong_password),
    ("unlock.main_correct_password", tools.unlock_correct_password),
    ("organize.main_reorder_save", tools.organize_reorder_save),
    ("sign.main_with_opacity_and_page_nav", tools.sign_with_opacity_and_page_nav),
    ("watermark.main_and_edge_style", tools.watermark_and_edge_style),
    ("add_text.main_and_edge_remove", tools.add_text_and_edge_remove),
    ("delete_pages.main_delete_some", tools.delete_some_pages),
    ("delete_pages.edge_block_delete_all", tools.block_delete_all),
    ("global.save_cancel_notification", checks.save_cancel_notification),
    ("global.saved_locally_notification", checks.saved_locally_notification),
    ("console.non_blocking_only", checks.console_non_blocking_only),
)


def scenario_ids() -> list[str]:
    return [case_id for case_id, _ in SCENARIOS]


__all__ = ["SCENARIOS", "Scenario", "SuiteContext", "scenario_ids"]
