"""Runs the enabled stabilization routines in their fixed order."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from playwright.async_api import Page

from quick_vrt.models.config import CaptureOptions

from .animations import disable_animations
from .lazy_load import trigger_lazy_loading
from .masking import mask_videos

logger = logging.getLogger(__name__)

# Pause between routines so layout can settle.
STEP_PACING_MS = 250


@dataclass
class StabilizationReport:
    steps_run: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    masks_applied: int = 0


async def stabilize_page(page: Page, options: CaptureOptions) -> StabilizationReport:
    """Animations, then lazy loading, then masking. Disabled routines never touch the page."""
    report = StabilizationReport()
    pacing = min(STEP_PACING_MS, options.scroll_delay)

    if options.disable_animations:
        report.steps_run.append("animations")
        if not await disable_animations(page, poll_interval_ms=min(100, options.scroll_delay)):
            report.warnings.append("animations did not fully settle")
        await _pause(page, pacing)

    if options.lazy_loading:
        report.steps_run.append("lazy_loading")
        if not await trigger_lazy_loading(page, options.scroll_delay):
            report.warnings.append("lazy loading failed")
        await _pause(page, pacing)

    if options.mask_videos:
        report.steps_run.append("masking")
        report.masks_applied = await mask_videos(page, options.video_mask_color)

    logger.debug("    Stabilization steps: %s", ", ".join(report.steps_run) or "none")
    return report


async def _pause(page: Page, ms: int) -> None:
    try:
        await page.wait_for_timeout(ms)
    except Exception as e:
        logger.warning("    Pause between stabilization steps failed: %s", e)
