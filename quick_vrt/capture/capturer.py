"""Capturer: navigation, stabilization, and full-page screenshot of a single URL."""

from __future__ import annotations

import logging
from pathlib import Path

from playwright.async_api import Page

from quick_vrt.errors import NavigationError, ScreenshotError
from quick_vrt.models.config import CaptureOptions
from quick_vrt.stabilizer.stabilize import StabilizationReport, stabilize_page

logger = logging.getLogger(__name__)

MAX_PENDING_IMAGE_CHECKS = 10
PENDING_IMAGE_POLL_MS = 200
RETRY_DELAY_MS = 1000

_PENDING_IMAGES_JS = "() => Array.from(document.images).filter(img => !img.complete).length"


class Capturer:
    """Produces one full-page PNG per URL under a fixed set of capture options.

    The caller owns the page. Before and after captures of one pair may share
    a page; pages are never shared across pairs.
    """

    def __init__(self, options: CaptureOptions):
        self.options = options

    async def capture(
        self, page: Page, url: str, output_path: Path, snapshot_path: Path | None = None,
    ) -> StabilizationReport:
        """Navigate to url, stabilize the page, and write a full-page screenshot.

        Returns the stabilization report so callers can surface its warnings.

        Raises NavigationError when the page does not load in time and
        ScreenshotError when the screenshot fails twice.
        """
        logger.info("  Capturing %s", url)
        await self._navigate(page, url)

        await page.wait_for_timeout(self.options.settle_delay_ms)
        report = await stabilize_page(page, self.options)
        await self._wait_for_pending_images(page)

        if snapshot_path is not None:
            await self._save_dom_snapshot(page, snapshot_path)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        await self._take_screenshot(page, url, output_path)
        logger.debug("  Screenshot saved to %s", output_path)
        return report

    async def _navigate(self, page: Page, url: str) -> None:
        try:
            response = await page.goto(
                url, wait_until="networkidle", timeout=self.options.navigation_timeout_ms,
            )
        except Exception as e:
            raise NavigationError(url, str(e)) from e
        if response is not None and response.status >= 400:
            logger.warning("  %s responded with HTTP %d", url, response.status)

    async def _wait_for_pending_images(self, page: Page) -> None:
        try:
            for _ in range(MAX_PENDING_IMAGE_CHECKS):
                pending = await page.evaluate(_PENDING_IMAGES_JS)
                if not pending:
                    return
                await page.wait_for_timeout(PENDING_IMAGE_POLL_MS)
            logger.warning("  %d image(s) still pending, capturing anyway", pending)
        except Exception as e:
            logger.warning("  Pending image check failed: %s", e)

    async def _take_screenshot(self, page: Page, url: str, path: Path) -> None:
        screenshot_kwargs: dict = {
            "path": str(path),
            "full_page": True,
            "timeout": self.options.screenshot_timeout_ms,
        }
        if self.options.disable_animations:
            screenshot_kwargs["animations"] = "disabled"

        try:
            await page.screenshot(**screenshot_kwargs)
            return
        except Exception as e:
            logger.warning("  Screenshot of %s failed, retrying once: %s", url, e)

        try:
            await page.evaluate("() => window.scrollTo(0, 0)")
            await page.wait_for_timeout(RETRY_DELAY_MS)
            await page.screenshot(**screenshot_kwargs)
        except Exception as e:
            raise ScreenshotError(url, str(e)) from e

    async def _save_dom_snapshot(self, page: Page, path: Path) -> None:
        """Save the DOM as it stands right before the screenshot."""
        try:
            content = await page.content()
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except Exception as e:
            logger.warning("  DOM snapshot failed: %s", e)
