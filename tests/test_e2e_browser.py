"""End-to-end stabilization tests against a real Chromium.

Skipped when Playwright's Chromium is not installed.
"""

from pathlib import Path

import pytest
import pytest_asyncio
from playwright.async_api import async_playwright

from quick_vrt.capture.browser import create_capture_context, launch_browser
from quick_vrt.models.config import CaptureOptions
from quick_vrt.stabilizer.animations import FREEZE_STYLE_ID, disable_animations
from quick_vrt.stabilizer.masking import count_masks
from quick_vrt.stabilizer.stabilize import stabilize_page

pytestmark = pytest.mark.e2e

VIDEO_PAGE = """
<html><body style="margin:0">
  <h1>Product tour</h1>
  <video width="320" height="180" style="display:block;background:#123"></video>
  <p>Footer</p>
</body></html>
"""

ANIMATED_PAGE = """
<html><head><style>
  @keyframes spin { from { transform: rotate(0deg); } to { transform: rotate(360deg); } }
  .spinner { width: 40px; height: 40px; background: red; animation: spin 1s linear infinite; }
</style></head>
<body><div class="spinner"></div></body></html>
"""


@pytest_asyncio.fixture
async def page():
    async with async_playwright() as p:
        try:
            browser = await launch_browser(p)
        except Exception as e:
            pytest.skip(f"Chromium not available: {e}")
        context = await create_capture_context(browser, CaptureOptions())
        page = await context.new_page()
        try:
            yield page
        finally:
            await context.close()
            await browser.close()


def _fast(**kwargs) -> CaptureOptions:
    return CaptureOptions(scroll_delay=10, **kwargs)


class TestStabilizationInBrowser:
    @pytest.mark.asyncio
    async def test_video_gets_exactly_one_mask(self, page):
        await page.set_content(VIDEO_PAGE)

        report = await stabilize_page(page, _fast(disable_animations=False, lazy_loading=False))

        assert report.masks_applied == 1
        assert await count_masks(page) == 1

    @pytest.mark.asyncio
    async def test_masking_twice_does_not_stack(self, page):
        await page.set_content(VIDEO_PAGE)
        options = _fast(disable_animations=False, lazy_loading=False)

        await stabilize_page(page, options)
        await stabilize_page(page, options)

        assert await count_masks(page) == 1

    @pytest.mark.asyncio
    async def test_animations_left_alone_when_disabled(self, page):
        await page.set_content(ANIMATED_PAGE)

        await stabilize_page(page, _fast(disable_animations=False, lazy_loading=False, mask_videos=False))

        assert await page.evaluate("(id) => document.getElementById(id)", FREEZE_STYLE_ID) is None

    @pytest.mark.asyncio
    async def test_animations_frozen(self, page):
        await page.set_content(ANIMATED_PAGE)

        report = await stabilize_page(page, _fast(lazy_loading=False, mask_videos=False))

        assert report.warnings == []
        assert await page.evaluate("(id) => !!document.getElementById(id)", FREEZE_STYLE_ID)
        running = await page.evaluate(
            "() => document.getAnimations().filter(a => a.playState === 'running').length"
        )
        assert running == 0

    @pytest.mark.asyncio
    async def test_lazy_images_promoted(self, page):
        await page.set_content(
            '<html><body><div style="height:3000px"></div>'
            '<img id="lazy" data-src="data:image/gif;base64,R0lGODlhAQABAAAAACw=" loading="lazy">'
            "</body></html>"
        )

        await stabilize_page(page, _fast(disable_animations=False, mask_videos=False))

        assert await page.evaluate("() => document.getElementById('lazy').getAttribute('src')") is not None
        assert await page.evaluate("() => document.getElementById('lazy').loading") == "eager"
        assert await page.evaluate("() => window.scrollY") == 0

    @pytest.mark.asyncio
    async def test_short_timers_collapsed(self, page):
        await page.set_content("<html><body><p>Timers</p></body></html>")
        await disable_animations(page, poll_interval_ms=10)

        await page.evaluate("""() => {
            window.__timeouts = 0;
            window.__intervals = 0;
            const start = performance.now();
            setTimeout(() => { window.__timeouts++; window.__elapsed = performance.now() - start; }, 50);
            setInterval(() => { window.__intervals++; }, 10);
        }""")
        await page.wait_for_timeout(300)

        timeouts, elapsed, intervals = await page.evaluate(
            "() => [window.__timeouts, window.__elapsed, window.__intervals]"
        )
        assert timeouts == 1
        assert elapsed < 50
        assert intervals <= 1
