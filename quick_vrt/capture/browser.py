"""Browser launch and per-pair context creation."""

from __future__ import annotations

from typing import Optional

from playwright.async_api import Browser, BrowserContext, Playwright

from quick_vrt.models.config import CaptureOptions

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch the single Chromium instance shared by every pair in a run."""
    return await playwright.chromium.launch(
        headless=headless,
        args=[
            "--disable-blink-features=AutomationControlled",
            "--hide-scrollbars",
            "--font-render-hinting=none",
        ],
    )


async def create_capture_context(
    browser: Browser,
    options: CaptureOptions,
    user_agent: Optional[str] = None,
) -> BrowserContext:
    """Create an isolated context with viewport and user agent fixed before any navigation.

    Locale, timezone and device scale are pinned so that two captures of the
    same content do not drift on host settings.
    """
    context_kwargs: dict = {
        "viewport": options.viewport.as_dict(),
        "user_agent": user_agent or options.user_agent or DEFAULT_USER_AGENT,
        "locale": "en-US",
        "timezone_id": "UTC",
        "device_scale_factor": 1,
        "extra_http_headers": {
            "Accept-Language": "en-US,en;q=0.9",
        },
    }
    if options.disable_animations:
        context_kwargs["reduced_motion"] = "reduce"

    return await browser.new_context(**context_kwargs)
