"""Animation suppression: freezes CSS, Web Animations, and script-driven motion."""

from __future__ import annotations

import logging

from playwright.async_api import Page

from .libraries import suppress_animation_libraries

logger = logging.getLogger(__name__)

FREEZE_STYLE_ID = "quick-vrt-freeze-animations"
MAX_ANIMATION_CHECKS = 10
SHORT_DELAY_THRESHOLD_MS = 100
# Browsers clamp anything above 2**31 - 1 to zero, so stay well below it.
REPEATING_TIMER_DELAY_MS = 1_000_000_000

FREEZE_CSS = """
*, *::before, *::after {
  animation-duration: 0s !important;
  animation-delay: 0s !important;
  animation-iteration-count: 1 !important;
  animation-play-state: paused !important;
  transition-duration: 0s !important;
  transition-delay: 0s !important;
  caret-color: transparent !important;
}
html {
  scroll-behavior: auto !important;
}
"""

_INJECT_STYLE_JS = """
([styleId, css]) => {
    if (document.getElementById(styleId)) return false;
    const style = document.createElement('style');
    style.id = styleId;
    style.setAttribute('data-vrt-style', 'freeze-animations');
    style.textContent = css;
    (document.head || document.documentElement).appendChild(style);
    return true;
}
"""

# Installed after each navigation, so it lives and dies with the document.
_TIME_CONTROL_JS = """
([threshold, repeatingDelay]) => {
    if (window.__vrtTimeControl) return false;
    const originalSetTimeout = window.setTimeout.bind(window);
    const originalSetInterval = window.setInterval.bind(window);
    const originalClearTimeout = window.clearTimeout.bind(window);

    window.requestAnimationFrame = (callback) =>
        originalSetTimeout(() => callback(performance.now()), 0);
    window.cancelAnimationFrame = (id) => originalClearTimeout(id);

    window.setTimeout = (callback, delay, ...args) => {
        const ms = Number(delay) || 0;
        return originalSetTimeout(callback, ms < threshold ? 0 : ms, ...args);
    };
    window.setInterval = (callback, delay, ...args) => {
        const ms = Number(delay) || 0;
        return originalSetInterval(callback, ms < threshold ? repeatingDelay : ms, ...args);
    };
    window.__vrtTimeControl = true;
    return true;
}
"""

_FINISH_ANIMATIONS_JS = """
() => {
    if (typeof document.getAnimations !== 'function') return 0;
    let settled = 0;
    document.getAnimations().forEach(anim => {
        try {
            anim.finish();
        } catch (e) {
            // Infinite animations cannot finish; park them on their first frame.
            try { anim.pause(); anim.currentTime = 0; } catch (e2) {}
        }
        settled++;
    });
    return settled;
}
"""

_RUNNING_ANIMATIONS_JS = """
() => typeof document.getAnimations === 'function'
    ? document.getAnimations().filter(a => a.playState === 'running').length
    : 0
"""


async def disable_animations(page: Page, poll_interval_ms: int = 100) -> bool:
    """Freeze every animation source on the page.

    Never raises. Returns True when the page reached zero running animations
    within MAX_ANIMATION_CHECKS polls.
    """
    try:
        await page.evaluate(_INJECT_STYLE_JS, [FREEZE_STYLE_ID, FREEZE_CSS])
        await page.evaluate(_TIME_CONTROL_JS, [SHORT_DELAY_THRESHOLD_MS, REPEATING_TIMER_DELAY_MS])
    except Exception as e:
        logger.warning("    Failed to disable animations: %s", e)
        return False

    await suppress_animation_libraries(page)

    try:
        quiet = await _wait_for_animations_to_settle(page, poll_interval_ms)
    except Exception as e:
        logger.warning("    Failed to settle running animations: %s", e)
        return False

    if quiet:
        logger.info("    Animations disabled")
    else:
        logger.warning("    Animations still running after %d checks, continuing", MAX_ANIMATION_CHECKS)
    return quiet


async def _wait_for_animations_to_settle(page: Page, poll_interval_ms: int) -> bool:
    for check in range(MAX_ANIMATION_CHECKS):
        await page.evaluate(_FINISH_ANIMATIONS_JS)
        running = await page.evaluate(_RUNNING_ANIMATIONS_JS)
        if not running:
            logger.debug("    No running animations after %d check(s)", check + 1)
            return True
        logger.debug("    %d animation(s) still running (check %d/%d)",
                     running, check + 1, MAX_ANIMATION_CHECKS)
        await page.wait_for_timeout(poll_interval_ms)
    return False
