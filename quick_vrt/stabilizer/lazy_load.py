"""Lazy-load forcing: promote deferred sources, then sweep the page top to bottom."""

from __future__ import annotations

import logging

from playwright.async_api import Page

logger = logging.getLogger(__name__)

MAX_SCROLL_STEPS = 200
STEP_WAIT_TIMEOUT_MS = 3000
IMAGE_TIMEOUT_MS = 3000
FINAL_WAIT_TIMEOUT_MS = 10000

_PROMOTE_DEFERRED_JS = """
() => {
    let promoted = 0;
    const copy = (el, from, to) => {
        const value = el.getAttribute(from);
        if (value && el.getAttribute(to) !== value) {
            el.setAttribute(to, value);
            promoted++;
        }
    };
    document.querySelectorAll('img, iframe, video, source').forEach(el => {
        copy(el, 'data-src', 'src');
        copy(el, 'data-lazy-src', 'src');
        copy(el, 'data-original', 'src');
        copy(el, 'data-srcset', 'srcset');
        copy(el, 'data-lazy-srcset', 'srcset');
        copy(el, 'data-sizes', 'sizes');
    });
    document.querySelectorAll('[loading="lazy"]').forEach(el => {
        el.setAttribute('loading', 'eager');
        promoted++;
    });
    document.querySelectorAll('.lazy, .lazyload, .lazy-load, [data-bg]').forEach(el => {
        const bg = el.getAttribute('data-bg') || el.getAttribute('data-background');
        if (bg && !el.style.backgroundImage) {
            el.style.backgroundImage = bg.startsWith('url(') ? bg : `url("${bg}")`;
            promoted++;
        }
        el.classList.remove('lazy', 'lazyload', 'lazy-load');
        el.classList.add('lazyloaded');
    });
    document.querySelectorAll('video[preload="none"]').forEach(el => {
        el.setAttribute('preload', 'auto');
    });
    return promoted;
}
"""

_DISPATCH_EVENTS_JS = """
() => {
    ['scroll', 'resize', 'load'].forEach(type => {
        try { window.dispatchEvent(new Event(type)); } catch (e) {}
    });
    try { document.dispatchEvent(new Event('scroll')); } catch (e) {}
}
"""

_PAGE_METRICS_JS = """
() => ({
    height: Math.max(
        document.body ? document.body.scrollHeight : 0,
        document.documentElement ? document.documentElement.scrollHeight : 0
    ),
    viewport: window.innerHeight,
})
"""

_GREW_OR_IMAGES_DONE_JS = """
(previousHeight) => {
    const height = Math.max(
        document.body ? document.body.scrollHeight : 0,
        document.documentElement ? document.documentElement.scrollHeight : 0
    );
    return height > previousHeight || Array.from(document.images).every(img => img.complete);
}
"""

# Races a global ceiling against per-image completion so one stalled image
# cannot hold the pipeline longer than globalTimeout.
_WAIT_FOR_IMAGES_JS = """
([perImageTimeout, globalTimeout]) => {
    const pending = Array.from(document.images).filter(img => !img.complete);
    if (pending.length === 0) return Promise.resolve(0);
    const all = Promise.all(pending.map(img => new Promise(resolve => {
        img.addEventListener('load', resolve, { once: true });
        img.addEventListener('error', resolve, { once: true });
        setTimeout(resolve, perImageTimeout);
    })));
    const ceiling = new Promise(resolve => setTimeout(resolve, globalTimeout));
    return Promise.race([all, ceiling]).then(
        () => Array.from(document.images).filter(img => !img.complete).length
    );
}
"""


async def trigger_lazy_loading(page: Page, scroll_delay: int = 500) -> bool:
    """Force deferred content to load. Never raises; returns False on failure."""
    try:
        promoted = await page.evaluate(_PROMOTE_DEFERRED_JS)
        if promoted:
            logger.debug("    Promoted %d deferred attribute(s)", promoted)
        await page.evaluate(_DISPATCH_EVENTS_JS)

        final_height = await _scroll_sweep(page, scroll_delay)

        await page.evaluate("() => window.scrollTo(0, 0)")
        await page.wait_for_timeout(scroll_delay // 2)

        remaining = await page.evaluate(_WAIT_FOR_IMAGES_JS, [IMAGE_TIMEOUT_MS, FINAL_WAIT_TIMEOUT_MS])
        if remaining:
            logger.warning("    %d image(s) still loading after lazy-load wait", remaining)
        logger.info("    Lazy loading complete (final height: %dpx)", final_height)
        return True
    except Exception as e:
        logger.warning("    Lazy loading trigger failed: %s", e)
        return False


async def _scroll_sweep(page: Page, scroll_delay: int) -> int:
    """Scroll in viewport-sized steps until the bottom is reached. Returns the final height."""
    metrics = await page.evaluate(_PAGE_METRICS_JS)
    height = metrics["height"]
    step = max(1, metrics["viewport"])
    logger.info("    Triggering lazy loading (page height: %dpx)...", height)

    position = 0
    for _ in range(MAX_SCROLL_STEPS):
        if position >= height:
            break
        await page.evaluate("(y) => window.scrollTo(0, y)", position)
        try:
            await page.wait_for_function(
                _GREW_OR_IMAGES_DONE_JS, arg=height, timeout=STEP_WAIT_TIMEOUT_MS,
            )
        except Exception:
            logger.debug("    Step at %dpx timed out waiting for images", position)
        await page.wait_for_timeout(scroll_delay)

        new_height = (await page.evaluate(_PAGE_METRICS_JS))["height"]
        if new_height > height:
            logger.debug("    Content loaded, new height: %dpx", new_height)
            height = new_height
        position += step
    else:
        logger.warning("    Stopped lazy-load sweep after %d steps", MAX_SCROLL_STEPS)

    # One last hop to the very bottom for observers keyed on the footer.
    await page.evaluate("() => window.scrollTo(0, document.documentElement.scrollHeight)")
    await page.wait_for_timeout(scroll_delay)
    return height
