"""Registry of third-party animation libraries that get paused before capture.

Each entry pairs a detector (a JS expression that is truthy when the library
is present in the page's global scope) with a suppressor (a JS function body
that pauses or disables it). Entries run independently: a missing library or
a suppressor that throws is logged and the next entry still runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from playwright.async_api import Page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LibrarySuppressor:
    name: str
    detector: str
    suppressor: str


_REGISTRY: list[LibrarySuppressor] = [
    LibrarySuppressor(
        name="gsap",
        detector="typeof window.gsap !== 'undefined' && !!window.gsap.globalTimeline",
        suppressor="""
            window.gsap.globalTimeline.getChildren(true, true, true)
                .forEach(t => { try { t.progress(1); } catch (e) {} });
            window.gsap.globalTimeline.pause();
        """,
    ),
    LibrarySuppressor(
        name="tweenmax",
        detector="typeof window.TweenMax !== 'undefined' && typeof window.TweenMax.pauseAll === 'function'",
        suppressor="window.TweenMax.pauseAll(true, true, true);",
    ),
    LibrarySuppressor(
        name="scrolltrigger",
        detector="typeof window.ScrollTrigger !== 'undefined' && typeof window.ScrollTrigger.getAll === 'function'",
        suppressor="""
            window.ScrollTrigger.getAll().forEach(t => {
                try { if (t.animation) t.animation.progress(1); } catch (e) {}
                t.disable(false);
            });
        """,
    ),
    LibrarySuppressor(
        name="aos",
        detector="typeof window.AOS !== 'undefined'",
        suppressor="""
            document.querySelectorAll('[data-aos]').forEach(el => {
                el.classList.add('aos-animate');
                el.removeAttribute('data-aos');
            });
        """,
    ),
    LibrarySuppressor(
        name="wow",
        detector="typeof window.WOW !== 'undefined' || !!document.querySelector('.wow')",
        suppressor="""
            document.querySelectorAll('.wow').forEach(el => {
                el.style.visibility = 'visible';
                el.style.animationName = 'none';
                el.classList.add('animated');
            });
        """,
    ),
    LibrarySuppressor(
        name="scrollreveal",
        detector="typeof window.ScrollReveal !== 'undefined'",
        suppressor="""
            document.querySelectorAll('[data-sr-id]').forEach(el => {
                el.style.visibility = 'visible';
                el.style.opacity = '1';
                el.style.transform = 'none';
            });
        """,
    ),
    LibrarySuppressor(
        name="anime",
        detector="typeof window.anime !== 'undefined' && Array.isArray(window.anime.running)",
        suppressor="""
            window.anime.running.slice().forEach(a => {
                try { a.seek(a.duration); } catch (e) {}
                a.pause();
            });
        """,
    ),
    LibrarySuppressor(
        name="jquery",
        detector="typeof window.jQuery !== 'undefined' && !!window.jQuery.fx",
        suppressor="""
            window.jQuery.fx.off = true;
            try { window.jQuery(':animated').finish(); } catch (e) {}
        """,
    ),
    LibrarySuppressor(
        name="lottie",
        detector="typeof window.lottie !== 'undefined' && typeof window.lottie.freeze === 'function'",
        suppressor="window.lottie.freeze();",
    ),
    LibrarySuppressor(
        name="swiper",
        detector="!!document.querySelector('.swiper, .swiper-container')",
        suppressor="""
            document.querySelectorAll('.swiper, .swiper-container').forEach(el => {
                const s = el.swiper;
                if (s && s.autoplay && typeof s.autoplay.stop === 'function') s.autoplay.stop();
            });
        """,
    ),
]


def register_library_suppressor(entry: LibrarySuppressor) -> None:
    """Add (or replace, by name) a library suppressor."""
    unregister_library_suppressor(entry.name)
    _REGISTRY.append(entry)


def unregister_library_suppressor(name: str) -> None:
    _REGISTRY[:] = [e for e in _REGISTRY if e.name != name]


def registered_suppressors() -> list[LibrarySuppressor]:
    return list(_REGISTRY)


async def suppress_animation_libraries(
    page: Page, registry: list[LibrarySuppressor] | None = None,
) -> list[str]:
    """Run every registered suppressor whose detector matches. Returns the names paused."""
    paused = []
    for entry in registry if registry is not None else registered_suppressors():
        try:
            present = await page.evaluate(f"() => {{ try {{ return !!({entry.detector}); }} catch (e) {{ return false; }} }}")
            if not present:
                continue
            await page.evaluate(f"() => {{ {entry.suppressor} }}")
            paused.append(entry.name)
            logger.debug("    Paused animation library: %s", entry.name)
        except Exception as e:
            logger.warning("    Failed to pause %s animations: %s", entry.name, e)
    return paused
