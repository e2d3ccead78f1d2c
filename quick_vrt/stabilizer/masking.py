"""Dynamic-region masking: cover video-like content with flat overlays."""

from __future__ import annotations

import logging

from playwright.async_api import Page

logger = logging.getLogger(__name__)

MASK_ATTRIBUTE = "data-vrt-mask"
# Set on each covered element so repeated masking passes do not stack overlays.
MASKED_TARGET_ATTRIBUTE = "data-vrt-masked"

VIDEO_HOST_DOMAINS = [
    "youtube.com", "youtube-nocookie.com", "youtu.be", "vimeo.com",
    "dailymotion.com", "twitch.tv", "wistia.com", "wistia.net",
    "brightcove.net", "jwplayer.com", "jwplatform.com", "loom.com",
    "vidyard.com", "streamable.com", "facebook.com/plugins/video",
]

VIDEO_PLAYER_CLASSES = [
    "video-js", "vjs-tech", "jwplayer", "jw-player", "plyr", "mejs__container",
    "mejs-container", "flowplayer", "wistia_embed", "vimeo-player",
    "youtube-player", "html5-video-player", "brightcove-player", "shaka-video-container",
    "fp-player", "vidyard-player-container",
]

VIDEO_FILE_EXTENSIONS = [".mp4", ".webm", ".mov", ".m4v", ".ogv"]

# Canvases at least this large whose class or id mentions a player are masked.
MIN_PLAYER_CANVAS_AREA = 200 * 150

_MASK_JS = """
({ color, attribute, targetAttribute, domains, playerClasses, extensions, minCanvasArea }) => {
    const candidates = [];
    const seen = new Set();
    const add = (el, label) => {
        if (!el || seen.has(el) || el.hasAttribute(attribute) || el.closest(`[${targetAttribute}]`)) return;
        seen.add(el);
        candidates.push({ el, label });
    };
    const nameOf = (el) => `${el.id || ''} ${typeof el.className === 'string' ? el.className : ''}`.toLowerCase();
    const suggestsVideo = (text) => /video|player|vimeo|youtube/.test(text);

    document.querySelectorAll('video').forEach(el => add(el, 'VIDEO'));

    document.querySelectorAll('iframe').forEach(el => {
        const src = (el.src || el.getAttribute('data-src') || '').toLowerCase();
        const title = (el.title || '').toLowerCase();
        if (domains.some(d => src.includes(d)) || title.includes('video') || suggestsVideo(nameOf(el))) {
            add(el, 'IFRAME');
        }
    });

    document.querySelectorAll('body *').forEach(el => {
        if (el.tagName === 'VIDEO' || el.tagName === 'IFRAME') return;
        const bg = window.getComputedStyle(el).backgroundImage || '';
        if (bg !== 'none' && extensions.some(ext => bg.toLowerCase().includes(ext))) {
            add(el, 'BG VIDEO');
        }
    });

    document.querySelectorAll('canvas').forEach(el => {
        const rect = el.getBoundingClientRect();
        if (rect.width * rect.height >= minCanvasArea && suggestsVideo(nameOf(el))) {
            add(el, 'CANVAS');
        }
    });

    playerClasses.forEach(cls => {
        document.querySelectorAll('.' + cls).forEach(el => add(el, 'PLAYER'));
    });

    // Keep only the outermost match so a player wrapping a <video> gets one mask.
    const outermost = candidates.filter(({ el }) =>
        !candidates.some(other => other.el !== el && other.el.contains(el)));

    let masked = 0;
    const counters = {};
    outermost.forEach(({ el, label }) => {
        const rect = el.getBoundingClientRect();
        if (rect.width === 0 || rect.height === 0) return;
        counters[label] = (counters[label] || 0) + 1;

        const mask = document.createElement('div');
        mask.setAttribute(attribute, 'true');
        mask.textContent = `[${label} ${counters[label]} MASKED]`;
        const place = (r) => {
            mask.style.setProperty('top', `${r.top + window.scrollY}px`, 'important');
            mask.style.setProperty('left', `${r.left + window.scrollX}px`, 'important');
            mask.style.setProperty('width', `${r.width}px`, 'important');
            mask.style.setProperty('height', `${r.height}px`, 'important');
        };
        mask.style.cssText = `
            position: fixed !important;
            margin: 0 !important;
            background-color: ${color} !important;
            z-index: 2147483647 !important;
            pointer-events: none !important;
            border-radius: ${window.getComputedStyle(el).borderRadius} !important;
            display: flex !important;
            align-items: center !important;
            justify-content: center !important;
            font-family: Arial, sans-serif !important;
            font-size: 14px !important;
            color: white !important;
            text-shadow: 1px 1px 2px rgba(0,0,0,0.5) !important;
        `;
        place(rect);

        const observer = new MutationObserver(() => {
            const next = el.getBoundingClientRect();
            if (next.width > 0 && next.height > 0) place(next);
        });
        observer.observe(el, { attributes: true, attributeFilter: ['style', 'class'], subtree: false });

        el.setAttribute(targetAttribute, 'true');
        document.body.appendChild(mask);
        masked++;
    });
    return masked;
}
"""


async def mask_videos(page: Page, mask_color: str = "#808080") -> int:
    """Overlay every video-like region with a flat block. Never raises; returns the mask count."""
    try:
        masked = await page.evaluate(_MASK_JS, {
            "color": mask_color,
            "attribute": MASK_ATTRIBUTE,
            "targetAttribute": MASKED_TARGET_ATTRIBUTE,
            "domains": VIDEO_HOST_DOMAINS,
            "playerClasses": VIDEO_PLAYER_CLASSES,
            "extensions": VIDEO_FILE_EXTENSIONS,
            "minCanvasArea": MIN_PLAYER_CANVAS_AREA,
        })
        # Give the overlays a frame to paint.
        await page.wait_for_timeout(100)
        logger.info("    Videos masked (%d region(s))", masked or 0)
        return masked or 0
    except Exception as e:
        logger.warning("    Failed to mask videos: %s", e)
        return 0


async def count_masks(page: Page) -> int:
    return await page.evaluate(
        "(attr) => document.querySelectorAll(`[${attr}]`).length", MASK_ATTRIBUTE,
    )
