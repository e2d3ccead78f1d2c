"""Differencer: reconciles screenshot geometry and counts differing pixels.

Geometry policy for mismatched screenshots, tried in order:

1. ``resample``: the after image is resized to the before image's size with
   Lanczos filtering.
2. ``pad``: when resampling is switched off or fails, both images are pasted
   at the top-left of a canvas of the element-wise maximum size, filled with
   opaque black (``PAD_BACKGROUND``). Padded regions therefore count as
   differences against any non-black content.

Pixel comparison uses pixelmatch's YIQ color distance with a 0..1 threshold.
"""

from __future__ import annotations

import asyncio
import logging
import warnings
from pathlib import Path

from PIL import Image
from pixelmatch.contrib.PIL import pixelmatch

from quick_vrt.errors import DecodeError, DimensionMismatchWarning
from quick_vrt.models.config import CaptureOptions
from quick_vrt.models.result import DiffResult, format_percentage

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.1
PAD_BACKGROUND = (0, 0, 0, 255)


def load_image(path: str | Path) -> Image.Image:
    """Read an image as RGBA, raising DecodeError for missing or corrupt files."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(str(path), str(e)) from e


def pad_to(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    canvas = Image.new("RGBA", size, PAD_BACKGROUND)
    canvas.paste(image, (0, 0))
    return canvas


def resample_to(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    return image.resize(size, Image.Resampling.LANCZOS)


def reconcile_geometry(
    before: Image.Image, after: Image.Image, resample: bool = True,
) -> tuple[Image.Image, Image.Image, str | None]:
    """Bring two images to one size. Returns (before, after, strategy used or None)."""
    if before.size == after.size:
        return before, after, None

    if resample:
        try:
            return before, resample_to(after, before.size), "resample"
        except Exception as e:
            logger.warning("Resampling failed, padding instead: %s", e)

    size = (max(before.width, after.width), max(before.height, after.height))
    return pad_to(before, size), pad_to(after, size), "pad"


def compare_images(
    before: Image.Image, after: Image.Image, threshold: float = DEFAULT_THRESHOLD,
) -> tuple[int, Image.Image]:
    """Count differing pixels between two same-sized RGBA images and render the diff."""
    if before.size != after.size:
        raise ValueError(f"Image sizes differ: {before.size} vs {after.size}")
    diff_image = Image.new("RGBA", before.size)
    diff_count = pixelmatch(before, after, diff_image, threshold=threshold)
    return diff_count, diff_image


def diff_images(
    before_path: str | Path,
    after_path: str | Path,
    output_path: str | Path,
    threshold: float = DEFAULT_THRESHOLD,
    resample: bool = True,
) -> DiffResult:
    """Compare two screenshots on disk and write the diff PNG to output_path."""
    before = load_image(before_path)
    after = load_image(after_path)

    size_warning = None
    if before.size != after.size:
        size_warning = (
            f"Screenshot sizes differ: before {before.width}x{before.height}, "
            f"after {after.width}x{after.height}"
        )
        logger.warning("%s", size_warning)
        warnings.warn(size_warning, DimensionMismatchWarning, stacklevel=2)

    before, after, strategy = reconcile_geometry(before, after, resample=resample)
    if strategy:
        size_warning = f"{size_warning} (reconciled by {strategy} to {before.width}x{before.height})"

    diff_count, diff_image = compare_images(before, after, threshold)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    diff_image.save(output_path, format="PNG")

    width, height = diff_image.size
    return DiffResult(
        pixel_diff_count=diff_count,
        diff_percentage=format_percentage(diff_count, width, height),
        width=width,
        height=height,
        size_warning=size_warning,
        reconciliation=strategy,
    )


class Differencer:
    """Runs image comparisons off the event loop with run-wide settings."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, resample: bool = True):
        self.threshold = threshold
        self.resample = resample

    @classmethod
    def from_options(cls, options: CaptureOptions) -> "Differencer":
        return cls(threshold=options.diff_threshold, resample=options.resample_mismatched)

    async def diff(self, before_path: Path, after_path: Path, output_path: Path) -> DiffResult:
        return await asyncio.to_thread(
            diff_images, before_path, after_path, output_path, self.threshold, self.resample,
        )
