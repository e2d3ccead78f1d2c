"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from PIL import Image
from playwright.async_api import Browser, BrowserContext, Page

from quick_vrt.models.config import CaptureOptions
from quick_vrt.models.pair import UrlPair
from quick_vrt.models.result import CaptureResult, PairState, RunSummary


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def capture_options(tmp_path: Path) -> CaptureOptions:
    """Capture options writing into a temporary output directory."""
    return CaptureOptions(output_directory=str(tmp_path / "vrt-results"), scroll_delay=0, settle_delay_ms=0)


@pytest.fixture
def minimal_options(tmp_path: Path) -> CaptureOptions:
    """Options with every stabilization routine switched off."""
    return CaptureOptions(
        output_directory=str(tmp_path / "vrt-results"),
        disable_animations=False,
        lazy_loading=False,
        mask_videos=False,
        settle_delay_ms=0,
    )


@pytest.fixture
def url_pairs() -> list[UrlPair]:
    return [
        UrlPair(before="https://example.com/a", after="https://staging.example.com/a"),
        UrlPair(before="https://example.com/b", after="https://staging.example.com/b"),
    ]


# ============================================================================
# Result Fixtures
# ============================================================================


def make_result(
    pair_id: str = "pair-1",
    pixel_diff_count: int = 0,
    diff_percentage: str = "0.00",
    **kwargs,
) -> CaptureResult:
    """Build a successful capture result."""
    defaults = dict(
        id=pair_id,
        before_url="https://example.com",
        after_url="https://staging.example.com",
        before_image=f"screenshots/{pair_id}-before.png",
        after_image=f"screenshots/{pair_id}-after.png",
        diff_image=f"diffs/{pair_id}-diff.png",
        pixel_diff_count=pixel_diff_count,
        diff_percentage=diff_percentage,
    )
    defaults.update(kwargs)
    return CaptureResult(**defaults)


def make_error_result(pair_id: str = "pair-1", error: str = "Navigation to https://down.test failed") -> CaptureResult:
    """Build a failed capture result."""
    return CaptureResult(
        id=pair_id,
        before_url="https://down.test",
        after_url="https://staging.example.com",
        state=PairState.FAILED,
        error=error,
    )


@pytest.fixture
def sample_summary(tmp_path: Path) -> RunSummary:
    """A run with one identical, one different, and one failed pair."""
    results = [
        make_result("pair-1"),
        make_result("pair-2", pixel_diff_count=4200, diff_percentage="12.50",
                    size_warning="Screenshot sizes differ: before 1280x2000, after 1280x2100"),
        make_error_result("pair-3"),
    ]
    return RunSummary.from_results(
        results,
        started_at="2024-01-01T00:00:00Z",
        completed_at="2024-01-01T00:01:00Z",
        output_dir=str(tmp_path),
        duration_seconds=60.0,
    )


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_page() -> AsyncMock:
    """Create a mock Playwright page."""
    page = AsyncMock(spec=Page)
    page.url = "https://example.com"
    page.goto = AsyncMock(return_value=None)
    page.screenshot = AsyncMock()
    page.evaluate = AsyncMock(return_value=None)
    page.wait_for_function = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.content = AsyncMock(return_value="<html><body>snapshot</body></html>")
    return page


@pytest.fixture
def mock_context(mock_page: AsyncMock) -> AsyncMock:
    """Create a mock Playwright browser context."""
    context = AsyncMock(spec=BrowserContext)
    context.new_page = AsyncMock(return_value=mock_page)
    return context


@pytest.fixture
def mock_browser(mock_context: AsyncMock) -> AsyncMock:
    """Create a mock Playwright browser."""
    browser = AsyncMock(spec=Browser)
    browser.new_context = AsyncMock(return_value=mock_context)
    return browser


# ============================================================================
# Helper Functions
# ============================================================================


def write_png(path: Path, size: tuple[int, int], color=(255, 255, 255, 255), pixels: dict | None = None) -> Path:
    """Write a solid-color PNG, optionally overriding individual pixels."""
    img = Image.new("RGBA", size, color)
    for xy, value in (pixels or {}).items():
        img.putpixel(xy, value)
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path, format="PNG")
    return path
