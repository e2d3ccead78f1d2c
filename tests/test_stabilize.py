"""Tests for the stabilization sequence."""

from unittest.mock import AsyncMock, patch

import pytest

from quick_vrt.models.config import CaptureOptions
from quick_vrt.stabilizer.stabilize import STEP_PACING_MS, stabilize_page


def _recording_patches(calls: list[str], animations_ok=True, lazy_ok=True, masks=1):
    async def fake_animations(page, poll_interval_ms=100):
        calls.append("animations")
        return animations_ok

    async def fake_lazy(page, scroll_delay=500):
        calls.append("lazy_loading")
        return lazy_ok

    async def fake_mask(page, color="#808080"):
        calls.append("masking")
        return masks

    return (
        patch("quick_vrt.stabilizer.stabilize.disable_animations", new=fake_animations),
        patch("quick_vrt.stabilizer.stabilize.trigger_lazy_loading", new=fake_lazy),
        patch("quick_vrt.stabilizer.stabilize.mask_videos", new=fake_mask),
    )


class TestStabilizePage:
    @pytest.mark.asyncio
    async def test_runs_steps_in_order(self, mock_page):
        calls: list[str] = []
        p1, p2, p3 = _recording_patches(calls)
        with p1, p2, p3:
            report = await stabilize_page(mock_page, CaptureOptions())

        assert calls == ["animations", "lazy_loading", "masking"]
        assert report.steps_run == calls
        assert report.masks_applied == 1
        assert report.warnings == []
        # A pause after animations and after lazy loading.
        assert mock_page.wait_for_timeout.await_count == 2
        mock_page.wait_for_timeout.assert_awaited_with(STEP_PACING_MS)

    @pytest.mark.asyncio
    async def test_disabled_routines_never_touch_the_page(self, mock_page, minimal_options):
        report = await stabilize_page(mock_page, minimal_options)

        assert report.steps_run == []
        mock_page.evaluate.assert_not_awaited()
        mock_page.wait_for_timeout.assert_not_awaited()
        mock_page.wait_for_function.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_only_masking(self, mock_page):
        calls: list[str] = []
        p1, p2, p3 = _recording_patches(calls, masks=3)
        options = CaptureOptions(disable_animations=False, lazy_loading=False)
        with p1, p2, p3:
            report = await stabilize_page(mock_page, options)

        assert calls == ["masking"]
        assert report.masks_applied == 3

    @pytest.mark.asyncio
    async def test_step_failures_become_warnings(self, mock_page):
        calls: list[str] = []
        p1, p2, p3 = _recording_patches(calls, animations_ok=False, lazy_ok=False)
        with p1, p2, p3:
            report = await stabilize_page(mock_page, CaptureOptions())

        assert calls == ["animations", "lazy_loading", "masking"]
        assert len(report.warnings) == 2

    @pytest.mark.asyncio
    async def test_pacing_follows_short_scroll_delay(self, mock_page):
        calls: list[str] = []
        p1, p2, p3 = _recording_patches(calls)
        with p1, p2, p3:
            await stabilize_page(mock_page, CaptureOptions(scroll_delay=50))

        mock_page.wait_for_timeout.assert_awaited_with(50)

    @pytest.mark.asyncio
    async def test_pause_failure_is_swallowed(self, mock_page):
        calls: list[str] = []
        mock_page.wait_for_timeout = AsyncMock(side_effect=Exception("Target closed"))
        p1, p2, p3 = _recording_patches(calls)
        with p1, p2, p3:
            report = await stabilize_page(mock_page, CaptureOptions())

        assert report.steps_run == ["animations", "lazy_loading", "masking"]
