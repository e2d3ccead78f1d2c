"""Pipeline orchestrator: capture, diff, and report for a batch of URL pairs."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from playwright.async_api import Browser, BrowserContext, async_playwright

from quick_vrt.capture.browser import create_capture_context, launch_browser
from quick_vrt.capture.capturer import Capturer
from quick_vrt.diff.differencer import Differencer
from quick_vrt.errors import UsageError
from quick_vrt.models.config import CaptureOptions
from quick_vrt.models.pair import UrlPair
from quick_vrt.models.result import CaptureResult, PairState, ProgressEvent, RunSummary
from quick_vrt.reporter.reporter import Reporter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class Orchestrator:
    """Drives every pair through before capture, after capture, and diff.

    Pairs run one at a time unless ``options.parallel`` is set, in which case
    up to ``options.concurrency`` pairs share the browser at once. Raising the
    bound trades stability for throughput. Results always come back in input
    order, and a failing pair is recorded without stopping the batch.
    """

    def __init__(self, options: CaptureOptions, on_progress: Optional[ProgressCallback] = None):
        self.options = options
        self.on_progress = on_progress
        self.capturer = Capturer(options)
        self.differencer = Differencer.from_options(options)
        self.interrupted = False

    def run(self, pairs: list[UrlPair]) -> RunSummary:
        """Process all pairs and return the run summary."""
        return asyncio.run(self.run_async(pairs))

    async def run_async(self, pairs: list[UrlPair]) -> RunSummary:
        self._validate(pairs)
        started_at = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
        start = time.time()
        self.interrupted = False
        self._prepare_output_dirs()
        logger.info("=== Starting visual regression run: %d pair(s) ===", len(pairs))

        async with async_playwright() as p:
            logger.debug("Launching Chromium...")
            browser = await launch_browser(p, headless=self.options.headless)
            try:
                results = await self._run_batch(browser, pairs)
            finally:
                await self._close_browser(browser)

        duration = time.time() - start
        summary = RunSummary.from_results(
            results,
            started_at=started_at,
            completed_at=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            output_dir=str(self.options.output_dir),
            duration_seconds=duration,
            interrupted=self.interrupted,
        )
        logger.info(
            "=== Run complete in %.1fs: %d identical, %d different, %d errors ===",
            duration, summary.identical, summary.different, summary.errors,
        )
        return summary

    def report(self, summary: RunSummary) -> dict[str, str]:
        """Write the configured reports for a finished run. Returns format -> path."""
        return Reporter(self.options).generate_reports(summary)

    @staticmethod
    def _validate(pairs: list[UrlPair]) -> None:
        if not pairs:
            raise UsageError("No URL pairs to compare")
        for i, pair in enumerate(pairs, 1):
            if not pair.is_eligible:
                raise UsageError(f"Pair {i} needs both a before and an after URL")

    def _prepare_output_dirs(self) -> None:
        self.options.screenshots_dir.mkdir(parents=True, exist_ok=True)
        self.options.diffs_dir.mkdir(parents=True, exist_ok=True)
        if self.options.save_dom_snapshots:
            self.options.snapshots_dir.mkdir(parents=True, exist_ok=True)

    async def _run_batch(self, browser: Browser, pairs: list[UrlPair]) -> list[CaptureResult]:
        total = len(pairs)
        slots: list[CaptureResult | None] = [None] * total

        try:
            if self.options.parallel and self.options.concurrency > 1:
                await self._run_parallel(browser, pairs, slots)
            else:
                for index, pair in enumerate(pairs):
                    slots[index] = await self._process_pair(browser, index, total, pair)
        except asyncio.CancelledError:
            self.interrupted = True
            done = sum(1 for r in slots if r is not None)
            logger.warning("Run interrupted: keeping %d of %d completed result(s)", done, total)

        return [r for r in slots if r is not None]

    async def _run_parallel(
        self, browser: Browser, pairs: list[UrlPair], slots: list[CaptureResult | None],
    ) -> None:
        total = len(pairs)
        semaphore = asyncio.Semaphore(self.options.concurrency)
        logger.info("Processing pairs in parallel (concurrency=%d)", self.options.concurrency)

        async def _run_one(index: int, pair: UrlPair) -> None:
            async with semaphore:
                slots[index] = await self._process_pair(browser, index, total, pair)

        tasks = [asyncio.create_task(_run_one(i, pair)) for i, pair in enumerate(pairs)]
        try:
            await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _process_pair(
        self, browser: Browser, index: int, total: int, pair: UrlPair,
    ) -> CaptureResult:
        pair_id = f"pair-{index + 1}"
        before_path = self.options.screenshots_dir / f"{pair_id}-before.png"
        after_path = self.options.screenshots_dir / f"{pair_id}-after.png"
        diff_path = self.options.diffs_dir / f"{pair_id}-diff.png"
        snapshots = self.options.snapshots_dir if self.options.save_dom_snapshots else None

        logger.info("Comparing [%d/%d] %s vs %s...", index + 1, total, pair.before, pair.after)
        state = PairState.PENDING
        self._emit(index, total, pair_id, state)
        start = time.time()
        context: BrowserContext | None = None

        try:
            context = await create_capture_context(browser, self.options)
            page = await context.new_page()

            state = PairState.CAPTURING_BEFORE
            self._emit(index, total, pair_id, state)
            before_report = await self.capturer.capture(
                page, pair.before, before_path,
                snapshots / f"{pair_id}-before.html" if snapshots else None,
            )

            state = PairState.CAPTURING_AFTER
            self._emit(index, total, pair_id, state)
            after_report = await self.capturer.capture(
                page, pair.after, after_path,
                snapshots / f"{pair_id}-after.html" if snapshots else None,
            )

            await self._close_context(context)
            context = None

            state = PairState.DIFFING
            self._emit(index, total, pair_id, state)
            diff = await self.differencer.diff(before_path, after_path, diff_path)

            result = CaptureResult(
                id=pair_id,
                before_url=pair.before,
                after_url=pair.after,
                state=PairState.DONE,
                before_image=self._relative(before_path),
                after_image=self._relative(after_path),
                diff_image=self._relative(diff_path),
                pixel_diff_count=diff.pixel_diff_count,
                diff_percentage=diff.diff_percentage,
                size_warning=diff.size_warning,
                stabilization_warnings=(
                    [f"before: {w}" for w in before_report.warnings]
                    + [f"after: {w}" for w in after_report.warnings]
                ),
                duration_seconds=round(time.time() - start, 2),
            )
            logger.info("  %s: %s%% different (%d pixels)",
                        pair_id, diff.diff_percentage, diff.pixel_diff_count)
            self._emit(index, total, pair_id, PairState.DONE, f"{diff.diff_percentage}%")
            return result

        except Exception as e:
            logger.error("Error processing pair %d during %s: %s", index + 1, state.value, e)
            self._emit(index, total, pair_id, PairState.FAILED, str(e))
            return CaptureResult(
                id=pair_id,
                before_url=pair.before,
                after_url=pair.after,
                state=PairState.FAILED,
                error=str(e),
                duration_seconds=round(time.time() - start, 2),
            )
        finally:
            if context is not None:
                await self._close_context(context)

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.options.output_dir).as_posix()

    def _emit(self, index: int, total: int, pair_id: str, state: PairState, message: str = "") -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(ProgressEvent(
                index=index + 1, total=total, pair_id=pair_id, state=state, message=message,
            ))
        except Exception as e:
            logger.debug("Progress callback failed: %s", e)

    @staticmethod
    async def _close_browser(browser: Browser) -> None:
        try:
            await browser.close()
        except Exception as e:
            logger.debug("Closing browser failed: %s", e)

    @staticmethod
    async def _close_context(context: BrowserContext) -> None:
        try:
            await context.close()
        except Exception as e:
            logger.debug("Closing browser context failed: %s", e)
