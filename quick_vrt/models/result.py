"""Result data structures produced by the differencer and orchestrator."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class PairState(str, Enum):
    PENDING = "pending"
    CAPTURING_BEFORE = "capturing-before"
    CAPTURING_AFTER = "capturing-after"
    DIFFING = "diffing"
    DONE = "done"
    FAILED = "failed"


class DiffResult(BaseModel):
    """Metrics for one image comparison."""
    pixel_diff_count: int
    diff_percentage: str  # two decimals, e.g. "0.00"
    width: int
    height: int
    size_warning: Optional[str] = None
    reconciliation: Optional[str] = None  # resample, pad


def format_percentage(diff_count: int, width: int, height: int) -> str:
    """Percentage of differing pixels, rounded to two decimals."""
    total = width * height
    if total <= 0:
        return "0.00"
    return f"{diff_count / total * 100:.2f}"


class CaptureResult(BaseModel):
    """Outcome of one pair. Either the metric fields or error is populated."""
    id: str
    before_url: str
    after_url: str
    state: PairState = PairState.DONE
    before_image: Optional[str] = None  # relative to the output directory
    after_image: Optional[str] = None
    diff_image: Optional[str] = None
    pixel_diff_count: Optional[int] = None
    diff_percentage: Optional[str] = None
    size_warning: Optional[str] = None
    stabilization_warnings: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @model_validator(mode="after")
    def _metrics_xor_error(self) -> "CaptureResult":
        has_metrics = self.pixel_diff_count is not None and self.diff_percentage is not None
        if self.error is not None and has_metrics:
            raise ValueError("A result cannot carry both metrics and an error")
        if self.error is None and not has_metrics:
            raise ValueError("A result needs either metrics or an error")
        return self

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_identical(self) -> bool:
        return not self.is_error and self.pixel_diff_count == 0

    @property
    def is_different(self) -> bool:
        return not self.is_error and self.pixel_diff_count > 0


class ProgressEvent(BaseModel):
    index: int  # 1-based position of the pair in the batch
    total: int
    pair_id: str
    state: PairState
    message: str = ""


class RunSummary(BaseModel):
    started_at: str
    completed_at: str
    output_dir: str
    duration_seconds: float = 0.0
    total: int = 0
    identical: int = 0
    different: int = 0
    errors: int = 0
    interrupted: bool = False
    results: list[CaptureResult] = Field(default_factory=list)

    @classmethod
    def from_results(
        cls,
        results: list[CaptureResult],
        started_at: str,
        completed_at: str,
        output_dir: str,
        duration_seconds: float = 0.0,
        interrupted: bool = False,
    ) -> "RunSummary":
        return cls(
            started_at=started_at,
            completed_at=completed_at,
            output_dir=output_dir,
            duration_seconds=round(duration_seconds, 2),
            total=len(results),
            identical=sum(1 for r in results if r.is_identical),
            different=sum(1 for r in results if r.is_different),
            errors=sum(1 for r in results if r.is_error),
            interrupted=interrupted,
            results=list(results),
        )
