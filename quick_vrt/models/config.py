"""Configuration models for capture and diff runs."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _default_concurrency() -> int:
    return max(1, (os.cpu_count() or 2) // 2)


class ViewportConfig(BaseModel):
    width: int = Field(default=1280, gt=0)
    height: int = Field(default=720, gt=0)

    def as_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


class CaptureOptions(BaseModel):
    # Browser
    viewport_width: int = Field(default=1280, gt=0)
    viewport_height: int = Field(default=720, gt=0)
    user_agent: Optional[str] = None
    headless: bool = True

    # Stabilization
    scroll_delay: int = Field(default=500, ge=0)  # ms between scroll steps
    disable_animations: bool = True
    lazy_loading: bool = True
    mask_videos: bool = True
    video_mask_color: str = "#808080"

    # Timing
    navigation_timeout_ms: int = Field(default=45000, gt=0)
    screenshot_timeout_ms: int = Field(default=60000, gt=0)
    settle_delay_ms: int = Field(default=500, ge=0)

    # Scheduling: sequential unless parallel is set, then bounded by concurrency
    concurrency: int = Field(default_factory=_default_concurrency, gt=0)
    parallel: bool = False

    # Diff
    diff_threshold: float = Field(default=0.1, ge=0.0, le=1.0)
    resample_mismatched: bool = True

    # Output
    output_directory: str = "./vrt-results"
    save_dom_snapshots: bool = False

    @field_validator("video_mask_color")
    @classmethod
    def _non_empty_color(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("video_mask_color must not be empty")
        return v

    @property
    def viewport(self) -> ViewportConfig:
        return ViewportConfig(width=self.viewport_width, height=self.viewport_height)

    @property
    def output_dir(self) -> Path:
        return Path(self.output_directory).resolve()

    @property
    def screenshots_dir(self) -> Path:
        return self.output_dir / "screenshots"

    @property
    def diffs_dir(self) -> Path:
        return self.output_dir / "diffs"

    @property
    def snapshots_dir(self) -> Path:
        return self.output_dir / "snapshots"

    @property
    def report_path(self) -> Path:
        return self.output_dir / "report.html"

    @classmethod
    def load(cls, path: str | Path) -> "CaptureOptions":
        """Load options from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save options to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
