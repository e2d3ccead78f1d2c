"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from quick_vrt.models.config import CaptureOptions
from quick_vrt.models.result import RunSummary

from .html_report import generate_html_report
from .json_report import generate_json_report

logger = logging.getLogger(__name__)

JSON_REPORT_NAME = "results.json"


class Reporter:
    """Generates reports from a finished run."""

    def __init__(self, options: CaptureOptions):
        self.options = options

    def generate_reports(
        self,
        summary: RunSummary,
        output_dir: Path | None = None,
    ) -> dict[str, str]:
        """Generate the HTML and JSON reports. Returns format -> file path."""
        out_dir = output_dir or self.options.output_dir
        out_dir.mkdir(parents=True, exist_ok=True)
        generated = {}
        logger.debug("Report output directory: %s", out_dir)

        path = out_dir / self.options.report_path.name
        logger.debug("Generating HTML report...")
        generate_html_report(summary, path)
        generated["html"] = str(path)
        logger.info("HTML report: %s", path)

        path = out_dir / JSON_REPORT_NAME
        logger.debug("Generating JSON report...")
        generate_json_report(summary, path)
        generated["json"] = str(path)
        logger.info("JSON report: %s", path)

        return generated
