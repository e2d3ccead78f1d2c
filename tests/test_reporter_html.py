"""Tests for HTML report generation."""

from pathlib import Path

import pytest

from conftest import make_error_result, make_result
from quick_vrt.models.result import RunSummary
from quick_vrt.reporter.html_report import _build_pair_card, generate_html_report, severity_class


class TestSeverityClass:
    @pytest.mark.parametrize("count,percentage,expected", [
        (0, "0.00", "success"),
        (10, "0.01", "warning"),
        (500, "5.00", "warning"),
        (501, "5.01", "error"),
    ])
    def test_thresholds(self, count, percentage, expected):
        assert severity_class(make_result(pixel_diff_count=count, diff_percentage=percentage)) == expected

    def test_failed(self):
        assert severity_class(make_error_result()) == "failed"


class TestPairCard:
    def test_success_card_references_relative_images(self):
        card = _build_pair_card(make_result("pair-7", pixel_diff_count=12, diff_percentage="0.40"))

        assert 'id="pair-7"' in card
        assert 'src="screenshots/pair-7-before.png"' in card
        assert 'src="screenshots/pair-7-after.png"' in card
        assert 'src="diffs/pair-7-diff.png"' in card
        assert "0.40%" in card
        assert 'data-status="different"' in card
        assert "slider-view" in card

    def test_error_card_has_no_images(self):
        card = _build_pair_card(make_error_result("pair-3", error="Navigation to https://down.test failed"))

        assert "ERROR" in card
        assert "Navigation to https://down.test failed" in card
        assert "<img" not in card
        assert 'data-status="error"' in card

    def test_size_warning_banner(self):
        card = _build_pair_card(make_result(size_warning="Screenshot sizes differ"))
        assert "size-banner" in card
        assert "Screenshot sizes differ" in card

    def test_stabilization_warnings_listed(self):
        card = _build_pair_card(make_result(stabilization_warnings=["after: lazy loading: <timeout>"]))
        assert "Stabilization warnings" in card
        assert "after: lazy loading: &lt;timeout&gt;" in card

    def test_urls_are_escaped(self):
        card = _build_pair_card(make_result(before_url='https://a.test/?q="<script>"'))
        assert "<script>" not in card
        assert "&lt;script&gt;" in card


class TestGenerateHtmlReport:
    def test_writes_report_with_tallies(self, sample_summary, tmp_path: Path):
        out = tmp_path / "report.html"

        generate_html_report(sample_summary, out)

        html = out.read_text(encoding="utf-8")
        assert html.startswith("<!DOCTYPE html>")
        assert '<div class="value">3</div><div class="label">Comparisons</div>' in html
        assert '<div class="value">1</div><div class="label">Identical</div>' in html
        assert '<div class="value">1</div><div class="label">Different</div>' in html
        assert '<div class="value">1</div><div class="label">Errors</div>' in html
        assert html.index('id="pair-1"') < html.index('id="pair-2"') < html.index('id="pair-3"')

    def test_interrupted_banner(self, tmp_path: Path):
        summary = RunSummary.from_results(
            [make_result()], started_at="s", completed_at="c", output_dir=str(tmp_path), interrupted=True,
        )
        out = tmp_path / "report.html"

        generate_html_report(summary, out)

        assert "Run interrupted" in out.read_text(encoding="utf-8")

    def test_empty_run(self, tmp_path: Path):
        summary = RunSummary.from_results([], started_at="s", completed_at="c", output_dir=str(tmp_path))
        out = tmp_path / "nested" / "report.html"

        generate_html_report(summary, out)

        assert out.exists()
