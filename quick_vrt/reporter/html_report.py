"""HTML report generator: one browsable page with a card per URL pair."""

from __future__ import annotations

import html
import logging
from pathlib import Path

from quick_vrt.models.result import CaptureResult, RunSummary

logger = logging.getLogger(__name__)

# Above this percentage a difference is shown as an error rather than a warning.
ERROR_PERCENTAGE = 5.0


def severity_class(result: CaptureResult) -> str:
    """CSS class for a result: success, warning, error, or failed."""
    if result.is_error:
        return "failed"
    if result.is_identical:
        return "success"
    if float(result.diff_percentage) > ERROR_PERCENTAGE:
        return "error"
    return "warning"


def _image_tag(src: str | None, label: str) -> str:
    if not src:
        return f'<div class="missing-image">No {html.escape(label.lower())} image</div>'
    return (f'<img src="{html.escape(src)}" alt="{html.escape(label)}" loading="lazy" '
            f'onclick="this.classList.toggle(\'zoomed\')"/>')


def _build_error_card(r: CaptureResult) -> str:
    return f'''
    <div class="pair-card failed" id="{html.escape(r.id)}" data-status="error">
      <div class="pair-header">
        <div class="pair-header-left">
          <span class="badge failed">ERROR</span>
          <strong>{html.escape(r.id)}</strong>
        </div>
      </div>
      <div class="pair-urls">
        <div><span class="url-label">Before</span> <a href="{html.escape(r.before_url)}">{html.escape(r.before_url)}</a></div>
        <div><span class="url-label">After</span> <a href="{html.escape(r.after_url)}">{html.escape(r.after_url)}</a></div>
      </div>
      <div class="failure-banner"><strong>Comparison failed:</strong> {html.escape(r.error or "")}</div>
    </div>'''


def _build_pair_card(r: CaptureResult) -> str:
    """Build the card for one pair, in side-by-side mode with a slider alternative."""
    if r.is_error:
        return _build_error_card(r)

    severity = severity_class(r)
    status = "identical" if r.is_identical else "different"

    card = f'''
    <div class="pair-card {severity}" id="{html.escape(r.id)}" data-status="{status}">
      <div class="pair-header">
        <div class="pair-header-left">
          <span class="badge {severity}">{r.diff_percentage}%</span>
          <strong>{html.escape(r.id)}</strong>
          <span class="pair-meta">{r.pixel_diff_count:,} pixels changed &middot; {r.duration_seconds:.1f}s</span>
        </div>
        <div class="view-toggle">
          <button class="view-btn active" onclick="setView(this, 'side')">Side by side</button>
          <button class="view-btn" onclick="setView(this, 'slider')">Slider</button>
        </div>
      </div>
      <div class="pair-urls">
        <div><span class="url-label">Before</span> <a href="{html.escape(r.before_url)}">{html.escape(r.before_url)}</a></div>
        <div><span class="url-label">After</span> <a href="{html.escape(r.after_url)}">{html.escape(r.after_url)}</a></div>
      </div>
    '''

    if r.size_warning:
        card += f'<div class="size-banner"><strong>Size mismatch:</strong> {html.escape(r.size_warning)}</div>'
    if r.stabilization_warnings:
        items = "".join(f"<li>{html.escape(w)}</li>" for w in r.stabilization_warnings)
        card += f'<div class="size-banner"><strong>Stabilization warnings:</strong><ul>{items}</ul></div>'

    card += f'''
      <div class="view side-view">
        <div class="image-item">{_image_tag(r.before_image, "Before")}<div class="image-label">Before</div></div>
        <div class="image-item">{_image_tag(r.after_image, "After")}<div class="image-label">After</div></div>
        <div class="image-item">{_image_tag(r.diff_image, "Diff")}<div class="image-label">Diff</div></div>
      </div>
      <div class="view slider-view" style="display: none;">
        <div class="slider-frame">
          <img class="slider-base" src="{html.escape(r.before_image or "")}" alt="Before"/>
          <div class="slider-overlay"><img src="{html.escape(r.after_image or "")}" alt="After"/></div>
        </div>
        <input type="range" min="0" max="100" value="50" class="slider-input" oninput="slide(this)"/>
      </div>
    </div>'''
    return card


def generate_html_report(summary: RunSummary, output_path: Path) -> None:
    """Generate the HTML report. Image paths stay relative to the output directory."""
    cards = [_build_pair_card(r) for r in summary.results]

    interrupted_section = ""
    if summary.interrupted:
        interrupted_section = ('<div class="interrupted-banner"><strong>Run interrupted:</strong> '
                               'only the pairs completed before the interruption are shown.</div>')

    report_html = f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Visual Regression Report &mdash; {html.escape(summary.started_at)}</title>
<style>
  :root {{ --success: #22c55e; --warning: #eab308; --error: #ef4444; --failed: #f97316; --bg: #f8fafc; --card: white; --border: #e2e8f0; --text: #1e293b; --muted: #64748b; --accent: #6366f1; }}
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: var(--bg); color: var(--text); line-height: 1.6; padding: 1.5rem; }}
  .container {{ max-width: 1600px; margin: 0 auto; }}
  h1 {{ font-size: 1.8rem; margin-bottom: 0.3rem; }}
  .meta {{ color: var(--muted); margin-bottom: 1.5rem; font-size: 0.9rem; }}
  /* Summary cards */
  .summary {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(130px, 1fr)); gap: 0.8rem; margin-bottom: 1.5rem; }}
  .stat {{ background: var(--card); border-radius: 8px; padding: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); text-align: center; }}
  .stat .value {{ font-size: 1.8rem; font-weight: 700; }}
  .stat .label {{ font-size: 0.8rem; color: var(--muted); }}
  .stat.success .value {{ color: var(--success); }}
  .stat.warning .value {{ color: var(--warning); }}
  .stat.failed .value {{ color: var(--failed); }}
  /* Badges */
  .badge {{ display: inline-block; padding: 0.15rem 0.55rem; border-radius: 9999px; font-size: 0.75rem; font-weight: 600; white-space: nowrap; }}
  .badge.success {{ background: #dcfce7; color: #166534; }}
  .badge.warning {{ background: #fef9c3; color: #854d0e; }}
  .badge.error {{ background: #fecaca; color: #991b1b; }}
  .badge.failed {{ background: #fed7aa; color: #9a3412; }}
  /* Pair cards */
  .pair-card {{ background: var(--card); border-radius: 8px; margin-bottom: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); overflow: hidden; padding-bottom: 1rem; }}
  .pair-card.success {{ border-left: 4px solid var(--success); }}
  .pair-card.warning {{ border-left: 4px solid var(--warning); }}
  .pair-card.error {{ border-left: 4px solid var(--error); }}
  .pair-card.failed {{ border-left: 4px solid var(--failed); }}
  .pair-header {{ display: flex; justify-content: space-between; align-items: center; padding: 0.7rem 1rem; }}
  .pair-header-left {{ display: flex; align-items: center; gap: 0.5rem; flex-wrap: wrap; }}
  .pair-meta {{ font-size: 0.78rem; color: var(--muted); }}
  .pair-urls {{ padding: 0 1rem 0.6rem 1rem; font-size: 0.85rem; word-break: break-all; }}
  .url-label {{ display: inline-block; min-width: 3.5rem; color: var(--muted); font-size: 0.75rem; text-transform: uppercase; }}
  .failure-banner {{ background: #fef2f2; border: 1px solid #fecaca; color: #991b1b; border-radius: 6px; padding: 0.6rem 0.8rem; margin: 0 1rem; font-size: 0.88rem; }}
  .size-banner {{ background: #fefce8; border: 1px solid #fde68a; color: #92400e; border-radius: 6px; padding: 0.6rem 0.8rem; margin: 0 1rem 0.8rem 1rem; font-size: 0.88rem; }}
  .interrupted-banner {{ background: #fef2f2; border-radius: 8px; padding: 1rem; margin-bottom: 1.5rem; border-left: 4px solid var(--error); }}
  /* Views */
  .view-toggle {{ display: flex; gap: 0.3rem; }}
  .view-btn {{ padding: 0.2rem 0.6rem; border-radius: 6px; border: 1px solid var(--border); background: var(--card); cursor: pointer; font-size: 0.78rem; }}
  .view-btn.active {{ background: var(--accent); color: white; border-color: var(--accent); }}
  .side-view {{ display: grid; grid-template-columns: repeat(3, 1fr); gap: 0.6rem; padding: 0 1rem; }}
  .image-item {{ text-align: center; }}
  .image-item img {{ width: 100%; border-radius: 6px; border: 1px solid var(--border); cursor: pointer; }}
  .image-item img.zoomed {{ position: fixed; top: 5%; left: 5%; width: 90%; height: 90%; object-fit: contain; z-index: 1000; background: rgba(0,0,0,0.85); border: none; border-radius: 8px; padding: 1rem; }}
  .image-label {{ font-size: 0.75rem; color: var(--muted); margin-top: 0.2rem; }}
  .missing-image {{ padding: 2rem; color: var(--muted); background: #f1f5f9; border-radius: 6px; font-size: 0.85rem; }}
  .slider-view {{ padding: 0 1rem; }}
  .slider-frame {{ position: relative; overflow: hidden; border: 1px solid var(--border); border-radius: 6px; }}
  .slider-base {{ display: block; width: 100%; }}
  .slider-overlay {{ position: absolute; top: 0; left: 0; height: 100%; width: 50%; overflow: hidden; border-right: 2px solid var(--accent); }}
  .slider-overlay img {{ display: block; height: 100%; }}
  .slider-input {{ width: 100%; margin-top: 0.5rem; }}
  /* Filter bar */
  .filter-bar {{ display: flex; gap: 0.5rem; margin-bottom: 1rem; flex-wrap: wrap; }}
  .filter-btn {{ padding: 0.3rem 0.8rem; border-radius: 6px; border: 1px solid var(--border); background: var(--card); cursor: pointer; font-size: 0.82rem; }}
  .filter-btn.active {{ background: var(--accent); color: white; border-color: var(--accent); }}
</style>
</head>
<body>
<div class="container">
  <h1>Visual Regression Report</h1>
  <p class="meta">Started: {html.escape(summary.started_at)} &middot; Completed: {html.escape(summary.completed_at)} &middot; Duration: {summary.duration_seconds}s</p>

  <div class="summary">
    <div class="stat"><div class="value">{summary.total}</div><div class="label">Comparisons</div></div>
    <div class="stat success"><div class="value">{summary.identical}</div><div class="label">Identical</div></div>
    <div class="stat warning"><div class="value">{summary.different}</div><div class="label">Different</div></div>
    <div class="stat failed"><div class="value">{summary.errors}</div><div class="label">Errors</div></div>
  </div>

  {interrupted_section}

  <div class="filter-bar">
    <button class="filter-btn active" onclick="filterPairs(this, 'all')">All</button>
    <button class="filter-btn" onclick="filterPairs(this, 'different')">Different</button>
    <button class="filter-btn" onclick="filterPairs(this, 'identical')">Identical</button>
    <button class="filter-btn" onclick="filterPairs(this, 'error')">Errors</button>
  </div>

  <div id="pair-list">
    {"".join(cards)}
  </div>
</div>

<script>
function filterPairs(btn, status) {{
  document.querySelectorAll('.filter-btn').forEach(b => b.classList.remove('active'));
  btn.classList.add('active');
  document.querySelectorAll('.pair-card').forEach(card => {{
    card.style.display = status === 'all' || card.dataset.status === status ? '' : 'none';
  }});
}}
function setView(btn, mode) {{
  const card = btn.closest('.pair-card');
  card.querySelectorAll('.view-btn').forEach(b => b.classList.remove('active'));
  btn.classList.add('active');
  card.querySelector('.side-view').style.display = mode === 'side' ? '' : 'none';
  card.querySelector('.slider-view').style.display = mode === 'slider' ? '' : 'none';
}}
function slide(input) {{
  const frame = input.previousElementSibling;
  const overlay = frame.querySelector('.slider-overlay');
  overlay.style.width = input.value + '%';
  overlay.querySelector('img').style.width = frame.clientWidth + 'px';
}}
</script>
</body>
</html>'''

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(report_html)
    logger.debug("Wrote HTML report with %d card(s)", len(cards))
