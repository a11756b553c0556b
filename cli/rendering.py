"""Utilities for rendering analysis reports in the CLI."""

from __future__ import annotations

from typing import List

from tagaudit.scraper.models import AnalysisReport


def format_bytes(size: int) -> str:
    """Human-readable byte count, e.g. ``15.0 KB``."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    if value < 1024:
        return f"{value:.1f} KB"
    return f"{value / 1024:.1f} MB"


def render_report(report: AnalysisReport) -> str:
    """Render *report* as a short summary followed by one line per resource.

    Unsized resources (beyond the probe limit) show ``-`` in the size column.
    """
    stats = report.stats
    lines: List[str] = [
        f"URL          : {report.url}",
        f"Strategy     : {report.strategy}",
        f"Resources    : {stats.total_requests} "
        f"({stats.first_party} 1st party, {stats.third_party} 3rd party)",
        f"Total size   : {format_bytes(stats.total_size)}",
        f"Script size  : {format_bytes(stats.js_size)}",
        f"Elapsed      : {stats.load_time:.2f}s",
    ]

    if stats.resources_by_type:
        by_type = ", ".join(
            f"{kind}={count}" for kind, count in sorted(stats.resources_by_type.items())
        )
        lines.append(f"By type      : {by_type}")

    if report.resources:
        lines.append("")
        for r in report.resources:
            size = format_bytes(r.size) if r.size is not None else "-"
            lines.append(f"  {r.kind:<9} {r.party:<9} {size:>9}  {r.url}")

    return "\n".join(lines)
