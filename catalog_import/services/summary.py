from __future__ import annotations

from ..models.processing_result import ImportSummary

"""Summary line rendering for the SUMMARY output.

Format:
SUMMARY file={name} mode={live|dry-run} processed={n} successful={n} skipped={n}
created={n} updated={n} excluded={n} errors={n} elapsed_sec={elapsed}
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(value: float) -> str:
    """Render a duration without trailing zeros or scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(summary: ImportSummary) -> str:
    """Render the SUMMARY line for one import run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> s = ImportSummary(
        ...     file_name="stock.csv", dry_run=False, processed=3, successful=2,
        ...     skipped=2, start_time=t, end_time=t, elapsed_seconds=1.5,
        ...     created=2, excluded=1,
        ... )
        >>> render_summary_line(s)  # doctest: +ELLIPSIS
        'SUMMARY file=stock.csv mode=live processed=3 successful=2 skipped=2 ...'
    """
    mode = "dry-run" if summary.dry_run else "live"
    return (
        f"SUMMARY file={summary.file_name} "
        f"mode={mode} "
        f"processed={summary.processed} "
        f"successful={summary.successful} "
        f"skipped={summary.skipped} "
        f"created={summary.created} "
        f"updated={summary.updated} "
        f"excluded={summary.excluded} "
        f"errors={len(summary.errors)} "
        f"elapsed_sec={format_seconds(summary.elapsed_seconds)}"
    )
