"""Comparison of coverage records against a baseline snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from covcomment.models.coverage import CoverageRecord

# HTML entities so the marks survive any comment encoding
UP_ICON = "&#128994;"
DOWN_ICON = "&#128315;"
FULL_ICON = "&#x2705;"

_FULL_COVERAGE = 100


def format_pct(value: float) -> str:
    """Format a percentage the way the coverage table prints it (``80``, ``85.71``)."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def get_diff_mark(current: float, baseline: float | None = None) -> str:
    """Return the indicator for *current* compared to *baseline*.

    Full coverage always wins. A missing or zero baseline gives no indicator.
    """
    if current == _FULL_COVERAGE:
        return FULL_ICON

    if not baseline:
        return ""

    if current > baseline:
        return UP_ICON

    if current < baseline:
        return DOWN_ICON

    return ""


def format_diff_cell(
    current: float,
    baseline_record: CoverageRecord | None,
    baseline_value: float | None = None,
) -> str:
    """Render a metric cell annotated with its baseline value.

    Without a baseline record for the path the file is new: ``"{mark} 90 (new)"``.
    """
    if baseline_record is not None:
        baseline_text = format_pct(baseline_value) if baseline_value is not None else ""
        return f"{get_diff_mark(current, baseline_value)} {format_pct(current)} ({baseline_text})"

    return f"{get_diff_mark(current)} {format_pct(current)} (new)"


def is_affected(current: CoverageRecord, baseline: CoverageRecord | None = None) -> bool:
    """Return True if *current* has no baseline or any metric changed."""
    if baseline is None:
        return True
    return current.metrics() != baseline.metrics()
