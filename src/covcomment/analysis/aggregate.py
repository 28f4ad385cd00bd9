"""Headline coverage numbers and status colors."""

from __future__ import annotations

from dataclasses import dataclass

from covcomment.models.coverage import CoverageRecord, ReportSummary
from covcomment.parsing.text_summary import get_total_record


@dataclass(frozen=True)
class ColorBand:
    """A status color applied from ``minimum`` percent upwards."""

    color: str
    """shields.io color name."""

    minimum: float
    """Lowest coverage percentage (inclusive) that gets this color."""


# https://shields.io/category/coverage
DEFAULT_COLOR_BANDS: tuple[ColorBand, ...] = (
    ColorBand("red", 0.0),
    ColorBand("orange", 40.0),
    ColorBand("yellow", 60.0),
    ColorBand("green", 80.0),
    ColorBand("brightgreen", 90.0),
)


def get_coverage_color(
    percentage: float, bands: tuple[ColorBand, ...] = DEFAULT_COLOR_BANDS
) -> str:
    """Return the color of the highest band whose minimum is <= *percentage*.

    Values below every band get the color of the lowest band.
    """
    if not bands:
        return ReportSummary.color

    ordered = sorted(bands, key=lambda b: b.minimum)
    color = ordered[0].color
    for band in ordered:
        if percentage >= band.minimum:
            color = band.color
    return color


def get_coverage(
    records: list[CoverageRecord], bands: tuple[ColorBand, ...] = DEFAULT_COLOR_BANDS
) -> ReportSummary:
    """Summarize a snapshot from its ``All files`` record.

    Percentages are truncated to integers, not rounded. A snapshot without a
    total record yields the all-zero, red summary.
    """
    total = get_total_record(records)
    if total is None:
        return ReportSummary()

    coverage = int(total.lines_pct)
    return ReportSummary(
        coverage_pct=coverage,
        color=get_coverage_color(total.lines_pct, bands),
        branches_pct=int(total.branches_pct),
        functions_pct=int(total.functions_pct),
        statements_pct=int(total.statements_pct),
        lines_pct=coverage,
    )
