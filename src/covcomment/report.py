"""Coverage report facade: read, parse, summarize and render."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from covcomment.analysis.aggregate import get_coverage
from covcomment.models.coverage import CoverageReport
from covcomment.parsing.text_summary import parse_coverage
from covcomment.reporters.html import coverage_to_markdown
from covcomment.utils.files import read_content_file

if TYPE_CHECKING:
    from covcomment.config import ReportOptions

logger = logging.getLogger(__name__)


def get_coverage_report(
    options: ReportOptions,
    read_content: Callable[[str], str] = read_content_file,
) -> CoverageReport:
    """Build the full coverage report for the configured coverage files.

    Never raises: any failure while reading, parsing or rendering is logged
    and turned into the empty default report.

    Args:
        options: Report options with ``coverage_file`` (and optionally
            ``coverage_compare_file``) set.
        read_content: Maps a configured file path to its text.

    Returns:
        Summary numbers and rendered HTML.
    """
    if not options.coverage_file:
        return CoverageReport()

    try:
        records = parse_coverage(read_content(options.coverage_file))

        baseline = None
        if options.coverage_compare_file:
            baseline = parse_coverage(read_content(options.coverage_compare_file)) or None
            if baseline is None:
                logger.info("Baseline %s has no coverage rows", options.coverage_compare_file)

        summary = get_coverage(records, options.color_bands)
        html = coverage_to_markdown(records, options, baseline)

        return CoverageReport(
            coverage_pct=summary.coverage_pct,
            color=summary.color,
            branches_pct=summary.branches_pct,
            functions_pct=summary.functions_pct,
            statements_pct=summary.statements_pct,
            lines_pct=summary.lines_pct,
            html=html,
        )
    except Exception as exc:
        logger.error("Generating coverage report. %s", exc)

    return CoverageReport()
