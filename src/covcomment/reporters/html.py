"""HTML table renderer for coverage comments.

The output is an HTML fragment (``<details>`` wrapping a ``<table>``) that
GitHub renders inside a Markdown comment body.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covcomment.analysis.aggregate import get_coverage
from covcomment.analysis.diff import format_diff_cell, format_pct, get_diff_mark, is_affected
from covcomment.analysis.folders import index_by_path, make_folders, strip_prefix
from covcomment.parsing.text_summary import get_total_record

if TYPE_CHECKING:
    from covcomment.config import ReportOptions
    from covcomment.models.coverage import CoverageRecord

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

NBSP = "&nbsp;"
INDENT = "&nbsp; &nbsp;"

CHANGED_FILES_NOTICE = (
    "<i>report-only-changed-files is enabled. No files were changed in this commit :)</i>"
)
AFFECTED_FILES_NOTICE = (
    "<i>report-only-affected-files is enabled. No files were affected by this commit :)</i>"
)

_HEAD_ROW = (
    "<tr><th>File</th><th>% Stmts</th><th>% Branch</th><th>% Funcs</th>"
    "<th>% Lines</th><th>Uncovered Line #s</th></tr>"
)


# ── Report ───────────────────────────────────────────────────────


def coverage_to_markdown(
    records: list[CoverageRecord],
    options: ReportOptions,
    baseline: list[CoverageRecord] | None = None,
) -> str:
    """Render the full collapsible report.

    Args:
        records: Current snapshot.
        options: Rendering options.
        baseline: Optional baseline snapshot to diff against.

    Returns:
        ``<details>`` block with the title, headline coverage and table.
    """
    coverage = get_coverage(records, options.color_bands).coverage_pct
    baseline_coverage = 0
    if baseline:
        baseline_coverage = get_coverage(baseline, options.color_bands).coverage_pct

    table = to_table(records, options, baseline)
    only_changed = "• " if options.report_only_changed_files else ""

    main_percentage = f"{coverage}%"
    if baseline_coverage:
        icon = get_diff_mark(coverage, baseline_coverage)
        main_percentage = f"{icon} {coverage}% ({baseline_coverage}%)"

    return (
        f"<details><summary>{options.coverage_title} {only_changed}"
        f"(<b>{main_percentage}</b>)</summary>{table}</details>"
    )


def to_table(
    records: list[CoverageRecord],
    options: ReportOptions,
    baseline: list[CoverageRecord] | None = None,
) -> str:
    """Render the coverage table: head, total row, then folders and their files."""
    total_row = to_total_row(get_total_record(records))
    baseline_by_path = index_by_path(baseline) if baseline else None

    filter_affected = options.report_only_affected_files and baseline_by_path is not None
    filtering = options.report_only_changed_files or filter_affected

    rows: list[str] = []
    changed_files = 0
    file_rows = 0
    for folder, members in make_folders(records, options.prefix).items():
        kept = _filter_changed(members, options)
        changed_files += sum(1 for record in kept if record.is_file)

        rendered = [
            (record, to_row(record, options, baseline_by_path, indent=1 if folder else 0))
            for record in kept
        ]
        group_files = sum(1 for record, row in rendered if record.is_file and row)
        # A filtered group without file rows leaves no folder row behind
        if filtering and not group_files:
            continue

        file_rows += group_files
        rows.extend(row for _, row in rendered if row)

    notice = ""
    if filtering and not file_rows:
        if options.report_only_changed_files and not changed_files:
            notice = CHANGED_FILES_NOTICE
        else:
            notice = AFFECTED_FILES_NOTICE

    return f"<table>{_HEAD_ROW}<tbody>{total_row}{''.join(rows)}</tbody></table>{notice}"


def _filter_changed(members: list[CoverageRecord], options: ReportOptions) -> list[CoverageRecord]:
    """Keep only changed files; drop the folder row when none of its files survive."""
    if not options.report_only_changed_files:
        return members

    changed = options.changed_files
    files = [m for m in members if m.is_file and changed is not None and changed.contains(m.path)]
    if not files:
        return []

    return [m for m in members if m.is_folder or m in files]


# ── Rows ─────────────────────────────────────────────────────────


def to_total_row(record: CoverageRecord | None) -> str:
    """Render the bold ``All files`` row (a bare ``&nbsp;`` without one)."""
    if record is None:
        return NBSP

    cells = [record.path] + [format_pct(value) for value in record.metrics()]
    bold = "".join(f"<td><b>{cell}</b></td>" for cell in cells)
    return f"<tr>{bold}<td>{NBSP}</td></tr>"


def to_row(
    record: CoverageRecord,
    options: ReportOptions,
    baseline_by_path: dict[str, CoverageRecord] | None = None,
    *,
    indent: int = 0,
) -> str:
    """Render a file or folder row.

    With a baseline every metric cell is annotated with its previous value.
    Returns an empty string when affected-only reporting hides the row.
    """
    name = record.path if record.is_folder else to_file_name_cell(record, options, indent)
    missing = to_missing_cell(record, options)

    if baseline_by_path is None:
        metrics = [format_pct(value) for value in record.metrics()]
    else:
        previous = baseline_by_path.get(record.path)
        logger.debug("Row %s matched baseline %s", record.path, previous)

        if options.report_only_affected_files and not is_affected(record, previous):
            return ""

        previous_metrics = previous.metrics() if previous else (None, None, None, None)
        metrics = [
            format_diff_cell(value, previous, previous_value)
            for value, previous_value in zip(record.metrics(), previous_metrics, strict=True)
        ]

    cells = [name, *metrics, missing]
    return "<tr>" + "".join(f"<td>{cell}</td>" for cell in cells) + "</tr>"


# ── Cells ────────────────────────────────────────────────────────


def file_url(record: CoverageRecord, options: ReportOptions) -> str:
    """Return the blob URL of the file a record describes."""
    relative = strip_prefix(record.path, options.prefix)
    return (
        f"{options.server_url}/{options.repository}/blob/{options.commit}/"
        f"{options.coverage_path_prefix}{relative}"
    )


def to_file_name_cell(record: CoverageRecord, options: ReportOptions, indent: int = 0) -> str:
    """Render the file name, linked to the file unless links are removed."""
    relative = strip_prefix(record.path, options.prefix)
    last = relative.split("/")[-1]
    space = INDENT * indent

    if options.remove_links_to_files:
        return f"{space}{last}"

    return f'{space}<a href="{file_url(record, options)}">{last}</a>'


def to_missing_cell(record: CoverageRecord, options: ReportOptions) -> str:
    """Render uncovered line ranges as ``L12-L15`` anchors joined by commas."""
    if not record.uncovered_ranges or options.remove_lines:
        return NBSP

    url = file_url(record, options)
    links: list[str] = []
    for token in record.uncovered_ranges:
        start, _, end = token.partition("-")
        end = end or start
        fragment = f"L{start}" if start == end else f"L{start}-L{end}"
        text = start if start == end else f"{start}&ndash;{end}"

        if options.remove_links_to_lines:
            links.append(text)
        else:
            links.append(f'<a href="{url}#{fragment}">{text}</a>')

    return ", ".join(links)
