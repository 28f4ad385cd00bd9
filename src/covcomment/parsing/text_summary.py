"""Parser for the Istanbul ``text`` coverage summary table.

Jest, Vitest and nyc print the same table to stdout::

    ----------|---------|----------|---------|---------|-------------------
    File      | % Stmts | % Branch | % Funcs | % Lines | Uncovered Line #s
    ----------|---------|----------|---------|---------|-------------------
    All files |   85.71 |       50 |     100 |   85.71 |
     src      |   83.33 |       50 |     100 |   83.33 |
      index.ts|   83.33 |       50 |     100 |   83.33 | 12-15,20

Folder rows are indented one level below ``All files`` and their files one
level further. Lines that do not look like a data row are dropped, so the
table can be fed in together with the rest of the test runner output.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from covcomment.models.coverage import TOTAL_FILE_NAME, CoverageRecord

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")
_RANGE_RE = re.compile(r"^\d+(?:-\d+)?$")

# File column plus the four percentage columns
_MIN_COLUMNS = 5
_MAX_PERCENTAGE = 100.0


@dataclass
class _Row:
    """A table row before its full path is known."""

    depth: int
    name: str
    metrics: tuple[float, float, float, float]
    ranges: tuple[str, ...]


# ── Parsing ──────────────────────────────────────────────────────


def parse_coverage(content: str | None) -> list[CoverageRecord]:
    """Parse a coverage text summary into coverage records.

    Args:
        content: Raw text containing the coverage table.

    Returns:
        Records in table order with the ``All files`` record first.
        Empty when no data row was found.
    """
    if not content:
        return []

    rows = [row for row in (_parse_row(line) for line in content.splitlines()) if row]
    records = _build_records(rows)

    total = get_total_record(records)
    if total is not None and records[0] is not total:
        records.remove(total)
        records.insert(0, total)

    logger.debug("Parsed %d coverage rows", len(records))
    return records


def get_total_record(records: list[CoverageRecord]) -> CoverageRecord | None:
    """Return the ``All files`` record, or None if the table has none."""
    return next((record for record in records if record.is_total), None)


def _parse_row(line: str) -> _Row | None:
    """Parse one table line, returning None for anything but a data row."""
    cells = _ANSI_RE.sub("", line).split("|")
    if len(cells) < _MIN_COLUMNS:
        return None

    name_cell = cells[0].rstrip()
    name = name_cell.strip()
    if not name:
        return None

    try:
        stmts, branch, funcs, lines = (float(cell.strip()) for cell in cells[1:_MIN_COLUMNS])
    except ValueError:
        return None

    metrics = (stmts, branch, funcs, lines)
    if any(not 0.0 <= value <= _MAX_PERCENTAGE for value in metrics):
        return None

    ranges: tuple[str, ...] = ()
    if len(cells) > _MIN_COLUMNS:
        tokens = (token.strip() for token in cells[_MIN_COLUMNS].split(","))
        ranges = tuple(token for token in tokens if _RANGE_RE.match(token))

    return _Row(
        depth=len(name_cell) - len(name_cell.lstrip()),
        name=name,
        metrics=metrics,
        ranges=ranges,
    )


def _build_records(rows: list[_Row]) -> list[CoverageRecord]:
    """Resolve full paths from indentation and build records."""
    records: list[CoverageRecord] = []
    seen: set[str] = set()
    # (depth, path) of the folders enclosing the current row
    folders: list[tuple[int, str]] = []

    for index, row in enumerate(rows):
        if row.name == TOTAL_FILE_NAME:
            folders.clear()
            path = TOTAL_FILE_NAME
            is_folder = False
        else:
            while folders and folders[-1][0] >= row.depth:
                folders.pop()
            parent = folders[-1][1] if folders else ""
            path = f"{parent}/{row.name}" if parent else row.name

            next_row = rows[index + 1] if index + 1 < len(rows) else None
            is_folder = (
                next_row is not None
                and next_row.name != TOTAL_FILE_NAME
                and next_row.depth > row.depth
            )
            if is_folder:
                folders.append((row.depth, path))

        if path in seen:
            logger.debug("Skipping duplicate coverage row for %s", path)
            continue
        seen.add(path)

        stmts, branch, funcs, lines = row.metrics
        records.append(
            CoverageRecord(
                path=path,
                statements_pct=stmts,
                branches_pct=branch,
                functions_pct=funcs,
                lines_pct=lines,
                uncovered_ranges=row.ranges,
                is_folder=is_folder,
            )
        )

    return records
