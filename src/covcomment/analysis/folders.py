"""Folder grouping of coverage records for the nested table."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from covcomment.models.coverage import CoverageRecord


def strip_prefix(path: str, prefix: str) -> str:
    """Remove *prefix* from the start of *path* (no-op for an empty prefix)."""
    return path.removeprefix(prefix) if prefix else path


def make_folders(
    records: list[CoverageRecord], prefix: str = ""
) -> dict[str, list[CoverageRecord]]:
    """Collapse records into folders.

    File records are keyed by their containing directory (``""`` for files at
    the top level), folder records by their own path. Group order and member
    order follow the table.

    Args:
        records: Parsed snapshot.
        prefix: Path prefix stripped before computing keys.

    Returns:
        Ordered mapping of folder key to member records.
    """
    folders: dict[str, list[CoverageRecord]] = {}

    for record in records:
        if record.is_total:
            continue

        relative = strip_prefix(record.path, prefix)
        if record.is_folder:
            key = relative
        else:
            key = "/".join(relative.split("/")[:-1])

        folders.setdefault(key, []).append(record)

    return folders


def index_by_path(records: list[CoverageRecord]) -> dict[str, CoverageRecord]:
    """Map non-total records by exact path."""
    return {record.path: record for record in records if not record.is_total}
