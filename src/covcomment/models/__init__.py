"""Data models for covcomment."""

from covcomment.models.coverage import (
    TOTAL_FILE_NAME,
    ChangedFiles,
    CoverageRecord,
    CoverageReport,
    ReportSummary,
)

__all__ = [
    "TOTAL_FILE_NAME",
    "ChangedFiles",
    "CoverageRecord",
    "CoverageReport",
    "ReportSummary",
]
