"""Coverage report models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

TOTAL_FILE_NAME = "All files"
"""Name of the row summarizing every file in the coverage table."""


@dataclass(frozen=True)
class CoverageRecord:
    """One row of a coverage text summary (file, folder or total)."""

    path: str
    """File or folder path, or ``TOTAL_FILE_NAME`` for the total row."""

    statements_pct: float
    """Statement coverage percentage (0.0 to 100.0)."""

    branches_pct: float
    """Branch coverage percentage (0.0 to 100.0)."""

    functions_pct: float
    """Function coverage percentage (0.0 to 100.0)."""

    lines_pct: float
    """Line coverage percentage (0.0 to 100.0)."""

    uncovered_ranges: tuple[str, ...] = ()
    """Uncovered line tokens as written in the table (``"12"`` or ``"12-15"``)."""

    is_folder: bool = False
    """True when the row aggregates a folder rather than a single file."""

    @property
    def is_total(self) -> bool:
        """Return True if this is the ``All files`` row."""
        return self.path == TOTAL_FILE_NAME

    @property
    def is_file(self) -> bool:
        """Return True if this row describes a single source file."""
        return not self.is_total and not self.is_folder

    def metrics(self) -> tuple[float, float, float, float]:
        """Return (statements, branches, functions, lines) percentages."""
        return (self.statements_pct, self.branches_pct, self.functions_pct, self.lines_pct)


@dataclass
class ReportSummary:
    """Headline numbers derived from the total row of a snapshot."""

    coverage_pct: int = 0
    """Headline coverage (truncated line coverage)."""

    color: str = "red"
    """Status color for badges (shields.io color name)."""

    branches_pct: int = 0
    functions_pct: int = 0
    statements_pct: int = 0
    lines_pct: int = 0


@dataclass
class CoverageReport(ReportSummary):
    """Summary numbers plus the rendered HTML report."""

    html: str = ""
    """Rendered ``<details>`` block, empty when no report could be built."""

    def to_dict(self) -> dict[str, Any]:
        """Return the report as a plain dictionary (for JSON output)."""
        return asdict(self)


@dataclass
class ChangedFiles:
    """Files touched between two git refs, grouped by change type."""

    all: list[str] = field(default_factory=list)
    """Every changed path (added, modified, renamed and removed)."""

    added: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    renamed: list[str] = field(default_factory=list)

    def contains(self, path: str) -> bool:
        """Return True if any changed path contains *path* as a fragment."""
        return any(path in changed for changed in self.all)
