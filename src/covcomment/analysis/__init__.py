"""Aggregation, grouping and baseline comparison of coverage records."""

from covcomment.analysis.aggregate import (
    DEFAULT_COLOR_BANDS,
    ColorBand,
    get_coverage,
    get_coverage_color,
)
from covcomment.analysis.diff import (
    DOWN_ICON,
    FULL_ICON,
    UP_ICON,
    format_diff_cell,
    get_diff_mark,
    is_affected,
)
from covcomment.analysis.folders import index_by_path, make_folders

__all__ = [
    "DEFAULT_COLOR_BANDS",
    "DOWN_ICON",
    "FULL_ICON",
    "UP_ICON",
    "ColorBand",
    "format_diff_cell",
    "get_coverage",
    "get_coverage_color",
    "get_diff_mark",
    "index_by_path",
    "is_affected",
    "make_folders",
]
