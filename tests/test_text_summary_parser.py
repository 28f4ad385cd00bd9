"""Tests for the coverage text summary parser (parsing/text_summary.py)."""

from __future__ import annotations

from covcomment.models.coverage import TOTAL_FILE_NAME, CoverageRecord
from covcomment.parsing import get_total_record, parse_coverage


class TestParseCoverage:
    """Tests for parse_coverage."""

    def test_parses_rows_in_table_order(self, coverage_txt: str) -> None:
        """Every data row becomes a record with its full path."""
        records = parse_coverage(coverage_txt)

        assert [r.path for r in records] == [
            TOTAL_FILE_NAME,
            "src",
            "src/index.ts",
            "src/utils",
            "src/utils/math.ts",
        ]

    def test_parses_metrics_and_ranges(self, coverage_txt: str) -> None:
        """Percentages become floats and uncovered tokens stay literal."""
        index = parse_coverage(coverage_txt)[2]

        assert index == CoverageRecord(
            path="src/index.ts",
            statements_pct=83.33,
            branches_pct=50.0,
            functions_pct=100.0,
            lines_pct=83.33,
            uncovered_ranges=("12-15", "20"),
        )

    def test_detects_folder_rows(self, coverage_txt: str) -> None:
        """Rows followed by deeper-indented rows are folders."""
        records = parse_coverage(coverage_txt)

        assert [r.is_folder for r in records] == [False, True, False, True, False]
        assert records[0].is_total
        assert records[2].is_file

    def test_empty_input(self) -> None:
        """Empty or missing text yields an empty snapshot."""
        assert parse_coverage("") == []
        assert parse_coverage(None) == []
        assert parse_coverage("no table here\njust logs\n") == []

    def test_skips_malformed_rows(self) -> None:
        """Rows with non-numeric or out-of-range metrics are dropped."""
        text = (
            "All files | 50 | 50 | 50 | 50 |\n"
            " a.ts | abc | 50 | 50 | 50 |\n"
            " b.ts | 50 | 50 |\n"
            " c.ts | 150 | 50 | 50 | 50 |\n"
            " d.ts | 40 | 30 | 20 | 10 | 3\n"
        )

        records = parse_coverage(text)

        assert [r.path for r in records] == [TOTAL_FILE_NAME, "d.ts"]
        assert records[1].uncovered_ranges == ("3",)

    def test_top_level_files_without_folder_rows(self) -> None:
        """Files directly under the total row have bare paths."""
        text = (
            "All files | 90 | 80 | 100 | 90 |\n"
            " app.js   | 90 | 80 | 100 | 90 | 4-5\n"
            " util.js  | 100 | 100 | 100 | 100 |\n"
        )

        records = parse_coverage(text)

        assert [r.path for r in records[1:]] == ["app.js", "util.js"]
        assert not any(r.is_folder for r in records)

    def test_nested_folder_names_are_joined(self) -> None:
        """A nested reporter prints child folders relative to their parent."""
        text = (
            "All files   | 90 | 80 | 100 | 90 |\n"
            " src        | 90 | 80 | 100 | 90 |\n"
            "  lib       | 90 | 80 | 100 | 90 |\n"
            "   deep.ts  | 90 | 80 | 100 | 90 |\n"
            "  main.ts   | 90 | 80 | 100 | 90 |\n"
        )

        paths = [r.path for r in parse_coverage(text)]

        assert paths == [TOTAL_FILE_NAME, "src", "src/lib", "src/lib/deep.ts", "src/main.ts"]

    def test_strips_ansi_colors(self) -> None:
        """Colored TTY output parses like plain output."""
        text = (
            "\x1b[32;1mAll files\x1b[0m | \x1b[32;1m100\x1b[0m | 100 | 100 | 100 |\n"
            " \x1b[32mindex.js\x1b[0m | 100 | 100 | 100 | 100 |\n"
        )

        records = parse_coverage(text)

        assert [r.path for r in records] == [TOTAL_FILE_NAME, "index.js"]

    def test_drops_truncation_marker(self) -> None:
        """The ``...`` marker of a truncated range list is not a range."""
        text = "All files | 50 | 50 | 50 | 50 |\n a.ts | 50 | 50 | 50 | 50 | 1-3,8,...\n"

        assert parse_coverage(text)[1].uncovered_ranges == ("1-3", "8")

    def test_keeps_first_of_duplicate_paths(self) -> None:
        """Only one record per path is emitted."""
        text = (
            "All files | 50 | 50 | 50 | 50 |\n"
            " a.ts | 50 | 50 | 50 | 50 |\n"
            "All files | 10 | 10 | 10 | 10 |\n"
            " a.ts | 10 | 10 | 10 | 10 |\n"
        )

        records = parse_coverage(text)

        assert len(records) == 2
        assert records[1].lines_pct == 50.0

    def test_total_record_moved_first(self) -> None:
        """The total row is always the first record."""
        text = " a.ts | 50 | 50 | 50 | 50 |\nAll files | 50 | 50 | 50 | 50 |\n"

        records = parse_coverage(text)

        assert records[0].is_total
        assert records[1].path == "a.ts"


class TestGetTotalRecord:
    """Tests for get_total_record."""

    def test_found(self, coverage_txt: str) -> None:
        total = get_total_record(parse_coverage(coverage_txt))

        assert total is not None
        assert total.lines_pct == 80.0

    def test_missing(self) -> None:
        assert get_total_record(parse_coverage(" a.ts | 1 | 2 | 3 | 4 |")) is None
