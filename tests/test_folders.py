"""Tests for folder grouping (analysis/folders.py)."""

from __future__ import annotations

from covcomment.analysis.folders import index_by_path, make_folders, strip_prefix
from covcomment.models.coverage import TOTAL_FILE_NAME, CoverageRecord
from covcomment.parsing import parse_coverage


def _file(path: str) -> CoverageRecord:
    return CoverageRecord(path, 50, 50, 50, 50)


def _folder(path: str) -> CoverageRecord:
    return CoverageRecord(path, 50, 50, 50, 50, is_folder=True)


class TestMakeFolders:
    """Tests for make_folders."""

    def test_groups_by_folder(self, coverage_txt: str) -> None:
        folders = make_folders(parse_coverage(coverage_txt))

        assert list(folders) == ["src", "src/utils"]
        assert [r.path for r in folders["src"]] == ["src", "src/index.ts"]
        assert [r.path for r in folders["src/utils"]] == ["src/utils", "src/utils/math.ts"]

    def test_is_a_partition(self, coverage_txt: str) -> None:
        """Every non-total record lands in exactly one group."""
        records = parse_coverage(coverage_txt)

        members = [r for group in make_folders(records).values() for r in group]

        assert sorted(r.path for r in members) == sorted(
            r.path for r in records if not r.is_total
        )
        assert len(members) == len({r.path for r in members})

    def test_top_level_files_share_empty_key(self) -> None:
        records = [CoverageRecord(TOTAL_FILE_NAME, 1, 1, 1, 1), _file("a.js"), _file("b.js")]

        assert make_folders(records) == {"": [_file("a.js"), _file("b.js")]}

    def test_preserves_first_seen_order(self) -> None:
        records = [_file("b/x.ts"), _file("a/y.ts"), _file("b/z.ts")]

        folders = make_folders(records)

        assert list(folders) == ["b", "a"]
        assert [r.path for r in folders["b"]] == ["b/x.ts", "b/z.ts"]

    def test_strips_prefix(self) -> None:
        records = [_folder("/work/repo/src"), _file("/work/repo/src/a.ts")]

        folders = make_folders(records, prefix="/work/repo/")

        assert list(folders) == ["src"]
        assert len(folders["src"]) == 2


class TestHelpers:
    """Tests for strip_prefix and index_by_path."""

    def test_strip_prefix(self) -> None:
        assert strip_prefix("/work/src/a.ts", "/work/") == "src/a.ts"
        assert strip_prefix("src/a.ts", "/work/") == "src/a.ts"
        assert strip_prefix("src/a.ts", "") == "src/a.ts"

    def test_index_by_path_skips_total(self, coverage_txt: str) -> None:
        index = index_by_path(parse_coverage(coverage_txt))

        assert TOTAL_FILE_NAME not in index
        assert index["src/index.ts"].lines_pct == 83.33
