"""Tests for config.py: .covcomment.yml parsing and validation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import yaml

from covcomment.analysis.aggregate import DEFAULT_COLOR_BANDS, ColorBand
from covcomment.config import (
    CONFIG_FILE_NAME,
    CommentConfig,
    CovCommentConfig,
    ReportOptions,
    ThresholdConfig,
    _resolve_env_vars,
    _resolve_value,
    load_config,
    validate_config,
)

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


def _write_config(root: Path, data: dict[str, Any]) -> None:
    """Write .covcomment.yml with given data."""
    (root / CONFIG_FILE_NAME).write_text(yaml.dump(data), encoding="utf-8")


# ── _resolve_env_vars / _resolve_value ────────────────────────────────


class TestResolveEnvVars:
    """Tests for ${VAR} expansion."""

    def test_replaces_set_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COV_REPO", "owner/repo")

        assert _resolve_env_vars("${COV_REPO}") == "owner/repo"

    def test_unset_variable_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("COV_MISSING", raising=False)

        assert _resolve_env_vars("x-${COV_MISSING}-y") == "x--y"

    def test_resolves_nested_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COV_SHA", "abc")

        resolved = _resolve_value({"report": {"commit": "${COV_SHA}", "n": 1}, "l": ["${COV_SHA}"]})

        assert resolved == {"report": {"commit": "abc", "n": 1}, "l": ["abc"]}


# ── load_config ───────────────────────────────────────────────────────


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)

        assert config.report == ReportOptions()
        assert config.comment == CommentConfig()
        assert config.thresholds == ThresholdConfig()
        assert config.report.color_bands == DEFAULT_COLOR_BANDS

    def test_full_file(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            {
                "report": {
                    "coverage_file": "coverage.txt",
                    "coverage_compare_file": "base.txt",
                    "coverage_title": "Jest Coverage",
                    "prefix": "/app/",
                    "coverage_path_prefix": "web/",
                    "remove_lines": True,
                    "report_only_affected_files": True,
                },
                "colors": [
                    {"color": "red", "minimum": 0},
                    {"color": "green", "minimum": 70},
                ],
                "comment": {"post": True, "marker": "web-coverage", "hide_badge": True},
                "thresholds": {"min_coverage": 75},
            },
        )

        config = load_config(tmp_path)

        assert config.report.coverage_file == "coverage.txt"
        assert config.report.coverage_compare_file == "base.txt"
        assert config.report.coverage_title == "Jest Coverage"
        assert config.report.prefix == "/app/"
        assert config.report.coverage_path_prefix == "web/"
        assert config.report.remove_lines is True
        assert config.report.report_only_affected_files is True
        assert config.report.report_only_changed_files is False
        assert config.report.color_bands == (ColorBand("red", 0.0), ColorBand("green", 70.0))
        assert config.comment == CommentConfig(post=True, marker="web-coverage", hide_badge=True)
        assert config.thresholds.min_coverage == 75.0

    def test_env_vars_in_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COV_FILE", "out/coverage.txt")
        _write_config(tmp_path, {"report": {"coverage_file": "${COV_FILE}"}})

        assert load_config(tmp_path).report.coverage_file == "out/coverage.txt"

    def test_malformed_sections_fall_back(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"report": "nope", "colors": "nope", "comment": [1]})

        config = load_config(tmp_path)

        assert config.report.coverage_title == "Coverage Report"
        assert config.report.color_bands == DEFAULT_COLOR_BANDS
        assert config.comment == CommentConfig()

    def test_malformed_bands_are_skipped(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"colors": [{"minimum": 10}, {"color": "blue"}]})

        assert load_config(tmp_path).report.color_bands == (ColorBand("blue", 0.0),)

    def test_empty_keys_keep_defaults(self, tmp_path: Path) -> None:
        """Keys written without a value load as None and must not become "None"."""
        (tmp_path / CONFIG_FILE_NAME).write_text(
            "report:\n"
            "  coverage_file:\n"
            "  prefix:\n"
            "  coverage_title:\n"
            "colors:\n"
            "  - color: red\n"
            "    minimum:\n"
            "  - color:\n"
            "    minimum: 50\n"
            "comment:\n"
            "  marker:\n"
            "thresholds:\n"
            "  min_coverage:\n",
            encoding="utf-8",
        )

        config = load_config(tmp_path)

        assert config.report.coverage_file == ""
        assert config.report.prefix == ""
        assert config.report.coverage_title == "Coverage Report"
        assert config.report.color_bands == (ColorBand("red", 0.0),)
        assert config.comment.marker == "covcomment:report"
        assert config.thresholds.min_coverage == 0.0

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILE_NAME).write_text("- just\n- a list\n", encoding="utf-8")

        assert load_config(tmp_path).raw == {}


# ── validate_config ───────────────────────────────────────────────────


class TestValidateConfig:
    """Tests for validate_config."""

    def test_defaults_are_valid(self) -> None:
        assert validate_config(CovCommentConfig()) == []

    def test_bands_must_start_at_zero(self) -> None:
        config = CovCommentConfig(report=ReportOptions(color_bands=(ColorBand("red", 10),)))

        errors = validate_config(config)

        assert any("colors[0].minimum must be 0" in e for e in errors)

    def test_bands_must_increase(self) -> None:
        bands = (ColorBand("red", 0), ColorBand("green", 80), ColorBand("yellow", 60))
        config = CovCommentConfig(report=ReportOptions(color_bands=bands))

        errors = validate_config(config)

        assert any("colors[2].minimum must be greater" in e for e in errors)

    def test_bands_within_range(self) -> None:
        bands = (ColorBand("red", 0), ColorBand("green", 120))
        config = CovCommentConfig(report=ReportOptions(color_bands=bands))

        assert any("between 0 and 100" in e for e in validate_config(config))

    def test_empty_bands(self) -> None:
        config = CovCommentConfig(report=ReportOptions(color_bands=()))

        assert validate_config(config) == ["colors must contain at least one band"]

    def test_min_coverage_range(self) -> None:
        config = CovCommentConfig(thresholds=ThresholdConfig(min_coverage=101))

        assert any("thresholds.min_coverage" in e for e in validate_config(config))

    def test_posting_needs_marker(self) -> None:
        config = CovCommentConfig(comment=CommentConfig(post=True, marker=""))

        assert "comment.marker is required when comment.post is true" in validate_config(config)
