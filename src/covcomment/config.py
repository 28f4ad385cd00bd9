"""Configuration parsing from ``.covcomment.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from covcomment.analysis.aggregate import DEFAULT_COLOR_BANDS, ColorBand
from covcomment.models.coverage import ChangedFiles

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".covcomment.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

_MAX_PERCENTAGE = 100.0


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_value(value: Any) -> Any:
    """Recursively resolve environment variables in YAML values."""
    if isinstance(value, str):
        return _resolve_env_vars(value)
    if isinstance(value, dict):
        return {key: _resolve_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_resolve_value(item) for item in value]
    return value


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a top-level section, or an empty dict when it is missing or malformed."""
    section = raw.get(name, {})
    if not isinstance(section, dict):
        return {}
    return section


def _str_option(section: dict[str, Any], key: str, default: str) -> str:
    """Read a string option; a key left empty in YAML (``None``) keeps the default."""
    value = section.get(key)
    return default if value is None else str(value)


def _float_option(section: dict[str, Any], key: str, default: float) -> float:
    """Read a numeric option; a key left empty in YAML (``None``) keeps the default."""
    value = section.get(key)
    return default if value is None else float(value)


@dataclass
class ReportOptions:
    """Options consumed by the report renderer and facade."""

    coverage_file: str = ""
    """Path to the coverage text summary (empty = no report)."""

    coverage_compare_file: str = ""
    """Path to a baseline coverage text summary to diff against."""

    coverage_title: str = "Coverage Report"
    """Title shown in the collapsible summary line."""

    prefix: str = ""
    """Path prefix stripped from coverage paths before display and linking."""

    server_url: str = "https://github.com"
    """Base URL of the code host."""

    repository: str = ""
    """Repository in ``owner/name`` form."""

    commit: str = ""
    """Commit SHA the file links point at."""

    coverage_path_prefix: str = ""
    """Prefix inserted between ``blob/{commit}/`` and the file path in links."""

    remove_links_to_files: bool = False
    remove_links_to_lines: bool = False
    remove_lines: bool = False
    """Replace the uncovered-lines column with empty cells."""

    report_only_changed_files: bool = False
    """Show only files present in ``changed_files``."""

    report_only_affected_files: bool = False
    """Show only files whose coverage differs from the baseline."""

    changed_files: ChangedFiles | None = None
    """``ChangedFiles`` supplied by the VCS collaborator (None = nothing changed)."""

    color_bands: tuple[ColorBand, ...] = DEFAULT_COLOR_BANDS
    """Status color ladder, ordered by minimum."""


@dataclass
class CommentConfig:
    """Pull request comment configuration."""

    post: bool = False
    """Create or update a PR comment with the report."""

    marker: str = "covcomment:report"
    """Prefix of the hidden marker used to find the comment again."""

    hide_badge: bool = False
    """Omit the shields.io coverage badge above the report."""


@dataclass
class ThresholdConfig:
    """Pass/fail gating configuration."""

    min_coverage: float = 0.0
    """Minimum headline coverage; below it the CLI exits non-zero (0 = disabled)."""


@dataclass
class CovCommentConfig:
    """Complete configuration from ``.covcomment.yml``."""

    report: ReportOptions = field(default_factory=ReportOptions)
    """Report rendering options."""

    comment: CommentConfig = field(default_factory=CommentConfig)
    """PR comment configuration."""

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    """Gating thresholds."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML for extension/debugging."""


def _parse_color_bands(raw: dict[str, Any]) -> tuple[ColorBand, ...]:
    """Parse the ``colors`` list, falling back to the default ladder."""
    colors_raw = raw.get("colors")
    if not isinstance(colors_raw, list) or not colors_raw:
        return DEFAULT_COLOR_BANDS

    bands: list[ColorBand] = []
    for item in colors_raw:
        if not isinstance(item, dict) or item.get("color") is None:
            logger.warning("Ignoring malformed color band: %r", item)
            continue
        bands.append(
            ColorBand(color=str(item["color"]), minimum=_float_option(item, "minimum", 0.0))
        )

    return tuple(bands) or DEFAULT_COLOR_BANDS


def _parse_report_options(raw: dict[str, Any]) -> ReportOptions:
    """Parse the ``report`` section from raw YAML."""
    report_raw = _section(raw, "report")
    defaults = ReportOptions()

    return ReportOptions(
        coverage_file=_str_option(report_raw, "coverage_file", defaults.coverage_file),
        coverage_compare_file=_str_option(
            report_raw, "coverage_compare_file", defaults.coverage_compare_file
        ),
        coverage_title=_str_option(report_raw, "coverage_title", defaults.coverage_title),
        prefix=_str_option(report_raw, "prefix", defaults.prefix),
        server_url=_str_option(report_raw, "server_url", defaults.server_url),
        repository=_str_option(report_raw, "repository", defaults.repository),
        commit=_str_option(report_raw, "commit", defaults.commit),
        coverage_path_prefix=_str_option(
            report_raw, "coverage_path_prefix", defaults.coverage_path_prefix
        ),
        remove_links_to_files=bool(report_raw.get("remove_links_to_files", False)),
        remove_links_to_lines=bool(report_raw.get("remove_links_to_lines", False)),
        remove_lines=bool(report_raw.get("remove_lines", False)),
        report_only_changed_files=bool(report_raw.get("report_only_changed_files", False)),
        report_only_affected_files=bool(report_raw.get("report_only_affected_files", False)),
        color_bands=_parse_color_bands(raw),
    )


def _parse_comment_config(raw: dict[str, Any]) -> CommentConfig:
    """Parse the ``comment`` section from raw YAML."""
    comment_raw = _section(raw, "comment")

    return CommentConfig(
        post=bool(comment_raw.get("post", False)),
        marker=_str_option(comment_raw, "marker", "covcomment:report"),
        hide_badge=bool(comment_raw.get("hide_badge", False)),
    )


def _parse_threshold_config(raw: dict[str, Any]) -> ThresholdConfig:
    """Parse the ``thresholds`` section from raw YAML."""
    thresholds_raw = _section(raw, "thresholds")

    return ThresholdConfig(min_coverage=_float_option(thresholds_raw, "min_coverage", 0.0))


def load_config(root: str | Path) -> CovCommentConfig:
    """Load and parse ``.covcomment.yml`` from *root*.

    Falls back to defaults when the file is missing or incomplete.
    """
    config_path = Path(root).resolve() / CONFIG_FILE_NAME

    raw: dict[str, Any] = {}
    if config_path.is_file():
        parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            raw = _resolve_value(parsed)

    return CovCommentConfig(
        report=_parse_report_options(raw),
        comment=_parse_comment_config(raw),
        thresholds=_parse_threshold_config(raw),
        raw=raw,
    )


def _validate_color_bands(bands: tuple[ColorBand, ...]) -> list[str]:
    """Validate that the color ladder is total and monotonic over [0, 100]."""
    errors: list[str] = []

    if not bands:
        return ["colors must contain at least one band"]

    if bands[0].minimum != 0.0:
        errors.append(f"colors[0].minimum must be 0 (got: {bands[0].minimum})")

    for index, band in enumerate(bands):
        if not 0.0 <= band.minimum <= _MAX_PERCENTAGE:
            errors.append(
                f"colors[{index}].minimum must be between 0 and 100 (got: {band.minimum})"
            )
        if index and band.minimum <= bands[index - 1].minimum:
            errors.append(
                f"colors[{index}].minimum must be greater than colors[{index - 1}].minimum "
                f"(got: {band.minimum})"
            )

    return errors


def validate_config(config: CovCommentConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors = _validate_color_bands(config.report.color_bands)

    if not 0.0 <= config.thresholds.min_coverage <= _MAX_PERCENTAGE:
        errors.append(
            f"thresholds.min_coverage must be between 0 and 100 "
            f"(got: {config.thresholds.min_coverage})"
        )

    if config.comment.post and not config.comment.marker:
        errors.append("comment.marker is required when comment.post is true")

    return errors
