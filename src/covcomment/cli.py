"""covcomment CLI: top-level command group."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from functools import partial
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from covcomment import __version__
from covcomment.config import (
    CONFIG_FILE_NAME,
    CovCommentConfig,
    ReportOptions,
    load_config,
    validate_config,
)
from covcomment.models.coverage import ChangedFiles
from covcomment.report import get_coverage_report
from covcomment.reporters.github_comment import post_coverage_report_from_env
from covcomment.reporters.terminal import reporter
from covcomment.utils.ci_context import CIContext, detect_ci_context
from covcomment.utils.files import read_content_file
from covcomment.utils.git import GitOperationError, get_changed_files

logger = logging.getLogger(__name__)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_valid_config(path: str) -> CovCommentConfig:
    """Load ``.covcomment.yml`` and abort on validation errors."""
    try:
        config = load_config(path)
    except Exception as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    errors = validate_config(config)
    if errors:
        reporter.print_error(f"Found {len(errors)} configuration error(s):")
        for idx, error in enumerate(errors, start=1):
            console.print(f"  {idx}. [red]{error}[/red]")
        raise click.Abort

    return config


def _resolve_options(
    base: ReportOptions,
    ci_context: CIContext,
    overrides: dict[str, object],
) -> ReportOptions:
    """Merge file options, CI context and command-line overrides (highest wins)."""
    options = replace(
        base,
        repository=base.repository or ci_context.repository or "",
        commit=base.commit or ci_context.commit_sha or "",
    )
    if ci_context.is_ci and base.server_url == ReportOptions.server_url:
        options = replace(options, server_url=ci_context.server_url)

    # Flags only switch features on; unset values keep the configured ones
    given = {key: value for key, value in overrides.items() if value not in (None, False, "")}
    return replace(options, **given)


def _collect_changed_files(root: Path, base_ref: str | None) -> ChangedFiles:
    """List changed files for changed-only reporting, degrading to none on failure."""
    if not base_ref:
        reporter.print_warning(
            "report-only-changed-files needs --base-ref outside a pull request; "
            "treating every file as unchanged"
        )
        return ChangedFiles()

    try:
        return get_changed_files(root, base_ref)
    except GitOperationError as exc:
        reporter.print_warning(f"Could not list changed files: {exc}")
        return ChangedFiles()


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="covcomment")
@click.pass_context
def cli(ctx: click.Context, *, verbose: bool) -> None:
    """covcomment: coverage text summaries as PR comment reports."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose=verbose)


@cli.command()
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root (config file location and base for relative paths).",
)
@click.option("--coverage-file", help="Coverage text summary to report on.")
@click.option("--coverage-compare-file", help="Baseline coverage text summary to diff against.")
@click.option("--title", "coverage_title", help="Title of the report.")
@click.option("--prefix", help="Path prefix stripped from coverage paths.")
@click.option("--coverage-path-prefix", help="Prefix inserted before file paths in links.")
@click.option("--repository", help="Repository as owner/name (default: from CI).")
@click.option("--commit", help="Commit SHA for links (default: from CI).")
@click.option("--server-url", help="Code host base URL (default: from CI or github.com).")
@click.option("--remove-links-to-files", is_flag=True, help="Render file names without links.")
@click.option("--remove-links-to-lines", is_flag=True, help="Render line ranges without links.")
@click.option("--remove-lines", is_flag=True, help="Hide the uncovered lines column.")
@click.option("--report-only-changed-files", is_flag=True, help="Only list changed files.")
@click.option(
    "--report-only-affected-files",
    is_flag=True,
    help="Only list files whose coverage differs from the baseline.",
)
@click.option("--base-ref", help="Base ref for changed files (default: PR base branch).")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    help="Write the HTML report to this file (stdout then shows the summary or --json).",
)
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON.")
@click.option("--post-comment", is_flag=True, help="Create or update the PR comment.")
@click.option(
    "--min-coverage",
    type=click.FloatRange(0, 100),
    help="Exit with status 1 when coverage is below this percentage.",
)
def report(
    path: str,
    base_ref: str | None,
    output: str | None,
    min_coverage: float | None,
    *,
    as_json: bool,
    post_comment: bool,
    **overrides: object,
) -> None:
    """Build the coverage report from a coverage text summary.

    Example:
      covcomment report --coverage-file coverage.txt --coverage-compare-file base.txt
    """
    config = _load_valid_config(path)
    ci_context = detect_ci_context()
    options = _resolve_options(config.report, ci_context, overrides)
    logger.debug("Resolved report options: %s", options)

    if options.report_only_changed_files:
        if not base_ref and ci_context.base_ref:
            base_ref = f"origin/{ci_context.base_ref}"
        changed = _collect_changed_files(Path(path), base_ref)
        options = replace(options, changed_files=changed)

    if not options.coverage_file:
        reporter.print_error(
            f"No coverage file configured. Pass --coverage-file or set it in {CONFIG_FILE_NAME}."
        )
        raise click.Abort

    result = get_coverage_report(options, read_content=partial(read_content_file, workspace=path))

    if output:
        Path(output).write_text(result.html, encoding="utf-8")
        logger.info("Report written to %s", output)

    # stdout carries only the JSON document in --json mode
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        reporter.print_coverage_summary(result, title=options.coverage_title)
        if output:
            reporter.print_success(f"Report written to {output}")
        else:
            click.echo(result.html)

    if (post_comment or config.comment.post) and not post_coverage_report_from_env(
        result, marker_prefix=config.comment.marker, hide_badge=config.comment.hide_badge
    ):
        reporter.print_warning("Coverage comment was not posted")

    threshold = min_coverage if min_coverage is not None else config.thresholds.min_coverage
    if threshold and result.coverage_pct < threshold:
        reporter.print_error(f"Coverage {result.coverage_pct}% is below the minimum {threshold}%")
        sys.exit(1)


@cli.group("config")
def config_group() -> None:
    """Inspect the covcomment configuration."""


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
def config_validate(path: str) -> None:
    """Validate `.covcomment.yml`.

    Example:
      covcomment config validate
    """
    _load_valid_config(path)
    reporter.print_success("Configuration is valid!")


if __name__ == "__main__":
    cli()
