"""GitHub comment reporter for posting coverage reports to PRs.

The comment is found again through a hidden marker, so reruns update the
existing comment instead of stacking new ones.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covcomment.utils.ci_context import detect_ci_context
from covcomment.utils.git import (
    GITHUB_API_BASE,
    GitHubAPI,
    GitHubAPIError,
    api_url_for,
    compute_comment_marker,
    pr_info_from_context,
)

if TYPE_CHECKING:
    from covcomment.models.coverage import CoverageReport
    from covcomment.utils.git import GitHubPRInfo

logger = logging.getLogger(__name__)

BADGE_URL = "https://img.shields.io/badge/Coverage-{coverage}%25-{color}.svg"


def build_comment_body(report: CoverageReport, marker: str, *, hide_badge: bool = False) -> str:
    """Compose the comment body: marker, optional badge, then the HTML report."""
    sections = [marker]

    if not hide_badge:
        badge = BADGE_URL.format(coverage=report.coverage_pct, color=report.color)
        sections.append(f"![Coverage]({badge})")
        sections.append("")

    sections.append(report.html)
    return "\n".join(sections)


class GitHubCommentReporter:
    """Reporter that posts coverage reports as GitHub PR comments."""

    def __init__(
        self,
        github_token: str | None = None,
        marker_prefix: str = "covcomment:report",
        api_url: str = GITHUB_API_BASE,
    ) -> None:
        """Initialize the GitHub comment reporter.

        Args:
            github_token: GitHub token. If not provided, will try to read from
                GITHUB_TOKEN environment variable.
            marker_prefix: Prefix of the hidden comment marker.
            api_url: REST API root of the code host.

        Raises:
            GitHubAPIError: If no token is available.
        """
        self._api = GitHubAPI(token=github_token, api_url=api_url)
        self._marker = compute_comment_marker(marker_prefix)

    @property
    def marker(self) -> str:
        """Hidden HTML marker identifying this reporter's comment."""
        return self._marker

    def post_report(
        self, pr_info: GitHubPRInfo, report: CoverageReport, *, hide_badge: bool = False
    ) -> dict[str, str]:
        """Create or update the coverage comment on a PR.

        Returns:
            Dict with status and comment URL.

        Raises:
            GitHubAPIError: If posting the comment fails.
        """
        logger.info(
            "Posting coverage report to PR #%d in %s/%s",
            pr_info.pr_number,
            pr_info.owner,
            pr_info.repo,
        )

        body = build_comment_body(report, self._marker, hide_badge=hide_badge)
        result = self._api.upsert_comment(pr_info, body, self._marker)

        logger.info("Successfully posted comment: %s", result.get("html_url"))

        return {
            "status": "success",
            "comment_url": result.get("html_url", ""),
        }


def post_coverage_report_from_env(
    report: CoverageReport,
    *,
    marker_prefix: str = "covcomment:report",
    hide_badge: bool = False,
) -> bool:
    """Post a coverage report to the PR the current GitHub Actions run belongs to.

    Returns:
        True if the report was posted, False otherwise.
    """
    context = detect_ci_context()
    pr_info = pr_info_from_context(context)
    if not pr_info:
        logger.info("Not running in a GitHub Actions PR context, skipping GitHub comment")
        return False

    try:
        reporter = GitHubCommentReporter(
            marker_prefix=marker_prefix, api_url=api_url_for(context.server_url)
        )
        result = reporter.post_report(pr_info, report, hide_badge=hide_badge)

        logger.info("Posted coverage report: %s", result.get("comment_url"))
        return True

    except GitHubAPIError as exc:
        logger.error("Failed to post coverage report: %s", exc)
        return False
