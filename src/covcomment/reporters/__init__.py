"""Reporters for outputting coverage reports."""

from __future__ import annotations

from covcomment.reporters.github_comment import GitHubCommentReporter
from covcomment.reporters.html import coverage_to_markdown, to_table
from covcomment.reporters.terminal import reporter

__all__ = [
    "GitHubCommentReporter",
    "coverage_to_markdown",
    "reporter",
    "to_table",
]
