"""Git and GitHub API utilities for covcomment.

Changed-file enumeration runs ``git`` in a subprocess; PR comments go through
the GitHub REST API.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import requests

from covcomment.models.coverage import ChangedFiles

if TYPE_CHECKING:
    from pathlib import Path

    from covcomment.utils.ci_context import CIContext

logger = logging.getLogger(__name__)

# GitHub API constants
GITHUB_API_BASE = "https://api.github.com"
_GITHUB_AUTH_ENV_KEY = "GITHUB_" + "TOKEN"
_REQUEST_TIMEOUT = 30
_GIT_TIMEOUT = 30

# Comments fetched per page (GitHub maximum)
_PAGE_SIZE = 100

_MARKER_UNSAFE = re.compile(r"[^A-Za-z0-9:._/]+")

# Status plus at least one path in name-status output
_MIN_STATUS_FIELDS = 2


def _git_executable() -> str:
    """Resolve the full path to the ``git`` executable."""
    return shutil.which("git") or "git"


# ── Git ──────────────────────────────────────────────────────────


class GitOperationError(Exception):
    """Exception raised when git operations fail."""


_GIT_REF_MAX_LENGTH = 255
_GIT_REF_UNSAFE = re.compile(r"[\x00-\x1f\x7f \~\^:\?\*\[\]\\;|&$`()<>{}!#'\"]")


def _validate_git_ref(ref: str) -> None:
    """Validate a git ref to prevent injection and malformed inputs.

    Raises:
        GitOperationError: If the ref is invalid.
    """
    if not ref:
        raise GitOperationError("Git ref must not be empty")
    if len(ref) > _GIT_REF_MAX_LENGTH:
        raise GitOperationError(f"Git ref exceeds {_GIT_REF_MAX_LENGTH} characters")
    if _GIT_REF_UNSAFE.search(ref):
        raise GitOperationError(f"Git ref contains unsafe characters: {ref!r}")
    if ref.startswith("-"):
        raise GitOperationError("Git ref must not start with a dash")
    if ".." in ref:
        raise GitOperationError("Git ref must not contain '..'")


def parse_name_status(output: str) -> ChangedFiles:
    """Parse ``git diff --name-status`` output into changed files.

    Renames and copies (``R100``/``C075``) carry the old and new path; the new
    path is recorded.
    """
    changed = ChangedFiles()

    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) < _MIN_STATUS_FIELDS:
            continue

        status = parts[0].strip()
        path = parts[-1].strip()
        if not status or not path:
            continue

        kind = status[0]
        if kind == "A":
            changed.added.append(path)
        elif kind == "M":
            changed.modified.append(path)
        elif kind == "D":
            changed.removed.append(path)
        elif kind in {"R", "C"}:
            changed.renamed.append(path)
        else:
            logger.debug("Ignoring git status %s for %s", status, path)
            continue

        changed.all.append(path)

    return changed


def get_changed_files(
    repo_path: Path | str, base_ref: str, head_ref: str = "HEAD"
) -> ChangedFiles:
    """List files changed between *base_ref* and *head_ref*.

    Uses ``git diff --name-status base...head`` so only changes on the head
    side of the merge base are reported.

    Raises:
        GitOperationError: If a ref is invalid or git fails.
    """
    _validate_git_ref(base_ref)
    _validate_git_ref(head_ref)

    cmd = [_git_executable(), "diff", "--name-status", f"{base_ref}...{head_ref}"]
    logger.info("Listing changed files: %s", " ".join(cmd))

    try:
        result = subprocess.run(  # noqa: S603
            cmd,
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=True,
            timeout=_GIT_TIMEOUT,
        )
    except subprocess.CalledProcessError as exc:
        raise GitOperationError(f"git diff failed: {exc.stderr.strip()}") from exc
    except (FileNotFoundError, subprocess.TimeoutExpired) as exc:
        raise GitOperationError(f"git diff failed: {exc}") from exc

    changed = parse_name_status(result.stdout)
    logger.info("Detected %d changed files", len(changed.all))
    return changed


# ── GitHub API ───────────────────────────────────────────────────


@dataclass
class GitHubPRInfo:
    """Information about a GitHub pull request."""

    owner: str
    """Repository owner (username or organization)."""

    repo: str
    """Repository name."""

    pr_number: int
    """Pull request number."""


class GitHubAPIError(Exception):
    """Exception raised when GitHub API operations fail."""


def api_url_for(server_url: str) -> str:
    """Return the REST API root for a github.com or GitHub Enterprise server URL."""
    server = server_url.rstrip("/")
    if not server or server.split("://")[-1] == "github.com":
        return GITHUB_API_BASE
    return f"{server}/api/v3"


def pr_info_from_context(context: CIContext) -> GitHubPRInfo | None:
    """Return the pull request a CI run belongs to, or None outside a PR."""
    if not context.is_pr or context.pr_number is None or not context.repository:
        return None

    owner, _, repo = context.repository.partition("/")
    if not owner or not repo or "/" in repo:
        logger.warning("Cannot parse repository %r as owner/name", context.repository)
        return None

    return GitHubPRInfo(owner=owner, repo=repo, pr_number=context.pr_number)


def compute_comment_marker(prefix: str) -> str:
    """Return the hidden HTML comment that tags report comments for *prefix*.

    Runs of characters outside ``[A-Za-z0-9:._/]`` collapse to one dash, so the
    marker never contains ``--`` and cannot end the HTML comment early.
    """
    slug = _MARKER_UNSAFE.sub("-", prefix).strip("-") or "covcomment"
    return f"<!-- {slug} -->"


class GitHubAPI:
    """Client for the pull request issue-comments endpoints."""

    def __init__(self, token: str | None = None, api_url: str = GITHUB_API_BASE) -> None:
        """Initialize the client.

        Args:
            token: GitHub token; falls back to the GITHUB_TOKEN environment variable.
            api_url: REST API root (see ``api_url_for`` for GitHub Enterprise).

        Raises:
            GitHubAPIError: If no token is available.
        """
        self._token = token or os.environ.get(_GITHUB_AUTH_ENV_KEY)
        if not self._token:
            raise GitHubAPIError(
                f"GitHub token required. Set {_GITHUB_AUTH_ENV_KEY} environment variable "
                "or pass token to constructor."
            )

        self._api_url = api_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _repo_url(self, pr_info: GitHubPRInfo) -> str:
        return f"{self._api_url}/repos/{pr_info.owner}/{pr_info.repo}"

    def list_comments(self, pr_info: GitHubPRInfo) -> list[dict[str, Any]]:
        """Return every comment on the PR, following pagination."""
        url = f"{self._repo_url(pr_info)}/issues/{pr_info.pr_number}/comments"
        comments: list[dict[str, Any]] = []

        page = 1
        while True:
            batch = self._request("GET", url, params={"per_page": _PAGE_SIZE, "page": page})
            comments.extend(batch)
            if len(batch) < _PAGE_SIZE:
                return comments
            page += 1

    def create_comment(self, pr_info: GitHubPRInfo, body: str) -> dict[str, Any]:
        url = f"{self._repo_url(pr_info)}/issues/{pr_info.pr_number}/comments"
        result: dict[str, Any] = self._request("POST", url, payload={"body": body})
        return result

    def update_comment(self, pr_info: GitHubPRInfo, comment_id: int, body: str) -> dict[str, Any]:
        url = f"{self._repo_url(pr_info)}/issues/comments/{comment_id}"
        result: dict[str, Any] = self._request("PATCH", url, payload={"body": body})
        return result

    def find_comment_by_marker(self, pr_info: GitHubPRInfo, marker: str) -> dict[str, Any] | None:
        """Return the first comment whose body contains *marker*."""
        return next(
            (c for c in self.list_comments(pr_info) if marker in (c.get("body") or "")),
            None,
        )

    def upsert_comment(self, pr_info: GitHubPRInfo, body: str, marker: str) -> dict[str, Any]:
        """Update the comment tagged with *marker*, or create it.

        Raises:
            GitHubAPIError: If an API request fails.
        """
        if marker not in body:
            body = f"{marker}\n{body}"

        existing = self.find_comment_by_marker(pr_info, marker)
        if existing is None:
            logger.info("Creating coverage comment on PR #%d", pr_info.pr_number)
            return self.create_comment(pr_info, body)

        logger.info("Updating coverage comment %s", existing["id"])
        return self.update_comment(pr_info, existing["id"], body)

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = requests.request(
                method,
                url,
                headers=self._headers,
                params=params,
                json=payload,
                timeout=_REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise GitHubAPIError(f"{method} {url} failed: {exc}") from exc
