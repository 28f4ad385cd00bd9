"""CI and PR context detection utilities."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_DEFAULT_SERVER_URL = "https://github.com"
_PR_EVENTS = frozenset({"pull_request", "pull_request_target"})
_PR_REF_PREFIX = "refs/pull/"


@dataclass
class CIContext:
    """Detected CI/PR execution context."""

    is_ci: bool
    """Running in CI environment."""

    is_pr: bool
    """Running in context of a pull request."""

    server_url: str = _DEFAULT_SERVER_URL
    """Base URL of the code host."""

    repository: str | None = None
    """Repository in ``owner/name`` form."""

    commit_sha: str | None = None
    """Commit the report links should point at (PR head when in a PR)."""

    base_ref: str | None = None
    """Base/target branch for PR."""

    pr_number: int | None = None
    """Pull request number (None outside a PR)."""


def detect_ci_context() -> CIContext:
    """Detect CI and PR context from environment variables.

    GitHub Actions gets full detection; any other CI only sets ``is_ci``.

    Returns:
        CIContext with detected values.
    """
    if os.getenv("GITHUB_ACTIONS") == "true":
        is_pr = os.getenv("GITHUB_EVENT_NAME", "") in _PR_EVENTS
        event = _load_event(os.getenv("GITHUB_EVENT_PATH")) if is_pr else {}

        return CIContext(
            is_ci=True,
            is_pr=is_pr,
            server_url=os.getenv("GITHUB_SERVER_URL") or _DEFAULT_SERVER_URL,
            repository=os.getenv("GITHUB_REPOSITORY") or None,
            commit_sha=_pr_head_sha(event) or os.getenv("GITHUB_SHA") or None,
            base_ref=(os.getenv("GITHUB_BASE_REF") or None) if is_pr else None,
            pr_number=(
                (_parse_pr_ref(os.getenv("GITHUB_REF")) or _pr_number(event)) if is_pr else None
            ),
        )

    return CIContext(is_ci=os.getenv("CI") == "true", is_pr=False)


def _load_event(event_path: str | None) -> dict[str, Any]:
    """Load the webhook event payload GitHub Actions writes to disk."""
    if not event_path:
        return {}

    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read GitHub event payload %s: %s", event_path, exc)
        return {}

    return payload if isinstance(payload, dict) else {}


def _parse_int(value: Any) -> int | None:
    """Parse an integer, returning None for missing or malformed values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_pr_ref(ref: str | None) -> int | None:
    """Return N from ``refs/pull/N/merge`` (or ``/head``)."""
    if not ref or not ref.startswith(_PR_REF_PREFIX):
        return None
    return _parse_int(ref.removeprefix(_PR_REF_PREFIX).split("/")[0])


def _pr_number(event: dict[str, Any]) -> int | None:
    """Return the PR number from an event payload.

    ``pull_request_target`` runs on the base branch ref, so the payload is the
    only place the number appears.
    """
    pull_request = event.get("pull_request")
    if isinstance(pull_request, dict) and "number" in pull_request:
        return _parse_int(pull_request["number"])
    return _parse_int(event.get("number"))


def _pr_head_sha(event: dict[str, Any]) -> str | None:
    """Return ``pull_request.head.sha`` from an event payload."""
    pull_request = event.get("pull_request")
    if not isinstance(pull_request, dict):
        return None
    head = pull_request.get("head")
    if not isinstance(head, dict):
        return None
    sha = head.get("sha")
    return str(sha) if sha else None
