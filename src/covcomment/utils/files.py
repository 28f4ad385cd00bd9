"""Reading coverage text files from the workspace."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class ContentFileError(OSError):
    """Raised when a configured coverage file cannot be read."""


def resolve_path(path: str, workspace: str | Path | None = None) -> Path:
    """Resolve *path* against the workspace.

    Absolute paths are returned unchanged. Relative paths are resolved against
    *workspace*, then ``$GITHUB_WORKSPACE``, then the current directory.
    """
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate

    base = workspace or os.environ.get("GITHUB_WORKSPACE") or Path.cwd()
    return Path(base) / candidate


def read_content_file(path: str, workspace: str | Path | None = None) -> str:
    """Return the text content of a coverage file.

    Args:
        path: Absolute or workspace-relative file path.
        workspace: Directory relative paths are resolved against.

    Returns:
        File content, or an empty string for an empty path or empty file.

    Raises:
        ContentFileError: If the file does not exist or cannot be read.
    """
    if not path:
        return ""

    resolved = resolve_path(path, workspace)
    if not resolved.is_file():
        raise ContentFileError(f'File "{path}" doesn\'t exist')

    try:
        content = resolved.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ContentFileError(f'Failed to read "{path}": {exc}') from exc

    if not content:
        logger.warning('No content found in file "%s"', path)
        return ""

    logger.info('File read successfully "%s"', path)
    return content
