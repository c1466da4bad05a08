"""Git repository initialisation for new projects."""

import logging
from pathlib import Path

from quapp.modules.prerequisites import PrerequisiteChecker
from quapp.modules.subprocess_helper import safe_run

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 30

DEFAULT_GITIGNORE = [
    "node_modules",
    "dist",
    "dist.qpp",
    ".env",
    ".env.local",
    "*.log",
    ".DS_Store",
    "Thumbs.db",
]


class GitError(Exception):
    """Raised when git is missing or a git command fails."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.hint = hint


def is_git_available() -> bool:
    return PrerequisiteChecker.check_tool("git")


def init_repository(directory: Path) -> None:
    """Run ``git init`` and write a default .gitignore if the template has none.

    Raises:
        GitError: If git is not installed or ``git init`` fails
    """
    if not is_git_available():
        raise GitError("Git is not installed", hint="Download Git from: https://git-scm.com/download")

    result = safe_run(["git", "init"], cwd=directory, timeout=GIT_TIMEOUT)
    if not result.ok:
        logger.debug(f"git init failed: {result.stderr.strip()}")
        raise GitError(f"Failed to initialize git repository: {result.stderr.strip()}")

    gitignore = directory / ".gitignore"
    if not gitignore.exists():
        gitignore.write_text("\n".join(DEFAULT_GITIGNORE) + "\n", encoding="utf-8")
