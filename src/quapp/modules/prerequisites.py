"""
Prerequisites Checker Module

Verifies the external tools quapp shells out to (Node.js, npx, git and the
project-local Vite binary) before a handler relies on them.

Security Requirements:
- Read-only system checks
- No shell=True in subprocess calls
"""

import logging
import platform
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

logger = logging.getLogger(__name__)


@dataclass
class PrerequisiteResult:
    """Result of prerequisite checks."""

    all_available: bool
    missing: list[str]
    available: list[str]
    platform_name: str


class PrerequisiteError(Exception):
    """Raised when a required tool is missing."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.hint = hint


class PrerequisiteChecker:
    """
    Check required external tools are installed.

    Required tools:
    - node, npx (dev server and build)
    Optional tools:
    - git (repository initialisation when scaffolding)
    """

    REQUIRED_TOOLS: ClassVar[list[str]] = ["node", "npx"]
    OPTIONAL_TOOLS: ClassVar[list[str]] = ["git"]

    @classmethod
    def check_tool(cls, tool_name: str) -> bool:
        """
        Check if a single tool is available in PATH.

        Security: Uses shutil.which (safe, no subprocess)
        """
        result = shutil.which(tool_name)
        if result:
            logger.debug(f"Found {tool_name} at {result}")
            return True
        logger.debug(f"Tool not found: {tool_name}")
        return False

    @classmethod
    def check_all(cls) -> PrerequisiteResult:
        """Check required and optional tools.

        Example:
            >>> result = PrerequisiteChecker.check_all()
            >>> if not result.all_available:
            ...     print(f"Missing: {result.missing}")
        """
        missing: list[str] = []
        available: list[str] = []

        for tool in cls.REQUIRED_TOOLS:
            if cls.check_tool(tool):
                available.append(tool)
            else:
                missing.append(tool)

        for tool in cls.OPTIONAL_TOOLS:
            if cls.check_tool(tool):
                available.append(tool)
            else:
                logger.debug(f"Optional tool not found: {tool}")

        return PrerequisiteResult(
            all_available=not missing,
            missing=missing,
            available=available,
            platform_name=cls.detect_platform(),
        )

    @classmethod
    def detect_platform(cls) -> str:
        """Return macos, linux, windows or unknown."""
        system = platform.system().lower()
        if system == "darwin":
            return "macos"
        if system in ("linux", "windows"):
            return system
        return "unknown"

    @classmethod
    def vite_path(cls, project_dir: Path) -> Path:
        """Location of the project-local Vite binary."""
        name = "vite.cmd" if cls.detect_platform() == "windows" else "vite"
        return project_dir / "node_modules" / ".bin" / name

    @classmethod
    def check_vite(cls, project_dir: Path) -> bool:
        path = cls.vite_path(project_dir)
        if path.exists():
            logger.debug(f"Found vite at {path}")
            return True
        logger.debug(f"Vite not found at {path}")
        return False

    @classmethod
    def require_vite(cls, project_dir: Path) -> None:
        """
        Raises:
            PrerequisiteError: If the project has no local Vite install
        """
        if not cls.check_vite(project_dir):
            raise PrerequisiteError(
                "Vite is not installed in this project",
                hint='Run "npm install" to install project dependencies',
            )

    @classmethod
    def format_missing_message(cls, missing: list[str], platform_name: str) -> str:
        """Format installation instructions for missing tools."""
        if not missing:
            return "All prerequisites are installed."

        lines: list[str] = ["Missing required tools:", ""]
        lines.extend(f"  - {tool}" for tool in missing)
        lines.append("")

        if "node" in missing or "npx" in missing:
            if platform_name == "macos":
                lines.extend(["Install Node.js:", "  brew install node", ""])
            else:
                lines.extend(["Install Node.js:", "  See: https://nodejs.org/en/download", ""])

        if "git" in missing:
            if platform_name == "macos":
                lines.extend(["Install Git:", "  brew install git", ""])
            elif platform_name == "linux":
                lines.extend(["Install Git:", "  sudo apt-get install git", ""])
            else:
                lines.extend(["Install Git:", "  Download from: https://git-scm.com/downloads", ""])

        return "\n".join(lines).rstrip()
