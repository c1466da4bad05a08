"""Project templates: validation and fetching.

Templates live in the ``packages/templates/<name>`` directory of the Quapp
repository on GitHub. A fetch downloads the repository tarball once and
extracts only the requested template directory.

Security Requirements:
- HTTPS only for downloads
- Timeout on API calls
- Archive members may not escape the target directory
"""

import logging
import os
import re
import shutil
import tarfile
import tempfile
from pathlib import Path, PurePosixPath

import requests

from quapp.constants import (
    ALL_TEMPLATES,
    TEMPLATE_REPO_NAME,
    TEMPLATE_REPO_OWNER,
    TEMPLATE_REPO_PATH,
    TEMPLATES,
)

logger = logging.getLogger(__name__)

_PROJECT_NAME = re.compile(r"^[a-zA-Z0-9_-]+$")
MAX_PROJECT_NAME_LENGTH = 214
RESERVED_NAMES = ("node_modules", "favicon.ico", "package.json")


class TemplateError(Exception):
    """Raised when a template is invalid or cannot be fetched."""

    def __init__(self, message: str, code: str = "TEMPLATE_ERROR", hint: str | None = None):
        super().__init__(message)
        self.code = code
        self.hint = hint


def validate_template(template: str | None) -> str:
    """
    Raises:
        TemplateError: INVALID_TEMPLATE for an unknown or empty name
    """
    if not template:
        raise TemplateError("Template name is required", code="INVALID_TEMPLATE")
    if template not in ALL_TEMPLATES:
        raise TemplateError(
            f'Invalid template: "{template}"',
            code="INVALID_TEMPLATE",
            hint=f"Available templates: {', '.join(ALL_TEMPLATES)}",
        )
    return template


def validate_project_name(name: str | None) -> str | None:
    """Return an error message for an unusable project name, None when valid."""
    if not name or not name.strip():
        return "Project name is required"
    trimmed = name.strip()
    if not _PROJECT_NAME.match(trimmed):
        return "Project name can only contain letters, numbers, hyphens, and underscores"
    if len(trimmed) > MAX_PROJECT_NAME_LENGTH:
        return f"Project name is too long (max {MAX_PROJECT_NAME_LENGTH} characters)"
    if trimmed.lower() in RESERVED_NAMES:
        return f'"{trimmed}" is a reserved name'
    return None


def framework_for_template(template: str) -> str | None:
    for framework, variants in TEMPLATES.items():
        if template in variants:
            return framework
    return None


class TemplateFetcher:
    """Download and extract templates from the Quapp GitHub repository."""

    API_BASE = "https://api.github.com"
    API_TIMEOUT = 30
    CHUNK_SIZE = 8192

    @classmethod
    def tarball_url(cls) -> str:
        return f"{cls.API_BASE}/repos/{TEMPLATE_REPO_OWNER}/{TEMPLATE_REPO_NAME}/tarball"

    @classmethod
    def _headers(cls) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        token = os.environ.get("GH_TOKEN") or os.environ.get("GITHUB_TOKEN")
        if token:
            headers["Authorization"] = f"Bearer {token.strip()}"
        return headers

    @classmethod
    def download(cls, destination: Path) -> Path:
        """Stream the repository tarball to ``destination``.

        Raises:
            TemplateError: NETWORK_ERROR on connection problems or a bad status,
                TEMPLATE_NOT_FOUND when the repository is gone
        """
        url = cls.tarball_url()
        logger.debug(f"Downloading templates from {url}")
        try:
            with requests.get(
                url, headers=cls._headers(), stream=True, timeout=cls.API_TIMEOUT
            ) as response:
                if response.status_code == 404:
                    raise TemplateError(
                        "Template repository not found",
                        code="TEMPLATE_NOT_FOUND",
                        hint=f"Expected {TEMPLATE_REPO_OWNER}/{TEMPLATE_REPO_NAME} on GitHub",
                    )
                if response.status_code != 200:
                    raise TemplateError(
                        f"Template download failed with HTTP {response.status_code}",
                        code="NETWORK_ERROR",
                        hint="Try again later, or set GITHUB_TOKEN if you are rate limited",
                    )
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=cls.CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            raise TemplateError(
                f"Failed to download template: {e}",
                code="NETWORK_ERROR",
                hint="Check your internet connection and try again",
            ) from e
        return destination

    @classmethod
    def extract(cls, archive: Path, template: str, target_dir: Path) -> int:
        """Extract ``<root>/packages/templates/<template>/`` into ``target_dir``.

        Returns:
            Number of files written

        Raises:
            TemplateError: TEMPLATE_NOT_FOUND when the archive has no such template
        """
        prefix = (*PurePosixPath(TEMPLATE_REPO_PATH).parts, template)
        written = 0
        try:
            with tarfile.open(archive, "r:*") as tar:
                for member in tar:
                    parts = PurePosixPath(member.name).parts
                    # parts[0] is the "<owner>-<repo>-<sha>" root directory
                    if tuple(parts[1 : 1 + len(prefix)]) != prefix:
                        continue
                    relative = parts[1 + len(prefix) :]
                    if not relative or ".." in relative:
                        continue
                    destination = target_dir.joinpath(*relative)
                    if member.isdir():
                        destination.mkdir(parents=True, exist_ok=True)
                    elif member.isfile():
                        destination.parent.mkdir(parents=True, exist_ok=True)
                        source = tar.extractfile(member)
                        if source is None:
                            continue
                        with source, open(destination, "wb") as out:
                            shutil.copyfileobj(source, out)
                        written += 1
        except (tarfile.TarError, EOFError) as e:
            raise TemplateError(
                f"Downloaded template archive is corrupt: {e}", code="NETWORK_ERROR"
            ) from e

        if written == 0:
            raise TemplateError(
                f'Template "{template}" not found in the template repository',
                code="TEMPLATE_NOT_FOUND",
                hint=f"Available templates: {', '.join(ALL_TEMPLATES)}",
            )
        logger.debug(f"Extracted {written} files for template {template}")
        return written


def clone_template(template: str, target_dir: Path) -> int:
    """Download ``template`` into ``target_dir``, overwriting existing files.

    Files are extracted into a staging directory first; ``target_dir`` is
    only touched once the whole template was extracted.

    Returns:
        Number of files written

    Raises:
        TemplateError: If the template is unknown or cannot be fetched
    """
    validate_template(template)
    with tempfile.TemporaryDirectory(prefix="quapp-") as tmp:
        archive = TemplateFetcher.download(Path(tmp) / "templates.tar.gz")
        staging = Path(tmp) / "project"
        staging.mkdir()
        written = TemplateFetcher.extract(archive, template, staging)
        shutil.copytree(staging, target_dir, dirs_exist_ok=True)
    return written
