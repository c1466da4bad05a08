"""manifest.json generation for .qpp packages."""

import json
import logging
import re
from pathlib import Path
from typing import Any

from quapp.constants import MANIFEST_DEFAULTS, MANIFEST_FILENAME

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_MAX_SEGMENT = 50


class ManifestError(Exception):
    """Raised when a manifest cannot be written."""

    pass


def sanitize_segment(value: Any) -> str:
    """Lowercase alphanumerics only, at most 50 characters."""
    if not value:
        return ""
    return _NON_ALNUM.sub("", str(value).lower())[:_MAX_SEGMENT]


def parse_version_code(version: str | None) -> int:
    """Integer version code: "1.2.3" -> 10203.

    Missing parts count as zero, non-numeric parts too. No version at all
    gives 1.
    """
    if not version:
        return 1
    parts = []
    for part in str(version).split(".")[:3]:
        match = re.match(r"\d+", part)
        parts.append(int(match.group()) if match else 0)
    major, minor, patch = (parts + [0, 0, 0])[:3]
    return major * 10000 + minor * 100 + patch


def generate_manifest(
    pkg: dict[str, Any],
    entry_point: str | None = None,
    permissions: list[str] | None = None,
    min_sdk_version: int | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the manifest for a package.json.

    Example:
        >>> generate_manifest({"name": "My App", "version": "1.2.3", "author": "Jane"})["package_name"]
        'com.jane.myapp'
    """
    author = sanitize_segment(pkg.get("author")) or "developer"
    name = sanitize_segment(pkg.get("name")) or "app"
    version = pkg.get("version")

    manifest = {
        "package_name": f"com.{author}.{name}",
        "version": version or "1.0.0",
        "version_code": parse_version_code(version),
        "entry_point": entry_point or MANIFEST_DEFAULTS["entry_point"],
        "permissions": list(permissions or MANIFEST_DEFAULTS["permissions"]),
        "min_sdk_version": min_sdk_version or MANIFEST_DEFAULTS["min_sdk_version"],
    }
    if extra:
        manifest.update(extra)
    return manifest


def write_manifest(directory: Path, manifest: dict[str, Any]) -> Path:
    """Write manifest.json into ``directory``.

    Raises:
        ManifestError: If the file cannot be written
    """
    path = directory / MANIFEST_FILENAME
    try:
        path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Failed to write manifest: {e}") from e
    logger.debug(f"Wrote manifest: {path}")
    return path


def read_manifest(directory: Path) -> dict[str, Any] | None:
    """Existing manifest.json in ``directory``, or None if absent or unreadable."""
    path = directory / MANIFEST_FILENAME
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(f"Ignoring unreadable manifest {path}: {e}")
        return None
    return data if isinstance(data, dict) else None
