"""quapp build: production build packaged as a .qpp archive.

Flow:
    1. Load quapp.config.json and package.json
    2. Fill in missing name/version/author (prompt, or defaults with --skip-prompts)
    3. Run ``npm run build`` and verify the output directory
    4. Write manifest.json into the output directory
    5. Zip the output directory into the .qpp file
    6. Remove the output directory unless --no-clean
"""

import logging
import shutil
import time
import zipfile
from pathlib import Path
from typing import Any

from quapp.config_manager import (
    ConfigManager,
    PackageJsonError,
    has_build_script,
    missing_fields,
)
from quapp.constants import PACKAGE_EXTENSION, ExitCode
from quapp.manifest import ManifestError, generate_manifest, read_manifest, write_manifest
from quapp.modules.interaction_handler import CLIInteractionHandler, InteractionHandler
from quapp.modules.subprocess_helper import safe_run
from quapp.options import DevOptions
from quapp.output import Reporter
from quapp.result import CommandResult

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0.0"
DEFAULT_AUTHOR = "developer"
BUILD_COMMAND = ["npm", "run", "build"]


def format_size(size: int) -> str:
    """Human-readable byte count.

    Example:
        >>> format_size(2048)
        '2.0 KB'
    """
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def output_filename(requested: str) -> str:
    """Append .qpp when the name does not already end with it."""
    return requested if requested.endswith(PACKAGE_EXTENSION) else requested + PACKAGE_EXTENSION


def compress_directory(source: Path, target: Path) -> int:
    """Zip the contents of ``source`` (not the directory itself) into ``target``.

    Returns:
        Size of the archive in bytes
    """
    with zipfile.ZipFile(target, "w", zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
        for path in sorted(source.rglob("*")):
            if path.is_file():
                archive.write(path, path.relative_to(source).as_posix())
    return target.stat().st_size


def _required(label: str):
    def validate(value: str) -> str | None:
        return None if value.strip() else f"{label} is required"

    return validate


def _defaults_for_missing(
    pkg: dict[str, Any], missing: list[str], reporter: Reporter
) -> dict[str, Any]:
    updates: dict[str, Any] = {}
    if "version" in missing:
        updates["version"] = DEFAULT_VERSION
        reporter.warn(f"No version specified, using {DEFAULT_VERSION}")
    if not pkg.get("author"):
        updates["author"] = DEFAULT_AUTHOR
        reporter.warn(f'No author specified, using "{DEFAULT_AUTHOR}"')
    return updates


def _prompt_for_missing(
    pkg: dict[str, Any], missing: list[str], interaction: InteractionHandler
) -> dict[str, Any]:
    answers: dict[str, Any] = {}
    if "name" in missing:
        answers["name"] = interaction.prompt_text("Enter project name:", validate=_required("Name"))
    if "version" in missing:
        answers["version"] = interaction.prompt_text(
            "Enter version (e.g., 1.0.0):", default=DEFAULT_VERSION, validate=_required("Version")
        )
    if not pkg.get("author"):
        answers["author"] = interaction.prompt_text(
            "Enter author name:", validate=_required("Author")
        )
    return answers


def run_build(
    options: DevOptions,
    reporter: Reporter,
    cwd: Path | None = None,
    interaction: InteractionHandler | None = None,
) -> CommandResult:
    cwd = cwd or Path.cwd()
    interaction = interaction or CLIInteractionHandler(color=reporter.settings.color)
    start = time.monotonic()

    loaded = ConfigManager.load_config(cwd)
    if loaded.error:
        reporter.warn(loaded.error)
    build_config = loaded.config.build

    try:
        pkg = ConfigManager.load_package_json(cwd)
    except PackageJsonError as e:
        reporter.error(str(e))
        return CommandResult.failure(
            "PACKAGE_JSON_ERROR",
            str(e),
            suggestion="Make sure you are in a Quapp project directory",
            exit_code=ExitCode.CONFIG_ERROR,
        )

    missing = missing_fields(pkg)
    if missing or not pkg.get("author"):
        if options.skip_prompts or reporter.json_mode:
            if "name" in missing:
                reporter.error("Missing required field: name")
                return CommandResult.failure(
                    "MISSING_PACKAGE_NAME",
                    "Missing name in package.json",
                    suggestion='Add a "name" field to package.json',
                    exit_code=ExitCode.CONFIG_ERROR,
                )
            updates = _defaults_for_missing(pkg, missing, reporter)
        else:
            updates = _prompt_for_missing(pkg, missing, interaction)

        if updates:
            try:
                pkg = ConfigManager.update_package_json(cwd, updates)
            except PackageJsonError as e:
                reporter.error(str(e))
                return CommandResult.failure(
                    "PACKAGE_JSON_ERROR", str(e), exit_code=ExitCode.CONFIG_ERROR
                )
            reporter.success("Updated package.json")

    if not has_build_script(pkg):
        reporter.error('No "build" script found in package.json')
        reporter.info('Add a build script to your package.json, e.g.: "build": "vite build"')
        return CommandResult.failure(
            "NO_BUILD_SCRIPT",
            "No build script",
            suggestion='Add to package.json: "scripts": { "build": "vite build" }',
            exit_code=ExitCode.CONFIG_ERROR,
        )

    dist_dir = cwd / build_config.out_dir
    output_file = output_filename(options.output or build_config.output_file)
    output_path = cwd / output_file

    reporter.step("📦", "Building for production...")
    proc = safe_run(BUILD_COMMAND, cwd=cwd, capture=reporter.json_mode)
    if proc.stdout:
        reporter.debug(proc.stdout.rstrip())
    if not proc.ok:
        if proc.stderr:
            reporter.debug(proc.stderr.rstrip())
        reporter.error("Build failed")
        return CommandResult.failure(
            "BUILD_FAILED",
            "Build failed",
            suggestion='Run "npm run build" to see the full error output',
            exit_code=ExitCode.BUILD_FAILED,
        )
    reporter.success("Build completed")

    if not dist_dir.is_dir():
        reporter.error(f'Build output directory "{build_config.out_dir}" not found')
        reporter.info("Make sure your build script outputs to the correct directory")
        return CommandResult.failure(
            "BUILD_OUTPUT_NOT_FOUND",
            "Build output not found",
            suggestion=f'Set "build.outDir" in quapp.config.json (currently "{build_config.out_dir}")',
            exit_code=ExitCode.BUILD_FAILED,
        )

    reporter.step("📋", "Generating manifest...")
    # A manifest.json shipped by the project (e.g. from public/) customises these fields
    project_manifest = read_manifest(dist_dir) or {}
    manifest = generate_manifest(
        pkg,
        entry_point=project_manifest.get("entry_point"),
        permissions=project_manifest.get("permissions"),
        min_sdk_version=project_manifest.get("min_sdk_version"),
    )
    try:
        write_manifest(dist_dir, manifest)
    except ManifestError as e:
        reporter.error(str(e))
        return CommandResult.failure("MANIFEST_FAILED", str(e), exit_code=ExitCode.GENERAL_ERROR)
    reporter.success("Manifest created")
    reporter.debug(f"Package: {manifest['package_name']}")
    reporter.debug(f"Version: {manifest['version']} (code: {manifest['version_code']})")

    reporter.step("🗜️", f"Compressing to {output_file}...")
    try:
        size = compress_directory(dist_dir, output_path)
    except OSError as e:
        reporter.error(f"Failed to create {output_file}: {e}")
        return CommandResult.failure(
            "COMPRESSION_FAILED", "Compression failed", exit_code=ExitCode.GENERAL_ERROR
        )
    reporter.success(f"Created {output_file} ({format_size(size)})")

    if options.clean:
        try:
            shutil.rmtree(dist_dir)
            reporter.debug(f"Cleaned up {build_config.out_dir} folder")
        except OSError as e:
            reporter.warn(f"Could not remove {build_config.out_dir} folder: {e}")

    duration = int((time.monotonic() - start) * 1000)
    reporter.newline()
    reporter.success(f"Build complete in {duration / 1000:.1f}s")

    return CommandResult.ok(
        outputFile=output_file,
        outputPath=str(output_path),
        size=size,
        manifest=manifest,
        duration=duration,
    )
