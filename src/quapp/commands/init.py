"""quapp init: add Quapp to an existing Vite project."""

import logging
from pathlib import Path
from typing import Any

from quapp import __version__
from quapp.config_manager import ConfigError, ConfigManager, PackageJsonError, QuappConfig
from quapp.constants import CONFIG_FILENAME, ExitCode
from quapp.modules.interaction_handler import CLIInteractionHandler, InteractionHandler
from quapp.options import DevOptions
from quapp.output import Reporter
from quapp.result import CommandResult

logger = logging.getLogger(__name__)

QUAPP_SCRIPTS = {
    "dev": "quapp serve",
    "qbuild": "quapp build",
}


def _has_quapp_dependency(pkg: dict[str, Any]) -> bool:
    for section in ("devDependencies", "dependencies"):
        deps = pkg.get(section)
        if isinstance(deps, dict) and "quapp" in deps:
            return True
    return False


def _has_quapp_scripts(pkg: dict[str, Any]) -> bool:
    scripts = pkg.get("scripts")
    if not isinstance(scripts, dict):
        return False
    return any("quapp" in str(scripts.get(name, "")) for name in QUAPP_SCRIPTS)


def _next_steps(dependency_added: bool) -> list[str]:
    steps = ["npm run dev", "npm run qbuild"]
    return ["npm install", *steps] if dependency_added else steps


def run_init(
    options: DevOptions,
    reporter: Reporter,
    cwd: Path | None = None,
    interaction: InteractionHandler | None = None,
) -> CommandResult:
    cwd = cwd or Path.cwd()
    interaction = interaction or CLIInteractionHandler(color=reporter.settings.color)

    try:
        pkg = ConfigManager.load_package_json(cwd)
    except PackageJsonError as e:
        if e.code == "NO_PACKAGE_JSON":
            reporter.error("No package.json found in current directory")
            reporter.info(
                "Run this command in an existing project or use "
                '"npm create quapp" to create a new project'
            )
            return CommandResult.failure(
                "NO_PACKAGE_JSON",
                "No package.json found",
                suggestion='Run "npm init" first or use "npm create quapp" for a new project',
                exit_code=ExitCode.CONFIG_ERROR,
            )
        reporter.error("Failed to read package.json")
        return CommandResult.failure(
            "INVALID_PACKAGE_JSON",
            "Failed to parse package.json",
            suggestion="Fix the JSON syntax in package.json",
            exit_code=ExitCode.CONFIG_ERROR,
        )

    has_config = ConfigManager.config_path(cwd).exists()
    has_dependency = _has_quapp_dependency(pkg)
    has_scripts = _has_quapp_scripts(pkg)

    if has_config and has_dependency and has_scripts and not options.force:
        reporter.info("This project is already initialized with Quapp")
        return CommandResult.ok(alreadyInitialized=True, message="Project already initialized")

    if options.dry_run:
        would_change = {
            "createConfig": not has_config,
            "addScripts": not has_scripts,
            "addDependency": not has_dependency,
        }
        reporter.info("Dry run - no changes made")
        if would_change["createConfig"]:
            reporter.info(f"Would create: {CONFIG_FILENAME}")
        if would_change["addScripts"]:
            reporter.info(f"Would add scripts: {', '.join(QUAPP_SCRIPTS)}")
        if would_change["addDependency"]:
            reporter.info("Would add devDependency: quapp")
        return CommandResult.ok(dryRun=True, wouldChange=would_change)

    if not options.yes:
        if reporter.json_mode:
            return CommandResult.failure(
                "CONFIRMATION_REQUIRED",
                "Confirmation required in JSON mode",
                suggestion='Re-run with "--yes" to skip the confirmation prompt',
                exit_code=ExitCode.INVALID_ARGS,
            )
        if not interaction.confirm("Initialize Quapp in this project?", default=True):
            reporter.warn("Init cancelled")
            return CommandResult.cancelled_run()

    changes: list[str] = []

    if not has_config or options.force:
        try:
            ConfigManager.save_config(cwd, QuappConfig())
        except ConfigError as e:
            reporter.error(str(e))
            return CommandResult.failure(
                "CONFIG_ERROR", "Failed to create config file", exit_code=ExitCode.GENERAL_ERROR
            )
        reporter.success(f"Created {CONFIG_FILENAME}")
        changes.append(CONFIG_FILENAME)

    scripts = pkg.get("scripts")
    if not isinstance(scripts, dict):
        scripts = pkg["scripts"] = {}
    scripts_added = []
    for name, command in QUAPP_SCRIPTS.items():
        if not scripts.get(name) or options.force:
            scripts[name] = command
            scripts_added.append(name)

    dependency_added = False
    if not has_dependency or options.force:
        dev_deps = pkg.get("devDependencies")
        if not isinstance(dev_deps, dict):
            dev_deps = pkg["devDependencies"] = {}
        dev_deps["quapp"] = f"^{__version__}"
        dependency_added = True

    if scripts_added or dependency_added:
        try:
            ConfigManager.save_package_json(cwd, pkg)
        except PackageJsonError as e:
            reporter.error(str(e))
            return CommandResult.failure(
                "PACKAGE_JSON_ERROR",
                "Failed to update package.json",
                exit_code=ExitCode.GENERAL_ERROR,
            )
        if scripts_added:
            reporter.success(f"Added scripts: {', '.join(scripts_added)}")
            changes.extend(f"script:{name}" for name in scripts_added)
        if dependency_added:
            reporter.success("Added quapp to devDependencies")
            changes.append("devDependency:quapp")

    next_steps = _next_steps(dependency_added)
    reporter.newline()
    reporter.success("Quapp initialized successfully!")
    reporter.next_steps([f'{i}. Run "{step}"' for i, step in enumerate(next_steps, 1)])

    return CommandResult.ok(changes=changes, nextSteps=next_steps)
