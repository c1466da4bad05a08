"""create-quapp: scaffold a new project from a template.

Flow:
    1. Resolve the package manager
    2. Ask for missing values (interactive mode only)
    3. Validate name and template, check the target directory
    4. Stop after a preview with --dry-run
    5. Fetch the template and personalise package.json
    6. Optionally run ``git init`` and install dependencies
"""

import logging
import os
import time
from pathlib import Path

from quapp.config_manager import ConfigManager, PackageJsonError
from quapp.constants import ALL_TEMPLATES, ExitCode
from quapp.modules.interaction_handler import CLIInteractionHandler, InteractionHandler
from quapp.modules.subprocess_helper import safe_run
from quapp.options import ScaffoldOptions
from quapp.output import Reporter
from quapp.result import CommandResult
from quapp.scaffold.git import GitError, init_repository
from quapp.scaffold.package_manager import PackageManager, detect_package_manager
from quapp.scaffold.prompts import run_all_prompts
from quapp.scaffold.templates import (
    TemplateError,
    clone_template,
    framework_for_template,
    validate_project_name,
    validate_template,
)

logger = logging.getLogger(__name__)

_TEMPLATE_EXIT_CODES = {
    "NETWORK_ERROR": ExitCode.NETWORK_ERROR,
    "TEMPLATE_NOT_FOUND": ExitCode.TEMPLATE_NOT_FOUND,
    "INVALID_TEMPLATE": ExitCode.TEMPLATE_NOT_FOUND,
}


def _next_steps(relative_dir: str, pm: PackageManager, installed: bool) -> list[str]:
    steps = [f"cd {relative_dir}"]
    if not installed:
        steps.append(pm.display_install())
    steps.append(pm.display_run("dev"))
    return steps


def _relative_dir(project_dir: Path, cwd: Path, name: str) -> str:
    try:
        return os.path.relpath(project_dir, cwd)
    except ValueError:
        return name


def run_scaffold(
    options: ScaffoldOptions,
    reporter: Reporter,
    cwd: Path | None = None,
    interaction: InteractionHandler | None = None,
) -> CommandResult:
    cwd = cwd or Path.cwd()
    interaction = interaction or CLIInteractionHandler(color=reporter.settings.color)
    start = time.monotonic()

    pm = detect_package_manager(options.package_manager)
    reporter.debug(f"Using package manager: {pm.name}")

    name = options.name
    template = options.template
    git = options.git
    install = options.install

    if options.interactive and (not name or not template):
        reporter.banner("Welcome to Quapp!")
        answers = run_all_prompts(
            interaction,
            name=name,
            template=template,
            git=git,
            install=install,
            package_manager=pm.name,
        )
        name, template, git, install = answers.name, answers.template, answers.git, answers.install

    if not name:
        reporter.error("Project name is required")
        reporter.info("Usage: npm create quapp <project-name> [options]")
        return CommandResult.failure(
            "MISSING_NAME",
            "Project name is required",
            suggestion="Add project name: create-quapp my-app",
            exit_code=ExitCode.INVALID_ARGS,
        )

    if not template:
        reporter.error("Template is required")
        reporter.info("Use --template <name> or run in interactive mode")
        return CommandResult.failure(
            "MISSING_TEMPLATE",
            "Template is required",
            suggestion="Add template: --template react-ts",
            exit_code=ExitCode.INVALID_ARGS,
            availableTemplates=list(ALL_TEMPLATES),
        )

    name_error = validate_project_name(name)
    if name_error:
        reporter.error(name_error)
        return CommandResult.failure(
            "INVALID_NAME",
            name_error,
            suggestion="Use only letters, numbers, hyphens, and underscores",
            exit_code=ExitCode.INVALID_ARGS,
        )
    name = name.strip()

    try:
        validate_template(template)
    except TemplateError as e:
        reporter.error(str(e))
        if e.hint:
            reporter.info(e.hint)
        return CommandResult.failure(
            "INVALID_TEMPLATE",
            str(e),
            suggestion=e.hint,
            exit_code=ExitCode.TEMPLATE_NOT_FOUND,
        )

    project_dir = (cwd / name).resolve()
    relative_dir = _relative_dir(project_dir, cwd.resolve(), name)
    framework = framework_for_template(template)
    reporter.debug(f"Target directory: {project_dir}")

    dir_exists = project_dir.exists()
    dir_empty = not dir_exists or not any(project_dir.iterdir())
    if not dir_empty and not options.force:
        reporter.error(f'Directory "{name}" already exists and is not empty')
        reporter.info("Use --force to overwrite")
        return CommandResult.failure(
            "DIR_NOT_EMPTY",
            "Directory not empty",
            suggestion="Use --force to overwrite or choose a different name",
            exit_code=ExitCode.GENERAL_ERROR,
        )

    if options.dry_run:
        reporter.info("Dry run - no changes made")
        reporter.info(f"Would create: {name} ({template})")
        reporter.info(f"Location: {project_dir}")
        if options.author:
            reporter.info(f"Author: {options.author}")
        if git is True:
            reporter.info("Would initialize git")
        if install is True:
            reporter.info(f"Would install with {pm.name}")
        return CommandResult.ok(
            dryRun=True,
            wouldCreate={
                "projectName": name,
                "projectPath": str(project_dir),
                "template": template,
                "framework": framework,
                "packageManager": pm.name,
                "author": options.author,
                "description": options.description,
                "gitInit": git is True,
                "installDeps": install is True,
                "overwrite": not dir_empty,
            },
            nextSteps=_next_steps(relative_dir, pm, installed=install is True),
        )

    if not dir_empty:
        reporter.warn(f"Overwriting existing directory: {name}")

    reporter.info(f"Creating project in {relative_dir}...")
    reporter.debug(f"Fetching template: {template}")
    try:
        clone_template(template, project_dir)
    except TemplateError as e:
        reporter.error(str(e))
        if e.hint:
            reporter.info(e.hint)
        return CommandResult.failure(
            e.code,
            str(e),
            suggestion=e.hint,
            exit_code=_TEMPLATE_EXIT_CODES.get(e.code, ExitCode.GENERAL_ERROR),
        )
    reporter.success("Template cloned")

    updates = {"name": name}
    if options.author:
        updates["author"] = options.author
    if options.description:
        updates["description"] = options.description
    try:
        ConfigManager.update_package_json(project_dir, updates)
    except PackageJsonError as e:
        message = (
            "package.json not found in template" if e.code == "NO_PACKAGE_JSON" else str(e)
        )
        reporter.error(message)
        return CommandResult.failure(
            "PACKAGE_JSON_ERROR", message, exit_code=ExitCode.GENERAL_ERROR
        )
    reporter.success("Updated package.json")

    git_initialized = False
    if git is True:
        try:
            init_repository(project_dir)
        except (GitError, OSError) as e:
            reporter.warn(f"Git initialization failed: {e}")
            hint = getattr(e, "hint", None)
            if hint:
                reporter.info(hint)
        else:
            reporter.success("Initialized git repository")
            git_initialized = True
    elif git is False:
        reporter.debug("Skipping git initialization (--no-git)")

    dependencies_installed = False
    if install is True:
        reporter.info(f"Installing dependencies with {pm.name}...")
        proc = safe_run(pm.install_command(), cwd=project_dir, capture=reporter.json_mode)
        if proc.ok:
            reporter.success("Dependencies installed")
            dependencies_installed = True
        else:
            if proc.stderr:
                reporter.debug(proc.stderr.rstrip())
            reporter.warn("Failed to install dependencies")
            reporter.info(f'Run "{pm.display_install()}" manually in the project directory')
    elif install is False:
        reporter.debug("Skipping dependency installation (--no-install)")

    steps = _next_steps(relative_dir, pm, installed=dependencies_installed)
    reporter.next_steps(steps)

    return CommandResult.ok(
        projectName=name,
        projectPath=str(project_dir),
        template=template,
        framework=framework,
        author=options.author,
        description=options.description,
        packageManager=pm.name,
        gitInitialized=git_initialized,
        dependenciesInstalled=dependencies_installed,
        nextSteps=steps,
        duration=int((time.monotonic() - start) * 1000),
    )
