"""Interactive questions for create-quapp.

Only values the user did not supply on the command line are asked for.
Cancelling any prompt raises ``click.Abort``; the run loop reports it as a
cancelled run.
"""

from dataclasses import dataclass

from quapp.constants import FRAMEWORKS, TEMPLATES
from quapp.modules.interaction_handler import InteractionHandler
from quapp.scaffold.git import is_git_available
from quapp.scaffold.templates import validate_project_name


@dataclass
class PromptAnswers:
    name: str
    template: str
    git: bool
    install: bool
    framework: str | None = None


def format_template_name(template: str) -> str:
    """Variant label shown in the template menu.

    Example:
        >>> format_template_name("react-ts+swc")
        'TypeScript + SWC'
    """
    parts = []
    if "-ts" in template:
        parts.append("TypeScript")
    elif "-js" in template or ("ts" not in template and "js" not in template):
        parts.append("JavaScript")
    if "+swc" in template:
        parts.append("SWC")
    return " + ".join(parts) if parts else template


def ask_project_name(interaction: InteractionHandler) -> str:
    return interaction.prompt_text("Project name:", validate=validate_project_name).strip()


def ask_framework(interaction: InteractionHandler) -> str:
    index = interaction.prompt_choice("Select a framework:", FRAMEWORKS)
    return FRAMEWORKS[index][0]


def ask_template(interaction: InteractionHandler, framework: str) -> str:
    variants = TEMPLATES[framework]
    if len(variants) == 1:
        return variants[0]
    choices = [(t, format_template_name(t)) for t in variants]
    return variants[interaction.prompt_choice("Select a variant:", choices)]


def ask_git_init(interaction: InteractionHandler) -> bool:
    if not is_git_available():
        return False
    return interaction.confirm("Initialize a git repository?", default=False)


def ask_install_deps(interaction: InteractionHandler, package_manager: str = "npm") -> bool:
    return interaction.confirm(f"Install dependencies with {package_manager}?", default=True)


def run_all_prompts(
    interaction: InteractionHandler,
    name: str | None = None,
    template: str | None = None,
    git: bool | None = None,
    install: bool | None = None,
    package_manager: str = "npm",
) -> PromptAnswers:
    """Ask for every value that is still None."""
    framework = None
    if not name:
        name = ask_project_name(interaction)
    if not template:
        framework = ask_framework(interaction)
        template = ask_template(interaction, framework)
    if git is None:
        git = ask_git_init(interaction)
    if install is None:
        install = ask_install_deps(interaction, package_manager)
    return PromptAnswers(
        name=name, template=template, git=git, install=install, framework=framework
    )
