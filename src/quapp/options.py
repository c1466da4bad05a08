"""Effective options handed to command handlers.

Built once per run from ``ParsedArgs`` plus tool defaults and the
environment. Handlers receive these frozen views and never see raw tokens.
"""

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from quapp.arg_parser import ParsedArgs
from quapp.constants import SCAFFOLD_DEFAULTS
from quapp.scaffold.package_manager import detect_from_user_agent


@dataclass(frozen=True)
class DevOptions:
    """Options for one ``quapp`` run.

    Flags that fall back to ``quapp.config.json`` (port, host, open,
    https) stay None/False here and are merged by the serve handler.
    """

    command: str | None = None
    json: bool = False
    verbose: bool = False
    no_color: bool = False
    # serve
    port: int | None = None
    host: str | None = None
    qr: bool | None = None
    open: bool = False
    https: bool = False
    extra: tuple[str, ...] = ()
    # build
    output: str | None = None
    clean: bool = True
    skip_prompts: bool = False
    # init
    yes: bool = False
    force: bool = False
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScaffoldOptions:
    """Options for one ``create-quapp`` run.

    ``git`` and ``install`` are tri-state: None means "ask" in interactive
    mode and "no" otherwise.
    """

    name: str | None = None
    template: str | None = None
    author: str | None = None
    description: str | None = None
    force: bool = False
    git: bool | None = None
    install: bool | None = None
    dry_run: bool = False
    package_manager: str | None = None
    json: bool = False
    verbose: bool = False
    no_color: bool = False
    interactive: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_dev_options(parsed: ParsedArgs) -> DevOptions:
    """Merge parsed ``quapp`` flags with tool defaults."""
    return DevOptions(
        command=parsed.command,
        json=bool(parsed.get("json", False)),
        verbose=bool(parsed.get("verbose", False)),
        no_color=bool(parsed.get("no_color", False)),
        port=parsed.get("port"),
        host=parsed.get("host"),
        qr=parsed.get("qr"),
        open=bool(parsed.get("open", False)),
        https=bool(parsed.get("https", False)),
        extra=tuple(parsed.extra),
        output=parsed.get("output"),
        clean=bool(parsed.get("clean", True)),
        skip_prompts=bool(parsed.get("skip_prompts", False)),
        yes=bool(parsed.get("yes", False)),
        force=bool(parsed.get("force", False)),
        dry_run=bool(parsed.get("dry_run", False)),
    )


def build_scaffold_options(
    parsed: ParsedArgs, environ: Mapping[str, str] | None = None
) -> ScaffoldOptions:
    """Merge parsed ``create-quapp`` flags with scaffold defaults.

    With ``--yes`` the default template is applied and unanswered git/install
    questions become "no". Automation mode (``--json``) never prompts.
    The package manager falls back to the one that invoked us
    (``npm_config_user_agent``).
    """
    environ = os.environ if environ is None else environ
    yes = bool(parsed.get("yes", False))
    json_mode = bool(parsed.get("json", False))

    package_manager = parsed.get("package_manager") or detect_from_user_agent(
        environ.get("npm_config_user_agent")
    )
    template = parsed.get("template")
    git = parsed.get("git")
    install = parsed.get("install")
    if yes:
        template = template or SCAFFOLD_DEFAULTS["template"]
        if git is None:
            git = SCAFFOLD_DEFAULTS["git"]
        if install is None:
            install = SCAFFOLD_DEFAULTS["install"]

    return ScaffoldOptions(
        name=parsed.positionals[0] if parsed.positionals else None,
        template=template,
        author=parsed.get("author"),
        description=parsed.get("description"),
        force=bool(parsed.get("force", SCAFFOLD_DEFAULTS["force"])),
        git=git,
        install=install,
        dry_run=bool(parsed.get("dry_run", False)),
        package_manager=package_manager,
        json=json_mode,
        verbose=bool(parsed.get("verbose", False)),
        no_color=bool(parsed.get("no_color", False)),
        interactive=not yes and not json_mode,
    )

