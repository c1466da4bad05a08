"""Flag grammar tables for the quapp and create-quapp CLIs.

Both tools share one parsing algorithm (see ``quapp.arg_parser``). The only
thing that differs between them is the grammar defined here: the program
name, the recognised command names, every flag descriptor, and the
positional policy.

A descriptor names the canonical field it writes. Paired flags such as
``--git`` / ``--no-git`` are two descriptors writing ``True`` and ``False``
into the same canonical field, so the last one on the command line wins.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from quapp.constants import (
    ALL_TEMPLATES,
    DEV_COMMANDS,
    MAX_PORT,
    MIN_PORT,
    PACKAGE_MANAGERS,
)

FLAG_PREFIX = "-"
PASSTHROUGH_SEPARATOR = "--"

_NUMBER_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")


class Arity(Enum):
    """How many tokens a flag consumes."""

    BOOLEAN = "boolean"
    VALUED = "valued"


class ArgumentValueError(ValueError):
    """Raised by a coercer when a flag value is malformed or out of range."""

    pass


@dataclass(frozen=True)
class FlagDescriptor:
    """Static description of one recognised flag.

    Attributes:
        name: Canonical field name written into the parsed result
        aliases: Tokens selecting this flag, long form first
        arity: BOOLEAN (presence writes ``value``) or VALUED (consumes next token)
        commands: Commands the flag is valid for, None for global flags
        value: Value written on presence for boolean flags
        numeric: Value may start with the flag prefix when it is a number
        coerce: Optional converter raising ArgumentValueError
        value_hint: Appended to the "requires a value" message
    """

    name: str
    aliases: tuple[str, ...]
    arity: Arity = Arity.BOOLEAN
    commands: frozenset[str] | None = None
    value: Any = True
    numeric: bool = False
    coerce: Callable[[str], Any] | None = None
    value_hint: str | None = None

    @property
    def display(self) -> str:
        """Long form used in diagnostics."""
        return self.aliases[0]

    @property
    def is_global(self) -> bool:
        return self.commands is None

    def valid_for(self, command: str | None) -> bool:
        return self.commands is None or command in self.commands


@dataclass(frozen=True)
class Grammar:
    """Complete flag/command grammar for one tool.

    Attributes:
        program: Program name used in help hints
        commands: Recognised command names (empty for command-less tools)
        flags: All flag descriptors
        max_positionals: Bare tokens accepted after the command, None for unlimited
        passthrough_commands: Commands that accept ``-- <args>`` forwarding
    """

    program: str
    commands: tuple[str, ...]
    flags: tuple[FlagDescriptor, ...]
    max_positionals: int | None = 0
    passthrough_commands: frozenset[str] = frozenset()
    _index: dict[str, FlagDescriptor] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, FlagDescriptor] = {}
        for descriptor in self.flags:
            for alias in descriptor.aliases:
                if alias in index:
                    raise ValueError(f"Duplicate flag alias in {self.program} grammar: {alias}")
                index[alias] = descriptor
        object.__setattr__(self, "_index", index)

    def lookup(self, token: str) -> FlagDescriptor | None:
        """Return the descriptor selected by ``token``, or None if unrecognised."""
        return self._index.get(token)

    def is_command(self, token: str) -> bool:
        return token in self.commands

    @property
    def canonical_names(self) -> list[str]:
        """Canonical field names in declaration order, without duplicates."""
        names: list[str] = []
        for descriptor in self.flags:
            if descriptor.name not in names:
                names.append(descriptor.name)
        return names

    def help_hint(self, command: str | None = None) -> str:
        if command:
            return f"{self.program} {command} --help"
        return f"{self.program} --help"


def looks_numeric(token: str) -> bool:
    return bool(_NUMBER_PATTERN.match(token))


def parse_port(value: str) -> int:
    """Coerce a port value, rejecting non-integers and out-of-range numbers."""
    try:
        port = int(value, 10)
    except ValueError:
        port = None
    if port is None or not MIN_PORT <= port <= MAX_PORT:
        raise ArgumentValueError(f'Invalid port: "{value}". Must be {MIN_PORT}-{MAX_PORT}')
    return port


def parse_template(value: str) -> str:
    if value not in ALL_TEMPLATES:
        raise ArgumentValueError(
            f'Invalid template: "{value}". Available: {", ".join(ALL_TEMPLATES)}'
        )
    return value


def parse_package_manager(value: str) -> str:
    if value not in PACKAGE_MANAGERS:
        raise ArgumentValueError(
            f'Invalid package manager: "{value}". Use: npm, yarn, pnpm, or bun'
        )
    return value


def _global_flags() -> tuple[FlagDescriptor, ...]:
    return (
        FlagDescriptor("help", ("--help", "-h")),
        FlagDescriptor("version", ("--version", "-v")),
        FlagDescriptor("json", ("--json",)),
        FlagDescriptor("verbose", ("--verbose",)),
        FlagDescriptor("no_color", ("--no-color",)),
    )


_SERVE = frozenset({"serve"})
_BUILD = frozenset({"build"})
_INIT = frozenset({"init"})

DEV_GRAMMAR = Grammar(
    program="quapp",
    commands=DEV_COMMANDS,
    flags=(
        *_global_flags(),
        FlagDescriptor(
            "port",
            ("--port", "-p"),
            Arity.VALUED,
            _SERVE,
            numeric=True,
            coerce=parse_port,
        ),
        FlagDescriptor("host", ("--host",), Arity.VALUED, _SERVE),
        FlagDescriptor("qr", ("--no-qr",), commands=_SERVE, value=False),
        FlagDescriptor("open", ("--open",), commands=_SERVE),
        FlagDescriptor("https", ("--https",), commands=_SERVE),
        FlagDescriptor("output", ("--output", "-o"), Arity.VALUED, _BUILD),
        FlagDescriptor("clean", ("--no-clean",), commands=_BUILD, value=False),
        FlagDescriptor("skip_prompts", ("--skip-prompts",), commands=_BUILD),
        FlagDescriptor("yes", ("--yes", "-y"), commands=_INIT),
        FlagDescriptor("force", ("--force", "-f"), commands=_INIT),
        FlagDescriptor("dry_run", ("--dry-run",), commands=_INIT),
    ),
    max_positionals=0,
    passthrough_commands=_SERVE,
)

CREATE_GRAMMAR = Grammar(
    program="create-quapp",
    commands=(),
    flags=(
        *_global_flags(),
        FlagDescriptor("template", ("--template", "-t"), Arity.VALUED, coerce=parse_template),
        FlagDescriptor("author", ("--author", "-a"), Arity.VALUED),
        FlagDescriptor("description", ("--description", "-d"), Arity.VALUED),
        FlagDescriptor("force", ("--force", "-f")),
        FlagDescriptor("git", ("--git", "-g")),
        FlagDescriptor("git", ("--no-git",), value=False),
        FlagDescriptor("install", ("--install", "-i")),
        FlagDescriptor("install", ("--no-install",), value=False),
        FlagDescriptor("yes", ("--yes", "-y")),
        FlagDescriptor("dry_run", ("--dry-run",)),
        FlagDescriptor(
            "package_manager",
            ("--pm",),
            Arity.VALUED,
            coerce=parse_package_manager,
            value_hint="(npm, yarn, pnpm, bun)",
        ),
    ),
    max_positionals=1,
)
