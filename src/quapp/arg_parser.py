"""Grammar-driven argument parser shared by quapp and create-quapp.

``parse_args`` is a total function: every user-input problem becomes an
entry in ``ParsedArgs.errors`` and the parse always runs to the end of the
token list. ``validate_scoping`` then rejects flags that belong to a
different command than the one selected.

Example:
    >>> from quapp.grammar import DEV_GRAMMAR
    >>> parsed = parse_args(DEV_GRAMMAR, ["serve", "--port", "3000"])
    >>> validate_scoping(DEV_GRAMMAR, parsed)
    >>> parsed.command, parsed.get("port"), parsed.errors
    ('serve', 3000, [])
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from quapp.grammar import (
    FLAG_PREFIX,
    PASSTHROUGH_SEPARATOR,
    ArgumentValueError,
    Arity,
    FlagDescriptor,
    Grammar,
    looks_numeric,
)


class _Unset:
    """Sentinel for flags that never appeared on the command line."""

    _instance = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass
class ParsedArgs:
    """Accumulator produced by one parse pass.

    ``values`` holds one entry per canonical flag name, ``UNSET`` until a
    token writes it. Repeated flags overwrite (last write wins).
    """

    command: str | None = None
    values: dict[str, Any] = field(default_factory=dict)
    positionals: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    sources: dict[str, FlagDescriptor] = field(default_factory=dict)
    passthrough: bool = False

    def is_set(self, name: str) -> bool:
        return self.values.get(name, UNSET) is not UNSET

    def get(self, name: str, default: Any = None) -> Any:
        value = self.values.get(name, UNSET)
        return default if value is UNSET else value

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def ok(self) -> bool:
        return not self.errors


def parse_args(grammar: Grammar, tokens: Sequence[str]) -> ParsedArgs:
    """Parse ``tokens`` against ``grammar``.

    Args:
        grammar: Tool grammar (DEV_GRAMMAR or CREATE_GRAMMAR)
        tokens: Raw command-line tokens, program name excluded

    Returns:
        ParsedArgs with errors recorded, never raises for user input
    """
    parsed = ParsedArgs(values={name: UNSET for name in grammar.canonical_names})
    tokens = list(tokens)
    i = 0

    while i < len(tokens):
        token = tokens[i]

        if parsed.command is None and grammar.is_command(token):
            parsed.command = token
            i += 1
            continue

        if token == PASSTHROUGH_SEPARATOR and grammar.passthrough_commands:
            parsed.passthrough = True
            parsed.extra = tokens[i + 1 :]
            break

        descriptor = grammar.lookup(token)
        if descriptor is not None:
            i += _consume_flag(descriptor, tokens, i, parsed)
            continue

        if token.startswith(FLAG_PREFIX):
            parsed.add_error(
                f'Unknown flag: "{token}". '
                f'Run "{grammar.help_hint(parsed.command)}" for available options'
            )
            i += 1
            continue

        _consume_bare_token(grammar, token, parsed)
        i += 1

    return parsed


def _consume_flag(
    descriptor: FlagDescriptor, tokens: list[str], i: int, parsed: ParsedArgs
) -> int:
    """Apply one flag occurrence; return the number of tokens consumed."""
    if descriptor.arity is Arity.BOOLEAN:
        _assign(parsed, descriptor, descriptor.value)
        return 1

    value = tokens[i + 1] if i + 1 < len(tokens) else None
    if not _usable_value(descriptor, value):
        message = f'Flag "{descriptor.display}" requires a value'
        if descriptor.value_hint:
            message = f"{message} {descriptor.value_hint}"
        parsed.add_error(message)
        return 1

    if descriptor.coerce is not None:
        try:
            coerced = descriptor.coerce(value)
        except ArgumentValueError as e:
            parsed.add_error(str(e))
            return 2
        _assign(parsed, descriptor, coerced)
    else:
        _assign(parsed, descriptor, value)
    return 2


def _usable_value(descriptor: FlagDescriptor, value: str | None) -> bool:
    if not value:
        return False
    if value.startswith(FLAG_PREFIX):
        return descriptor.numeric and looks_numeric(value)
    return True


def _assign(parsed: ParsedArgs, descriptor: FlagDescriptor, value: Any) -> None:
    parsed.values[descriptor.name] = value
    parsed.sources[descriptor.name] = descriptor


def _consume_bare_token(grammar: Grammar, token: str, parsed: ParsedArgs) -> None:
    if grammar.commands and parsed.command is None:
        parsed.add_error(
            f'Unknown command: "{token}". Run "{grammar.help_hint()}" for available commands'
        )
        return

    limit = grammar.max_positionals
    if limit is None or len(parsed.positionals) < limit:
        parsed.positionals.append(token)
        return

    parsed.add_error(
        f'Unexpected argument: "{token}". Run "{grammar.help_hint(parsed.command)}" for usage'
    )


def validate_scoping(grammar: Grammar, parsed: ParsedArgs) -> None:
    """Append an error for every set flag that does not apply to the selected command.

    Scoping is only meaningful once a command is known; with no command
    selected nothing is appended. Safe to call more than once.
    """
    if parsed.command is None:
        return

    for name, descriptor in parsed.sources.items():
        if not parsed.is_set(name) or descriptor.valid_for(parsed.command):
            continue
        owners = " or ".join(f'"{c}"' for c in sorted(descriptor.commands or ()))
        _add_once(parsed, f'Flag "{descriptor.display}" is only valid for {owners} command')

    if parsed.passthrough and parsed.command not in grammar.passthrough_commands:
        owners = " or ".join(f'"{c}"' for c in sorted(grammar.passthrough_commands))
        _add_once(parsed, f'Arguments after "--" are only valid for {owners} command')


def _add_once(parsed: ParsedArgs, message: str) -> None:
    if message not in parsed.errors:
        parsed.add_error(message)
