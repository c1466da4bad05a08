"""Shared run loop for both CLIs: parse, validate, dispatch, report.

One call to ``run_tool`` is one run. It builds the run's ``Reporter``,
invokes at most one handler, writes at most one JSON document, and returns
the process exit code. Nothing here raises for user input.
"""

import logging
import traceback
from collections.abc import Sequence
from typing import IO

import click

from quapp import __version__
from quapp.arg_parser import ParsedArgs, parse_args, validate_scoping
from quapp.commands import run_build, run_init, run_serve
from quapp.constants import ExitCode
from quapp.grammar import CREATE_GRAMMAR, DEV_GRAMMAR, Grammar
from quapp.help_text import CREATE_HELP, DEV_HELP, plain
from quapp.options import build_dev_options, build_scaffold_options
from quapp.output import OutputSettings, Reporter, configure_logging
from quapp.result import CommandResult, invalid_args_result, resolve_exit_code
from quapp.scaffold.scaffold import run_scaffold

logger = logging.getLogger(__name__)

DEV_TOOL = "quapp"
CREATE_TOOL = "create-quapp"

_GRAMMARS: dict[str, Grammar] = {DEV_TOOL: DEV_GRAMMAR, CREATE_TOOL: CREATE_GRAMMAR}
_HELP: dict[str, str] = {DEV_TOOL: DEV_HELP, CREATE_TOOL: CREATE_HELP}


def _dispatch_dev(parsed: ParsedArgs, reporter: Reporter) -> CommandResult:
    options = build_dev_options(parsed)
    logger.debug(f"Running {options.command} with {options.to_dict()}")
    if options.command == "serve":
        return run_serve(options, reporter)
    if options.command == "build":
        return run_build(options, reporter)
    return run_init(options, reporter)


def _dispatch_create(parsed: ParsedArgs, reporter: Reporter) -> CommandResult:
    options = build_scaffold_options(parsed)
    logger.debug(f"Scaffolding with {options.to_dict()}")
    return run_scaffold(options, reporter)


def _show_help(tool: str, reporter: Reporter) -> int:
    if reporter.json_mode:
        reporter.emit({"success": True, "help": plain(_HELP[tool])})
    else:
        reporter.render_markup(_HELP[tool])
    return ExitCode.SUCCESS


def _show_version(reporter: Reporter) -> int:
    if reporter.json_mode:
        reporter.emit({"success": True, "version": __version__})
    else:
        reporter.console.print(__version__, markup=False, highlight=False)
    return ExitCode.SUCCESS


def run_tool(
    tool: str,
    tokens: Sequence[str],
    stdout: IO[str] | None = None,
    stderr: IO[str] | None = None,
) -> int:
    """Run one invocation of ``tool`` and return its exit code.

    Args:
        tool: "quapp" or "create-quapp"
        tokens: Command-line tokens, program name excluded
        stdout: Stream for results (defaults to sys.stdout)
        stderr: Stream for errors (defaults to sys.stderr)
    """
    grammar = _GRAMMARS[tool]
    parsed = parse_args(grammar, tokens)
    validate_scoping(grammar, parsed)

    reporter = Reporter(OutputSettings.from_parsed(parsed), stdout=stdout, stderr=stderr)
    configure_logging(reporter)

    if not parsed.ok:
        for error in parsed.errors:
            reporter.error(error)
        reporter.emit(invalid_args_result(parsed.errors, grammar.help_hint(parsed.command)).to_dict())
        return resolve_exit_code(None, parsed.errors)

    if parsed.get("help"):
        return _show_help(tool, reporter)
    if parsed.get("version"):
        return _show_version(reporter)
    if grammar.commands and parsed.command is None:
        return _show_help(tool, reporter)

    dispatch = _dispatch_dev if tool == DEV_TOOL else _dispatch_create
    try:
        result = dispatch(parsed, reporter)
    except (KeyboardInterrupt, click.Abort):
        reporter.newline()
        reporter.warn("Cancelled")
        result = CommandResult.cancelled_run()
    except Exception as e:
        reporter.error(f"Unexpected error: {e}")
        stack = traceback.format_exc()
        reporter.debug(stack.rstrip())
        payload = {"stack": stack} if reporter.verbose else {}
        result = CommandResult.failure(
            "UNEXPECTED_ERROR", str(e), exit_code=ExitCode.GENERAL_ERROR, **payload
        )

    reporter.emit(result.to_dict())
    return resolve_exit_code(result)
