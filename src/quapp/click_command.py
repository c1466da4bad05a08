"""Click command that hands raw tokens to the quapp grammar parser.

Click would consume ``--``, reject unknown flags with its own message and
exit code, and add its own ``--help``. Both CLIs define their grammar in
``quapp.grammar`` instead, so this command skips click's option parsing and
passes the untouched token list to ``quapp.runner.run_tool``.
"""

from typing import Any

import click

from quapp.runner import run_tool


class RawArgsCommand(click.Command):
    """Click command whose arguments are parsed by a quapp grammar."""

    def __init__(self, name: str, tool: str, **kwargs: Any):
        kwargs.setdefault("add_help_option", False)
        kwargs.setdefault(
            "context_settings", {"ignore_unknown_options": True, "allow_extra_args": True}
        )
        super().__init__(name, **kwargs)
        self.tool = tool

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        """Keep every token, including ``--``, for the grammar parser."""
        ctx.args = list(args)
        return ctx.args

    def invoke(self, ctx: click.Context) -> Any:
        exit_code = run_tool(self.tool, ctx.args)
        # ctx.exit keeps CliRunner and standalone mode in agreement
        ctx.exit(int(exit_code))
