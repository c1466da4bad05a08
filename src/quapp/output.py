"""Per-run output context: human-readable lines or one JSON document.

A ``Reporter`` is created once per run from ``OutputSettings`` and passed
explicitly to every handler. In human mode it prints progress lines with
rich; in JSON mode it buffers them and ``emit`` writes the single result
document on stdout.

Output rules:
- JSON mode: stdout carries exactly one JSON document, nothing else
- Buffered entries are attached as ``logs`` only in verbose mode
- Human mode never writes JSON
- Errors go to stderr with a visual marker
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import IO, Any

from rich.console import Console

from quapp.arg_parser import ParsedArgs

ROOT_LOGGER = "quapp"


class OutputError(Exception):
    """Raised when the single-document contract would be broken."""

    pass


@dataclass(frozen=True)
class OutputSettings:
    """Output configuration for one run."""

    json: bool = False
    verbose: bool = False
    color: bool = True

    @classmethod
    def from_parsed(cls, parsed: ParsedArgs) -> "OutputSettings":
        return cls(
            json=bool(parsed.get("json", False)),
            verbose=bool(parsed.get("verbose", False)),
            color=not parsed.get("no_color", False),
        )


@dataclass
class LogEntry:
    """One buffered progress message."""

    level: str
    message: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level, "message": self.message, "timestamp": self.timestamp}


class Reporter:
    """Writes progress for one run in human or JSON mode."""

    def __init__(
        self,
        settings: OutputSettings,
        stdout: IO[str] | None = None,
        stderr: IO[str] | None = None,
    ):
        self.settings = settings
        self.logs: list[LogEntry] = []
        self._emitted = False
        self.console = Console(
            file=stdout,
            no_color=not settings.color,
            highlight=False,
            soft_wrap=True,
        )
        self.err_console = Console(
            file=stderr,
            stderr=stderr is None,
            no_color=not settings.color,
            highlight=False,
            soft_wrap=True,
        )

    @property
    def json_mode(self) -> bool:
        return self.settings.json

    @property
    def verbose(self) -> bool:
        return self.settings.verbose

    def _record(self, level: str, message: str) -> None:
        self.logs.append(LogEntry(level, message, int(time.time() * 1000)))

    def _print(self, message: str, style: str | None = None) -> None:
        self.console.print(message, style=style, markup=False)

    def info(self, message: str) -> None:
        if self.json_mode:
            self._record("info", message)
        else:
            self._print(message)

    def success(self, message: str) -> None:
        if self.json_mode:
            self._record("success", message)
        else:
            self._print(f"✔ {message}", style="green")

    def warn(self, message: str) -> None:
        if self.json_mode:
            self._record("warn", message)
        else:
            self._print(f"⚠ {message}", style="yellow")

    def error(self, message: str) -> None:
        if self.json_mode:
            self._record("error", message)
        else:
            self.err_console.print(f"✖ {message}", style="red", markup=False)

    def debug(self, message: str) -> None:
        if not self.verbose:
            return
        if self.json_mode:
            self._record("debug", message)
        else:
            self._print(f"[debug] {message}", style="bright_black")

    def step(self, icon: str, message: str) -> None:
        if self.json_mode:
            self._record("step", message)
        else:
            self._print(f"{icon} {message}")

    def newline(self) -> None:
        if not self.json_mode:
            self.console.print()

    def banner(self, text: str) -> None:
        if not self.json_mode:
            self.console.print(f"\n  {text}\n", style="bold blue", markup=False)

    def next_steps(self, steps: list[str]) -> None:
        if self.json_mode:
            return
        self.console.print("\nNext steps:\n", style="yellow")
        for step in steps:
            self.console.print(f"  {step}", style="bold blue", markup=False)
        self.console.print()

    def raw(self, text: str) -> None:
        """Forward external tool output (human mode) or buffer it as debug (JSON mode)."""
        if self.json_mode:
            self.debug(text.rstrip("\n"))
        else:
            self.console.file.write(text)
            self.console.file.flush()

    def raw_error(self, text: str) -> None:
        """Like ``raw`` for a tool's stderr stream."""
        if self.json_mode:
            self.debug(text.rstrip("\n"))
        else:
            self.err_console.file.write(text)
            self.err_console.file.flush()

    def render_markup(self, markup: str) -> None:
        """Print rich markup (help text) in human mode."""
        self.console.print(markup)

    def emit(self, document: dict[str, Any]) -> None:
        """Write the final JSON document. No-op in human mode.

        Raises:
            OutputError: If a document was already emitted this run
        """
        if not self.json_mode:
            return
        if self._emitted:
            raise OutputError("JSON result already emitted for this run")
        payload = dict(document)
        payload.pop("logs", None)
        if self.verbose:
            payload["logs"] = [entry.to_dict() for entry in self.logs]
        self._emitted = True
        self.console.file.write(json.dumps(payload, indent=2, default=str) + "\n")
        self.console.file.flush()


class ReporterHandler(logging.Handler):
    """Route ``quapp.*`` log records into the run's Reporter."""

    def __init__(self, reporter: Reporter):
        super().__init__()
        self.reporter = reporter

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if record.levelno >= logging.ERROR:
                self.reporter.error(message)
            elif record.levelno >= logging.WARNING:
                self.reporter.warn(message)
            elif record.levelno >= logging.INFO:
                self.reporter.info(message)
            else:
                self.reporter.debug(message)
        except Exception:
            self.handleError(record)


def configure_logging(reporter: Reporter) -> logging.Logger:
    """Attach the run's Reporter to the ``quapp`` logger.

    Replaces any handler installed by a previous run in the same process.
    """
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        if isinstance(handler, ReporterHandler):
            root.removeHandler(handler)
    handler = ReporterHandler(reporter)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if reporter.verbose else logging.WARNING)
    root.propagate = False
    return root
