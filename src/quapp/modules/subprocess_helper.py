"""Subprocess execution for npm, npx and git.

Philosophy:
- Single responsibility: run an external tool and report what happened
- Standard library only
- Never raise for a missing binary; report exit code 127 instead

Public API (the "studs"):
    SubprocessResult: Result dataclass
    safe_run: Run to completion, capturing or inheriting output
    stream_lines: Run and hand each output line to a callback
"""

import logging
import shutil
import subprocess
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


@dataclass
class SubprocessResult:
    """Result of subprocess execution."""

    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def _spawn_failure(cmd: list[str], error: OSError) -> SubprocessResult:
    if isinstance(error, FileNotFoundError):
        return SubprocessResult(
            returncode=COMMAND_NOT_FOUND,
            stdout="",
            stderr=f"Command not found: {cmd[0] if cmd else 'unknown'}",
        )
    return SubprocessResult(
        returncode=1,
        stdout="",
        stderr=f"Error executing command: {error!s}",
    )


def _resolve_executable(cmd: list[str]) -> list[str]:
    """Replace argv[0] with its full path when it is on PATH.

    CreateProcess on Windows only finds ``.exe`` files, so ``npm`` / ``npx``
    shims (``npm.cmd``) must be spawned by full path. An unresolved name is
    left alone and fails to spawn with exit code 127.
    """
    if not cmd:
        return cmd
    found = shutil.which(cmd[0])
    return [found, *cmd[1:]] if found else cmd


def safe_run(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: int | None = None,
    env: dict | None = None,
    capture: bool = True,
) -> SubprocessResult:
    """
    Execute a command to completion.

    Args:
        cmd: Command and arguments
        cwd: Working directory
        timeout: Timeout in seconds (None = no timeout)
        env: Environment variables
        capture: Capture output; when False the child inherits our terminal

    Returns:
        SubprocessResult with output and exit code

    Example:
        >>> result = safe_run(["git", "--version"])
        >>> result.ok
        True
    """
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        completed = subprocess.run(
            _resolve_executable(cmd),
            cwd=cwd,
            env=env,
            timeout=timeout,
            capture_output=capture,
            text=True,
            errors="replace",
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return SubprocessResult(
            returncode=-1,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
            timed_out=True,
        )
    except OSError as e:
        return _spawn_failure(cmd, e)

    return SubprocessResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


def stream_lines(
    cmd: list[str],
    on_line: Callable[[str], None],
    cwd: Path | None = None,
    env: dict | None = None,
    on_stderr: Callable[[str], None] | None = None,
) -> SubprocessResult:
    """
    Run a long-lived command, passing each stdout line to ``on_line``.

    stderr is drained line by line on a background thread so a chatty child
    can never block on a full pipe; each line goes to ``on_stderr`` (called
    from that thread) when given. Returns once the child exits.
    """
    logger.debug(f"Streaming: {' '.join(cmd)}")
    try:
        process = subprocess.Popen(
            _resolve_executable(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=env,
            text=True,
            errors="replace",
            bufsize=1,
        )
    except OSError as e:
        return _spawn_failure(cmd, e)

    stderr_data: list[str] = []

    def drain_pipe(pipe, storage):
        try:
            for line in pipe:
                storage.append(line)
                if on_stderr is not None:
                    on_stderr(line)
        except (OSError, ValueError):
            # Pipe closed during termination
            pass

    stderr_thread = threading.Thread(target=drain_pipe, args=(process.stderr, stderr_data))
    stderr_thread.daemon = True
    stderr_thread.start()

    stdout_lines: list[str] = []
    try:
        for line in process.stdout:
            stdout_lines.append(line)
            on_line(line)
        process.wait()
    except BaseException:
        process.terminate()
        process.wait()
        raise
    finally:
        stderr_thread.join(timeout=1)

    return SubprocessResult(
        returncode=process.returncode,
        stdout="".join(stdout_lines),
        stderr="".join(stderr_data),
    )


def _as_text(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


__all__ = ["COMMAND_NOT_FOUND", "SubprocessResult", "safe_run", "stream_lines"]
