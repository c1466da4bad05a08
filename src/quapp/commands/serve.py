"""quapp serve: run the Vite dev server reachable from the LAN.

Flow:
    1. Merge flags over quapp.config.json into ``ServerSettings``
    2. Require the project-local Vite binary
    3. Spawn ``npx vite`` and watch its output for the ready banner
    4. On ready, show a QR code for the network URL and optionally open a browser
    5. If Vite exits with an error before it was ready, retry on the next
       port (bounded by MAX_PORT_ATTEMPTS)
"""

import logging
import re
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import qrcode

from quapp.config_manager import ConfigManager, ServerConfig
from quapp.constants import MAX_PORT, MAX_PORT_ATTEMPTS, ExitCode
from quapp.modules.prerequisites import PrerequisiteChecker, PrerequisiteError
from quapp.modules.subprocess_helper import COMMAND_NOT_FOUND, stream_lines
from quapp.network import LOCALHOST, get_lan_ip
from quapp.options import DevOptions
from quapp.output import Reporter
from quapp.result import CommandResult

logger = logging.getLogger(__name__)

_ANSI = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
_LOCAL_URL = re.compile(r"Local:\s+(https?://\S+)")
_NETWORK_URL = re.compile(r"Network:\s+(https?://\S+)")


@dataclass(frozen=True)
class ServerSettings:
    """Effective dev server settings after merging flags and config."""

    port: int
    host: str
    qr: bool
    open_browser: bool
    https: bool
    strict_port: bool
    auto_retry: bool
    extra: tuple[str, ...] = ()


def resolve_server_settings(
    options: DevOptions, server_config: ServerConfig, lan_ip: str | None = None
) -> ServerSettings:
    """Flags win over config. Host falls back to the LAN IP for a private network."""
    host = options.host
    if not host:
        if server_config.network == "private":
            host = lan_ip or get_lan_ip()
        else:
            host = LOCALHOST

    return ServerSettings(
        port=options.port or server_config.port,
        host=host,
        qr=server_config.qr if options.qr is None else options.qr,
        open_browser=options.open or server_config.open_browser,
        https=options.https or server_config.https,
        strict_port=server_config.strict_port,
        auto_retry=server_config.auto_retry,
        extra=options.extra,
    )


def build_vite_command(settings: ServerSettings, port: int) -> list[str]:
    cmd = ["npx", "vite", "--host", settings.host, "--port", str(port)]
    if settings.strict_port or not settings.auto_retry:
        cmd.append("--strictPort")
    if settings.https:
        cmd.append("--https")
    cmd.extend(settings.extra)
    return cmd


def parse_vite_ready(output: str) -> dict[str, str] | None:
    """Extract the Local/Network URLs from Vite's ready banner.

    Example:
        >>> parse_vite_ready("  Local:   http://localhost:5173/")
        {'local': 'http://localhost:5173'}
    """
    text = _ANSI.sub("", output)
    local = _LOCAL_URL.search(text)
    network = _NETWORK_URL.search(text)
    if not local and not network:
        return None
    info = {}
    if local:
        info["local"] = local.group(1).rstrip("/")
    if network:
        info["network"] = network.group(1).rstrip("/")
    return info


def render_qr(url: str, reporter: Reporter) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(out=reporter.console.file, invert=True)


class _ReadyWatcher:
    """Forwards Vite output and fires the on-ready actions once."""

    def __init__(
        self,
        reporter: Reporter,
        settings: ServerSettings,
        open_url: Callable[[str], object],
    ):
        self.reporter = reporter
        self.settings = settings
        self.open_url = open_url
        self.server_info: dict[str, str] | None = None
        self._seen: list[str] = []

    def __call__(self, line: str) -> None:
        self.reporter.raw(line)
        if self.server_info is not None:
            return
        self._seen.append(line)
        info = parse_vite_ready("".join(self._seen))
        if info is None:
            return
        # Network follows Local; fire on the line after Local
        if "network" in info or "Local:" not in _ANSI.sub("", line):
            self.server_info = info
            self._on_ready(info)

    def _on_ready(self, info: dict[str, str]) -> None:
        url = info.get("network") or info.get("local")
        if self.settings.qr and url and not self.reporter.json_mode:
            self.reporter.newline()
            self.reporter.step("📱", "Scan QR code to open on mobile:")
            self.reporter.newline()
            render_qr(url, self.reporter)
        if self.settings.open_browser and info.get("local"):
            logger.debug(f"Opening browser at {info['local']}")
            self.open_url(info["local"])


def run_serve(
    options: DevOptions,
    reporter: Reporter,
    cwd: Path | None = None,
    open_url: Callable[[str], object] = webbrowser.open,
) -> CommandResult:
    cwd = cwd or Path.cwd()

    loaded = ConfigManager.load_config(cwd)
    if loaded.error:
        reporter.warn(loaded.error)

    settings = resolve_server_settings(options, loaded.config.server)

    try:
        PrerequisiteChecker.require_vite(cwd)
    except PrerequisiteError as e:
        reporter.error(str(e))
        if e.hint:
            reporter.info(e.hint)
        return CommandResult.failure(
            "VITE_NOT_FOUND",
            str(e),
            suggestion=e.hint,
            exit_code=ExitCode.MISSING_DEPENDENCY,
        )

    port = settings.port
    attempts = 0
    while True:
        attempts += 1
        logger.debug(f"Starting Vite on {settings.host}:{port}")
        watcher = _ReadyWatcher(reporter, settings, open_url)
        proc = stream_lines(
            build_vite_command(settings, port), watcher, cwd=cwd, on_stderr=reporter.raw_error
        )

        if proc.returncode == COMMAND_NOT_FOUND:
            reporter.error(f"Failed to start Vite: {proc.stderr}")
            prereqs = PrerequisiteChecker.check_all()
            if prereqs.missing:
                reporter.info(
                    PrerequisiteChecker.format_missing_message(
                        prereqs.missing, prereqs.platform_name
                    )
                )
            return CommandResult.failure(
                "DEV_SERVER_FAILED",
                f"Failed to start Vite: {proc.stderr}",
                suggestion="Make sure Node.js and npx are installed",
                exit_code=ExitCode.MISSING_DEPENDENCY,
                missing=prereqs.missing,
            )

        if proc.returncode == 0:
            return CommandResult.ok(serverInfo=watcher.server_info, port=port, attempts=attempts)

        retries = attempts - 1
        can_retry = (
            watcher.server_info is None
            and settings.auto_retry
            and retries < MAX_PORT_ATTEMPTS
            and port < MAX_PORT
        )
        if not can_retry:
            break
        reporter.warn(f"Port {port} in use. Trying port {port + 1}...")
        port += 1

    message = f"Vite exited with code {proc.returncode}"
    reporter.error(message)
    return CommandResult.failure(
        "DEV_SERVER_FAILED",
        message,
        exit_code=ExitCode.GENERAL_ERROR,
        port=port,
        attempts=attempts,
    )
