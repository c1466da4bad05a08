"""Package manager detection and command tables.

Philosophy:
- Explicit choice (``--pm``) wins, then the manager that invoked us, then npm
- Detection reads the environment only; it never spawns a process

Public API:
    PackageManager: Commands for one manager
    MANAGERS: Known managers by name
    detect_from_user_agent: Manager named by ``npm_config_user_agent``
    detect_package_manager: Resolve the manager for a run
    is_valid_manager: Membership check
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MANAGER = "npm"

# Checked in this order; "npm" last because other managers mention it in their agent string
_AGENT_ORDER = ("pnpm", "yarn", "bun", "npm")


@dataclass(frozen=True)
class PackageManager:
    """Install and run commands for one package manager."""

    name: str
    install: tuple[str, ...]
    run: tuple[str, ...]

    def install_command(self) -> list[str]:
        return list(self.install)

    def run_command(self, script: str) -> list[str]:
        return [*self.run, script]

    def display_install(self) -> str:
        return " ".join(self.install)

    def display_run(self, script: str) -> str:
        return " ".join(self.run_command(script))


MANAGERS: dict[str, PackageManager] = {
    "npm": PackageManager("npm", ("npm", "install"), ("npm", "run")),
    "yarn": PackageManager("yarn", ("yarn",), ("yarn",)),
    "pnpm": PackageManager("pnpm", ("pnpm", "install"), ("pnpm",)),
    "bun": PackageManager("bun", ("bun", "install"), ("bun", "run")),
}


def is_valid_manager(name: str | None) -> bool:
    return name in MANAGERS


def detect_from_user_agent(agent: str | None) -> str:
    """Return the manager named in an ``npm_config_user_agent`` string.

    Example:
        >>> detect_from_user_agent("pnpm/8.6.0 npm/? node/v20.3.0 linux x64")
        'pnpm'
    """
    if agent:
        for name in _AGENT_ORDER:
            if name in agent:
                return name
    return DEFAULT_MANAGER


def detect_package_manager(
    preferred: str | None = None, environ: Mapping[str, str] | None = None
) -> PackageManager:
    """Resolve the package manager for a run.

    Args:
        preferred: Explicit choice, ignored when not a known manager
        environ: Environment to read (defaults to ``os.environ``)
    """
    if preferred and is_valid_manager(preferred):
        return MANAGERS[preferred]
    if preferred:
        logger.debug(f"Ignoring unknown package manager: {preferred}")
    environ = os.environ if environ is None else environ
    return MANAGERS[detect_from_user_agent(environ.get("npm_config_user_agent"))]


__all__ = [
    "DEFAULT_MANAGER",
    "MANAGERS",
    "PackageManager",
    "detect_from_user_agent",
    "detect_package_manager",
    "is_valid_manager",
]
