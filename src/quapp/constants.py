"""Shared constants for the quapp and create-quapp CLIs."""

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """Process exit codes (Unix conventions).

    Codes 3 and 5 each cover two command-specific categories, so the
    second name of each pair is an alias.
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_ARGS = 2
    BUILD_FAILED = 3
    TEMPLATE_NOT_FOUND = 3
    CONFIG_ERROR = 4
    MISSING_DEPENDENCY = 5
    NETWORK_ERROR = 5
    USER_CANCELLED = 130


# errorCode -> exit code, used when a failed result carries no explicit exit code
ERROR_CODE_EXIT_CODES: dict[str, ExitCode] = {
    "INVALID_ARGS": ExitCode.INVALID_ARGS,
    "MISSING_NAME": ExitCode.INVALID_ARGS,
    "MISSING_TEMPLATE": ExitCode.INVALID_ARGS,
    "INVALID_NAME": ExitCode.INVALID_ARGS,
    "CONFIRMATION_REQUIRED": ExitCode.INVALID_ARGS,
    "INVALID_TEMPLATE": ExitCode.TEMPLATE_NOT_FOUND,
    "TEMPLATE_NOT_FOUND": ExitCode.TEMPLATE_NOT_FOUND,
    "BUILD_FAILED": ExitCode.BUILD_FAILED,
    "BUILD_OUTPUT_NOT_FOUND": ExitCode.BUILD_FAILED,
    "CONFIG_ERROR": ExitCode.CONFIG_ERROR,
    "PACKAGE_JSON_ERROR": ExitCode.CONFIG_ERROR,
    "NO_PACKAGE_JSON": ExitCode.CONFIG_ERROR,
    "INVALID_PACKAGE_JSON": ExitCode.CONFIG_ERROR,
    "MISSING_PACKAGE_NAME": ExitCode.CONFIG_ERROR,
    "NO_BUILD_SCRIPT": ExitCode.CONFIG_ERROR,
    "VITE_NOT_FOUND": ExitCode.MISSING_DEPENDENCY,
    "GIT_NOT_AVAILABLE": ExitCode.MISSING_DEPENDENCY,
    "NETWORK_ERROR": ExitCode.NETWORK_ERROR,
}

DEV_COMMANDS = ("serve", "build", "init")

CONFIG_FILENAME = "quapp.config.json"
MANIFEST_FILENAME = "manifest.json"
PACKAGE_EXTENSION = ".qpp"

DEFAULT_SERVER_CONFIG: dict[str, Any] = {
    "port": 5173,
    "qr": True,
    "network": "private",
    "openBrowser": False,
    "https": False,
    "fallbackPort": True,
    "autoRetry": True,
    "strictPort": False,
}

DEFAULT_BUILD_CONFIG: dict[str, Any] = {
    "outDir": "dist",
    "outputFile": "dist.qpp",
}

# Retries after the first attempt when the dev server port is taken
MAX_PORT_ATTEMPTS = 10

MIN_PORT = 1
MAX_PORT = 65535

MANIFEST_DEFAULTS: dict[str, Any] = {
    "entry_point": "index.html",
    "permissions": [],
    "min_sdk_version": 1,
}

# Templates grouped by framework, in prompt order
TEMPLATES: dict[str, list[str]] = {
    "react": ["react", "react-ts", "react+swc", "react-ts+swc"],
    "vue": ["vue", "vue-ts"],
    "vanilla": ["vanilla-js", "vanilla-ts"],
    "solid": ["solid-js", "solid-ts"],
}

ALL_TEMPLATES: list[str] = [t for variants in TEMPLATES.values() for t in variants]

FRAMEWORKS: list[tuple[str, str]] = [
    ("react", "React"),
    ("vue", "Vue"),
    ("vanilla", "Vanilla"),
    ("solid", "Solid"),
]

SCAFFOLD_DEFAULTS: dict[str, Any] = {
    "template": "react",
    "git": False,
    "install": False,
    "force": False,
}

PACKAGE_MANAGERS = ("npm", "yarn", "pnpm", "bun")

TEMPLATE_REPO_OWNER = "Quapp-Store"
TEMPLATE_REPO_NAME = "Quapp"
TEMPLATE_REPO_PATH = "packages/templates"
