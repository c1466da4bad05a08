"""Project configuration: quapp.config.json and package.json.

``quapp.config.json`` is optional. A missing file means defaults; an
unreadable or malformed one is reported as a warning and also falls back to
defaults, so a broken config never stops ``quapp serve``.

``package.json`` is required by build and init. Problems with it raise
``PackageJsonError`` carrying the error code the handlers report.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from quapp.constants import CONFIG_FILENAME, DEFAULT_BUILD_CONFIG, DEFAULT_SERVER_CONFIG

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"


class ConfigError(Exception):
    """Raised when configuration operations fail."""

    pass


class PackageJsonError(ConfigError):
    """Raised when package.json is missing, unreadable or cannot be written."""

    def __init__(self, message: str, code: str = "PACKAGE_JSON_ERROR"):
        super().__init__(message)
        self.code = code


def _expect(data: dict[str, Any], key: str, kind: type | tuple[type, ...], section: str) -> Any:
    value = data[key]
    # bool is an int subclass; a port of `true` is still wrong
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f'"{section}.{key}" has the wrong type: {value!r}')
    return value


@dataclass
class ServerConfig:
    """Dev server settings (``server`` section)."""

    port: int = DEFAULT_SERVER_CONFIG["port"]
    qr: bool = DEFAULT_SERVER_CONFIG["qr"]
    network: str = DEFAULT_SERVER_CONFIG["network"]
    open_browser: bool = DEFAULT_SERVER_CONFIG["openBrowser"]
    https: bool = DEFAULT_SERVER_CONFIG["https"]
    fallback_port: bool = DEFAULT_SERVER_CONFIG["fallbackPort"]
    auto_retry: bool = DEFAULT_SERVER_CONFIG["autoRetry"]
    strict_port: bool = DEFAULT_SERVER_CONFIG["strictPort"]

    _KEYS = {
        "port": ("port", int),
        "qr": ("qr", bool),
        "network": ("network", str),
        "openBrowser": ("open_browser", bool),
        "https": ("https", bool),
        "fallbackPort": ("fallback_port", bool),
        "autoRetry": ("auto_retry", bool),
        "strictPort": ("strict_port", bool),
    }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerConfig":
        """Build from the on-disk (camelCase) form; unknown keys are ignored.

        Raises:
            ConfigError: If a known key has the wrong type
        """
        kwargs = {}
        for key, (attr, kind) in cls._KEYS.items():
            if key in data:
                kwargs[attr] = _expect(data, key, kind, "server")
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {key: getattr(self, attr) for key, (attr, _kind) in self._KEYS.items()}


@dataclass
class BuildConfig:
    """Build settings (``build`` section)."""

    out_dir: str = DEFAULT_BUILD_CONFIG["outDir"]
    output_file: str = DEFAULT_BUILD_CONFIG["outputFile"]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuildConfig":
        kwargs = {}
        if "outDir" in data:
            kwargs["out_dir"] = _expect(data, "outDir", str, "build")
        if "outputFile" in data:
            kwargs["output_file"] = _expect(data, "outputFile", str, "build")
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {"outDir": self.out_dir, "outputFile": self.output_file}


@dataclass
class QuappConfig:
    """Merged project configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    build: BuildConfig = field(default_factory=BuildConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QuappConfig":
        """
        Raises:
            ConfigError: If a section is not an object or a value has the wrong type
        """
        server = data.get("server") or {}
        build = data.get("build") or {}
        if not isinstance(server, dict) or not isinstance(build, dict):
            raise ConfigError('"server" and "build" must be objects')
        return cls(server=ServerConfig.from_dict(server), build=BuildConfig.from_dict(build))

    def to_dict(self) -> dict[str, Any]:
        return {"server": self.server.to_dict(), "build": self.build.to_dict()}


@dataclass
class ConfigLoadResult:
    """Outcome of loading quapp.config.json."""

    config: QuappConfig
    path: Path
    loaded: bool = False
    error: str | None = None


class ConfigManager:
    """Read and write the per-project configuration files."""

    @classmethod
    def config_path(cls, cwd: Path) -> Path:
        return cwd / CONFIG_FILENAME

    @classmethod
    def load_config(cls, cwd: Path) -> ConfigLoadResult:
        """Load quapp.config.json merged over defaults. Never raises."""
        path = cls.config_path(cwd)
        if not path.exists():
            logger.debug("No quapp.config.json, using defaults")
            return ConfigLoadResult(config=QuappConfig(), path=path)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ConfigError("top level must be an object")
            config = QuappConfig.from_dict(data)
        except (OSError, ValueError, ConfigError) as e:
            return ConfigLoadResult(
                config=QuappConfig(), path=path, error=f"Invalid {CONFIG_FILENAME}: {e}"
            )

        logger.debug(f"Loaded config from: {path}")
        return ConfigLoadResult(config=config, path=path, loaded=True)

    @classmethod
    def save_config(cls, cwd: Path, config: QuappConfig) -> Path:
        """
        Raises:
            ConfigError: If the file cannot be written
        """
        path = cls.config_path(cwd)
        try:
            path.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to write {CONFIG_FILENAME}: {e}") from e
        logger.debug(f"Saved config to: {path}")
        return path

    @classmethod
    def package_json_path(cls, cwd: Path) -> Path:
        return cwd / PACKAGE_JSON

    @classmethod
    def load_package_json(cls, cwd: Path) -> dict[str, Any]:
        """
        Raises:
            PackageJsonError: NO_PACKAGE_JSON or INVALID_PACKAGE_JSON
        """
        path = cls.package_json_path(cwd)
        if not path.exists():
            raise PackageJsonError(
                "package.json not found. Are you in a Quapp project directory?",
                code="NO_PACKAGE_JSON",
            )
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PackageJsonError(f"Invalid package.json: {e}", code="INVALID_PACKAGE_JSON") from e
        if not isinstance(data, dict):
            raise PackageJsonError(
                "Invalid package.json: top level must be an object", code="INVALID_PACKAGE_JSON"
            )
        return data

    @classmethod
    def save_package_json(cls, cwd: Path, pkg: dict[str, Any]) -> None:
        path = cls.package_json_path(cwd)
        try:
            path.write_text(json.dumps(pkg, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        except OSError as e:
            raise PackageJsonError(f"Failed to update package.json: {e}") from e

    @classmethod
    def update_package_json(cls, cwd: Path, updates: dict[str, Any]) -> dict[str, Any]:
        """Shallow-merge ``updates`` into package.json and write it back.

        Returns:
            The updated package data
        """
        pkg = cls.load_package_json(cwd)
        pkg.update(updates)
        cls.save_package_json(cwd, pkg)
        return pkg


def missing_fields(pkg: dict[str, Any], fields: tuple[str, ...] = ("name", "version")) -> list[str]:
    """Fields that are absent or blank in package.json."""
    missing = []
    for name in fields:
        value = pkg.get(name)
        if not isinstance(value, str) or not value.strip():
            missing.append(name)
    return missing


def has_build_script(pkg: dict[str, Any]) -> bool:
    scripts = pkg.get("scripts")
    return isinstance(scripts, dict) and "build" in scripts
