"""Unit tests for config_manager module."""

import json
from unittest.mock import patch

import pytest

from quapp.config_manager import (
    BuildConfig,
    ConfigError,
    ConfigManager,
    PackageJsonError,
    QuappConfig,
    ServerConfig,
    has_build_script,
    missing_fields,
)


class TestServerConfig:
    """Tests for ServerConfig dataclass."""

    def test_default_values(self):
        """Test default configuration values."""
        config = ServerConfig()
        assert config.port == 5173
        assert config.qr is True
        assert config.network == "private"
        assert config.open_browser is False
        assert config.auto_retry is True
        assert config.strict_port is False

    def test_from_dict_partial(self):
        """Test creation from partial dictionary."""
        config = ServerConfig.from_dict({"port": 3000, "openBrowser": True})
        assert config.port == 3000
        assert config.open_browser is True
        assert config.qr is True  # Default

    def test_unknown_keys_ignored(self):
        config = ServerConfig.from_dict({"port": 3000, "proxy": {"/api": "x"}})
        assert config.port == 3000

    def test_wrong_type_rejected(self):
        with pytest.raises(ConfigError, match="server.port"):
            ServerConfig.from_dict({"port": "3000"})

    def test_bool_is_not_a_port(self):
        with pytest.raises(ConfigError):
            ServerConfig.from_dict({"port": True})

    def test_to_dict_uses_camel_case(self):
        data = ServerConfig(open_browser=True).to_dict()
        assert data["openBrowser"] is True
        assert "open_browser" not in data


class TestQuappConfig:
    """Tests for the merged configuration."""

    def test_from_dict(self):
        config = QuappConfig.from_dict(
            {"server": {"port": 4000}, "build": {"outputFile": "game.qpp"}}
        )
        assert config.server.port == 4000
        assert config.build.output_file == "game.qpp"
        assert config.build.out_dir == "dist"

    def test_sections_must_be_objects(self):
        with pytest.raises(ConfigError):
            QuappConfig.from_dict({"server": [1, 2]})

    def test_to_dict(self):
        data = QuappConfig(build=BuildConfig(out_dir="build")).to_dict()
        assert data["build"] == {"outDir": "build", "outputFile": "dist.qpp"}
        assert data["server"]["port"] == 5173


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_load_missing_uses_defaults(self, tmp_path):
        result = ConfigManager.load_config(tmp_path)
        assert result.loaded is False
        assert result.error is None
        assert result.config == QuappConfig()

    def test_load_merges_over_defaults(self, tmp_path):
        (tmp_path / "quapp.config.json").write_text(json.dumps({"server": {"qr": False}}))
        result = ConfigManager.load_config(tmp_path)
        assert result.loaded is True
        assert result.config.server.qr is False
        assert result.config.server.port == 5173

    def test_load_malformed_falls_back(self, tmp_path):
        """A broken config is reported, never raised."""
        (tmp_path / "quapp.config.json").write_text("{ not json")
        result = ConfigManager.load_config(tmp_path)
        assert result.loaded is False
        assert result.error.startswith("Invalid quapp.config.json")
        assert result.config == QuappConfig()

    def test_load_non_object_falls_back(self, tmp_path):
        (tmp_path / "quapp.config.json").write_text("[]")
        result = ConfigManager.load_config(tmp_path)
        assert "top level must be an object" in result.error

    def test_save_and_load(self, tmp_path):
        config = QuappConfig(server=ServerConfig(port=8080))
        path = ConfigManager.save_config(tmp_path, config)
        assert path.name == "quapp.config.json"
        assert ConfigManager.load_config(tmp_path).config.server.port == 8080

    def test_save_failure(self, tmp_path):
        with patch("pathlib.Path.write_text", side_effect=PermissionError("denied")):
            with pytest.raises(ConfigError, match="Failed to write"):
                ConfigManager.save_config(tmp_path, QuappConfig())


class TestPackageJson:
    """Tests for package.json access."""

    def test_missing(self, tmp_path):
        with pytest.raises(PackageJsonError) as exc_info:
            ConfigManager.load_package_json(tmp_path)
        assert exc_info.value.code == "NO_PACKAGE_JSON"

    def test_invalid(self, tmp_path):
        (tmp_path / "package.json").write_text("{")
        with pytest.raises(PackageJsonError) as exc_info:
            ConfigManager.load_package_json(tmp_path)
        assert exc_info.value.code == "INVALID_PACKAGE_JSON"

    def test_update_merges_and_persists(self, tmp_path, write_package_json, sample_package):
        write_package_json(tmp_path, sample_package)

        pkg = ConfigManager.update_package_json(tmp_path, {"name": "renamed", "author": "Bob"})

        assert pkg["name"] == "renamed"
        assert pkg["scripts"] == {"build": "vite build"}
        on_disk = json.loads((tmp_path / "package.json").read_text())
        assert on_disk == pkg

    def test_save_keeps_unicode(self, tmp_path):
        ConfigManager.save_package_json(tmp_path, {"author": "Zoë"})
        assert "Zoë" in (tmp_path / "package.json").read_text(encoding="utf-8")


class TestHelpers:
    def test_missing_fields(self):
        assert missing_fields({"name": "app", "version": " "}) == ["version"]
        assert missing_fields({}, ("name", "version", "author")) == ["name", "version", "author"]

    def test_has_build_script(self):
        assert has_build_script({"scripts": {"build": "vite build"}})
        assert not has_build_script({"scripts": {"dev": "vite"}})
        assert not has_build_script({"scripts": "vite build"})
