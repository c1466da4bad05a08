"""Unit tests for template validation and fetching."""

import io
import tarfile
from unittest.mock import MagicMock, patch

import pytest
import requests

from quapp.scaffold.templates import (
    TemplateError,
    TemplateFetcher,
    clone_template,
    framework_for_template,
    validate_project_name,
    validate_template,
)

ROOT = "Quapp-Store-Quapp-1a2b3c4"


def make_tarball(path, files):
    """Write a gzip tarball shaped like a GitHub repository download."""
    with tarfile.open(path, "w:gz") as tar:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{ROOT}/{name}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path


def template_files():
    return {
        "packages/templates/react/package.json": '{"name": "template"}',
        "packages/templates/react/src/main.jsx": "console.log('react')",
        "packages/templates/react-ts/package.json": '{"name": "template-ts"}',
        "packages/quapp/index.js": "// cli",
        "packages/templates/react/../../../evil.txt": "nope",
    }


def mock_response(status_code=200, body=b""):
    response = MagicMock()
    response.status_code = status_code
    response.iter_content.return_value = [body]
    return response


class TestValidation:
    def test_valid_template(self):
        assert validate_template("react-ts+swc") == "react-ts+swc"

    def test_invalid_template(self):
        with pytest.raises(TemplateError) as exc_info:
            validate_template("angular")
        assert exc_info.value.code == "INVALID_TEMPLATE"
        assert "react" in exc_info.value.hint

    @pytest.mark.parametrize("name", ["my-app", "app_2", "A1"])
    def test_valid_project_names(self, name):
        assert validate_project_name(name) is None

    @pytest.mark.parametrize(
        "name,message",
        [
            ("", "Project name is required"),
            ("my app", "can only contain"),
            ("../escape", "can only contain"),
            ("a" * 215, "too long"),
            ("node_modules", "reserved"),
        ],
    )
    def test_invalid_project_names(self, name, message):
        assert message in validate_project_name(name)

    def test_framework_for_template(self):
        assert framework_for_template("vue-ts") == "vue"
        assert framework_for_template("unknown") is None


class TestTemplateFetcher:
    """Tests for downloading and extracting the template tarball."""

    def test_tarball_url(self):
        assert TemplateFetcher.tarball_url() == (
            "https://api.github.com/repos/Quapp-Store/Quapp/tarball"
        )

    def test_token_header(self, monkeypatch):
        monkeypatch.delenv("GH_TOKEN", raising=False)
        monkeypatch.setenv("GITHUB_TOKEN", "abc123\n")
        assert TemplateFetcher._headers()["Authorization"] == "Bearer abc123"

    def test_no_token_header(self, monkeypatch):
        monkeypatch.delenv("GH_TOKEN", raising=False)
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        assert "Authorization" not in TemplateFetcher._headers()

    @patch("quapp.scaffold.templates.requests.get")
    def test_download_writes_chunks(self, mock_get, tmp_path):
        mock_get.return_value.__enter__.return_value = mock_response(body=b"tarball-bytes")

        path = TemplateFetcher.download(tmp_path / "t.tar.gz")

        assert path.read_bytes() == b"tarball-bytes"
        assert mock_get.call_args.kwargs["stream"] is True
        assert mock_get.call_args.kwargs["timeout"] == 30

    @patch("quapp.scaffold.templates.requests.get")
    def test_download_not_found(self, mock_get, tmp_path):
        mock_get.return_value.__enter__.return_value = mock_response(status_code=404)
        with pytest.raises(TemplateError) as exc_info:
            TemplateFetcher.download(tmp_path / "t.tar.gz")
        assert exc_info.value.code == "TEMPLATE_NOT_FOUND"

    @patch("quapp.scaffold.templates.requests.get")
    def test_download_rate_limited(self, mock_get, tmp_path):
        mock_get.return_value.__enter__.return_value = mock_response(status_code=403)
        with pytest.raises(TemplateError) as exc_info:
            TemplateFetcher.download(tmp_path / "t.tar.gz")
        assert exc_info.value.code == "NETWORK_ERROR"
        assert "GITHUB_TOKEN" in exc_info.value.hint

    @patch("quapp.scaffold.templates.requests.get")
    def test_download_connection_error(self, mock_get, tmp_path):
        mock_get.side_effect = requests.ConnectionError("offline")
        with pytest.raises(TemplateError) as exc_info:
            TemplateFetcher.download(tmp_path / "t.tar.gz")
        assert exc_info.value.code == "NETWORK_ERROR"

    def test_extract_only_requested_template(self, tmp_path):
        archive = make_tarball(tmp_path / "t.tar.gz", template_files())
        target = tmp_path / "app"

        written = TemplateFetcher.extract(archive, "react", target)

        assert written == 2
        assert (target / "package.json").read_text() == '{"name": "template"}'
        assert (target / "src" / "main.jsx").exists()
        assert not (target / "index.js").exists()
        assert not (tmp_path / "evil.txt").exists()

    def test_extract_missing_template(self, tmp_path):
        archive = make_tarball(tmp_path / "t.tar.gz", template_files())
        with pytest.raises(TemplateError) as exc_info:
            TemplateFetcher.extract(archive, "solid-ts", tmp_path / "app")
        assert exc_info.value.code == "TEMPLATE_NOT_FOUND"

    def test_extract_corrupt_archive(self, tmp_path):
        archive = tmp_path / "t.tar.gz"
        archive.write_bytes(b"not a tarball")
        with pytest.raises(TemplateError) as exc_info:
            TemplateFetcher.extract(archive, "react", tmp_path / "app")
        assert exc_info.value.code == "NETWORK_ERROR"


class TestCloneTemplate:
    @patch("quapp.scaffold.templates.requests.get")
    def test_clone(self, mock_get, tmp_path):
        body = make_tarball(tmp_path / "source.tar.gz", template_files()).read_bytes()
        mock_get.return_value.__enter__.return_value = mock_response(body=body)

        count = clone_template("react-ts", tmp_path / "app")

        assert count == 1
        assert (tmp_path / "app" / "package.json").read_text() == '{"name": "template-ts"}'

    @patch("quapp.scaffold.templates.requests.get")
    def test_clone_rejects_unknown_template_without_download(self, mock_get, tmp_path):
        with pytest.raises(TemplateError):
            clone_template("angular", tmp_path / "app")
        mock_get.assert_not_called()

    @patch("quapp.scaffold.templates.requests.get")
    def test_corrupt_download_leaves_no_directory(self, mock_get, tmp_path):
        mock_get.return_value.__enter__.return_value = mock_response(body=b"not a tarball")

        with pytest.raises(TemplateError) as exc_info:
            clone_template("react", tmp_path / "app")

        assert exc_info.value.code == "NETWORK_ERROR"
        assert not (tmp_path / "app").exists()

    @patch("quapp.scaffold.templates.requests.get")
    def test_missing_template_leaves_no_directory(self, mock_get, tmp_path):
        body = make_tarball(tmp_path / "source.tar.gz", template_files()).read_bytes()
        mock_get.return_value.__enter__.return_value = mock_response(body=body)

        with pytest.raises(TemplateError):
            clone_template("solid-ts", tmp_path / "app")

        assert not (tmp_path / "app").exists()

    @patch("quapp.scaffold.templates.requests.get")
    def test_clone_into_existing_directory(self, mock_get, tmp_path):
        body = make_tarball(tmp_path / "source.tar.gz", template_files()).read_bytes()
        mock_get.return_value.__enter__.return_value = mock_response(body=body)
        target = tmp_path / "app"
        target.mkdir()
        (target / "package.json").write_text("{}")
        (target / "notes.txt").write_text("keep me")

        clone_template("react", target)

        assert (target / "package.json").read_text() == '{"name": "template"}'
        assert (target / "src" / "main.jsx").exists()
        assert (target / "notes.txt").read_text() == "keep me"
