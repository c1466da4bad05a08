"""Unit tests for the init command handler."""

import json

import click
import pytest

from quapp import __version__
from quapp.commands.init import QUAPP_SCRIPTS, run_init
from quapp.modules.interaction_handler import MockInteractionHandler
from quapp.options import DevOptions


class AbortingInteractionHandler(MockInteractionHandler):
    """Simulates Ctrl+C at the confirmation prompt."""

    def confirm(self, message: str, default: bool = True) -> bool:
        raise click.Abort()


@pytest.fixture
def project(tmp_path, write_package_json):
    write_package_json(
        tmp_path, {"name": "legacy", "version": "0.1.0", "scripts": {"build": "vite build"}}
    )
    return tmp_path


def read_pkg(directory):
    return json.loads((directory / "package.json").read_text())


class TestRunInit:
    def test_yes_initializes(self, project, reporter):
        result = run_init(DevOptions(command="init", yes=True), reporter, cwd=project)

        assert result.success
        assert result.payload["changes"] == [
            "quapp.config.json",
            "script:dev",
            "script:qbuild",
            "devDependency:quapp",
        ]
        assert result.payload["nextSteps"] == ["npm install", "npm run dev", "npm run qbuild"]
        pkg = read_pkg(project)
        assert pkg["scripts"]["build"] == "vite build"
        assert pkg["scripts"]["dev"] == QUAPP_SCRIPTS["dev"]
        assert pkg["devDependencies"]["quapp"] == f"^{__version__}"
        config = json.loads((project / "quapp.config.json").read_text())
        assert config["server"]["port"] == 5173
        assert config["build"]["outDir"] == "dist"

    def test_confirm_accepted(self, project, reporter):
        handler = MockInteractionHandler(confirm_responses=[True])
        result = run_init(DevOptions(command="init"), reporter, cwd=project, interaction=handler)
        assert result.success
        assert len(handler.get_interactions_by_type("confirm")) == 1

    def test_confirm_declined(self, project, reporter):
        handler = MockInteractionHandler(confirm_responses=[False])
        result = run_init(DevOptions(command="init"), reporter, cwd=project, interaction=handler)
        assert result.cancelled
        assert result.exit_code == 130
        assert not (project / "quapp.config.json").exists()

    def test_abort_propagates(self, project, reporter):
        with pytest.raises(click.Abort):
            run_init(
                DevOptions(command="init"),
                reporter,
                cwd=project,
                interaction=AbortingInteractionHandler(),
            )

    def test_json_requires_yes(self, project, json_reporter):
        handler = MockInteractionHandler()
        result = run_init(
            DevOptions(command="init", json=True), json_reporter, cwd=project, interaction=handler
        )
        assert result.error_code == "CONFIRMATION_REQUIRED"
        assert result.exit_code == 2
        assert handler.interactions == []

    def test_dry_run_changes_nothing(self, project, reporter):
        before = (project / "package.json").read_text()

        result = run_init(DevOptions(command="init", dry_run=True), reporter, cwd=project)

        assert result.payload == {
            "dryRun": True,
            "wouldChange": {"createConfig": True, "addScripts": True, "addDependency": True},
        }
        assert (project / "package.json").read_text() == before
        assert not (project / "quapp.config.json").exists()

    def test_already_initialized(self, project, reporter):
        run_init(DevOptions(command="init", yes=True), reporter, cwd=project)
        result = run_init(DevOptions(command="init", yes=True), reporter, cwd=project)
        assert result.success
        assert result.payload["alreadyInitialized"] is True

    def test_keeps_existing_scripts_without_force(self, tmp_path, reporter, write_package_json):
        write_package_json(tmp_path, {"name": "a", "scripts": {"dev": "vite"}})

        result = run_init(DevOptions(command="init", yes=True), reporter, cwd=tmp_path)

        assert "script:dev" not in result.payload["changes"]
        assert read_pkg(tmp_path)["scripts"]["dev"] == "vite"

    def test_force_overwrites(self, tmp_path, reporter, write_package_json):
        write_package_json(tmp_path, {"name": "a", "scripts": {"dev": "vite"}})
        (tmp_path / "quapp.config.json").write_text('{"server": {"port": 1234}}')

        run_init(DevOptions(command="init", yes=True, force=True), reporter, cwd=tmp_path)

        assert read_pkg(tmp_path)["scripts"]["dev"] == "quapp serve"
        config = json.loads((tmp_path / "quapp.config.json").read_text())
        assert config["server"]["port"] == 5173

    def test_missing_package_json(self, tmp_path, reporter):
        result = run_init(DevOptions(command="init", yes=True), reporter, cwd=tmp_path)
        assert result.error_code == "NO_PACKAGE_JSON"
        assert result.exit_code == 4

    def test_invalid_package_json(self, tmp_path, reporter):
        (tmp_path / "package.json").write_text("{ nope")
        result = run_init(DevOptions(command="init", yes=True), reporter, cwd=tmp_path)
        assert result.error_code == "INVALID_PACKAGE_JSON"
        assert result.exit_code == 4
