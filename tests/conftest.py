"""
Shared test fixtures for the quapp CLI tests.

- Reporters writing into in-memory streams
- Temporary Vite projects with a package.json
"""

import io
import json
from pathlib import Path
from typing import Any

import pytest

from quapp.output import OutputSettings, Reporter

# ============================================================================
# OUTPUT FIXTURES
# ============================================================================


@pytest.fixture
def make_reporter():
    """Factory for a Reporter whose consoles write to StringIO.

    Read output back with ``reporter.console.file.getvalue()`` (stdout) and
    ``reporter.err_console.file.getvalue()`` (stderr).
    """

    def _make(json_mode: bool = False, verbose: bool = False, color: bool = False) -> Reporter:
        return Reporter(
            OutputSettings(json=json_mode, verbose=verbose, color=color),
            stdout=io.StringIO(),
            stderr=io.StringIO(),
        )

    return _make


@pytest.fixture
def reporter(make_reporter):
    """Human-mode reporter."""
    return make_reporter()


@pytest.fixture
def json_reporter(make_reporter):
    """JSON-mode reporter."""
    return make_reporter(json_mode=True)


# ============================================================================
# PROJECT FIXTURES
# ============================================================================


def _write_package_json(directory: Path, data: dict[str, Any]) -> Path:
    path = directory / "package.json"
    path.write_text(json.dumps(data, indent=2) + "\n")
    return path


@pytest.fixture
def write_package_json():
    """Write ``data`` as package.json into a directory."""
    return _write_package_json


@pytest.fixture
def sample_package() -> dict[str, Any]:
    return {
        "name": "my-app",
        "version": "1.2.3",
        "author": "Jane Doe",
        "scripts": {"build": "vite build"},
    }


@pytest.fixture
def vite_project(tmp_path, sample_package):
    """Project directory with package.json and a local Vite binary."""
    _write_package_json(tmp_path, sample_package)
    bin_dir = tmp_path / "node_modules" / ".bin"
    bin_dir.mkdir(parents=True)
    (bin_dir / "vite").write_text("#!/bin/sh\n")
    (bin_dir / "vite.cmd").write_text("@echo off\n")
    return tmp_path


