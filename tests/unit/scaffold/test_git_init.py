"""Unit tests for git repository initialisation."""

from unittest.mock import patch

import pytest

from quapp.modules.subprocess_helper import SubprocessResult
from quapp.scaffold.git import DEFAULT_GITIGNORE, GitError, init_repository


class TestInitRepository:
    @patch("quapp.scaffold.git.safe_run")
    @patch("quapp.scaffold.git.is_git_available", return_value=True)
    def test_init_writes_gitignore(self, mock_available, mock_run, tmp_path):
        mock_run.return_value = SubprocessResult(0, "Initialized empty Git repository", "")

        init_repository(tmp_path)

        assert mock_run.call_args.args[0] == ["git", "init"]
        assert mock_run.call_args.kwargs["cwd"] == tmp_path
        lines = (tmp_path / ".gitignore").read_text().splitlines()
        assert lines == DEFAULT_GITIGNORE

    @patch("quapp.scaffold.git.safe_run")
    @patch("quapp.scaffold.git.is_git_available", return_value=True)
    def test_existing_gitignore_kept(self, mock_available, mock_run, tmp_path):
        mock_run.return_value = SubprocessResult(0, "", "")
        (tmp_path / ".gitignore").write_text("custom\n")
        init_repository(tmp_path)
        assert (tmp_path / ".gitignore").read_text() == "custom\n"

    @patch("quapp.scaffold.git.safe_run")
    @patch("quapp.scaffold.git.is_git_available", return_value=False)
    def test_git_missing(self, mock_available, mock_run, tmp_path):
        with pytest.raises(GitError) as exc_info:
            init_repository(tmp_path)
        assert "git-scm.com" in exc_info.value.hint
        mock_run.assert_not_called()

    @patch("quapp.scaffold.git.safe_run")
    @patch("quapp.scaffold.git.is_git_available", return_value=True)
    def test_git_init_fails(self, mock_available, mock_run, tmp_path):
        mock_run.return_value = SubprocessResult(128, "", "fatal: cannot mkdir\n")
        with pytest.raises(GitError, match="fatal: cannot mkdir"):
            init_repository(tmp_path)
        assert not (tmp_path / ".gitignore").exists()
