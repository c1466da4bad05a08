"""Unit tests for CommandResult and the exit-code policy."""

import pytest

from quapp.constants import ExitCode
from quapp.result import CommandResult, invalid_args_result, resolve_exit_code


class TestResolveExitCode:
    """First match wins."""

    def test_parse_errors_win(self):
        result = CommandResult.ok()
        assert resolve_exit_code(result, ["bad flag"]) == ExitCode.INVALID_ARGS

    def test_no_result_is_general_error(self):
        assert resolve_exit_code(None) == ExitCode.GENERAL_ERROR

    def test_cancelled(self):
        assert resolve_exit_code(CommandResult.cancelled_run()) == 130

    def test_success(self):
        assert resolve_exit_code(CommandResult.ok(port=5173)) == 0

    def test_explicit_exit_code(self):
        result = CommandResult.failure("NO_BUILD_SCRIPT", "No build script", exit_code=3)
        assert resolve_exit_code(result) == 3

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("INVALID_ARGS", 2),
            ("MISSING_NAME", 2),
            ("INVALID_TEMPLATE", 3),
            ("BUILD_FAILED", 3),
            ("NO_BUILD_SCRIPT", 4),
            ("PACKAGE_JSON_ERROR", 4),
            ("VITE_NOT_FOUND", 5),
            ("NETWORK_ERROR", 5),
        ],
    )
    def test_error_code_category(self, code, expected):
        assert resolve_exit_code(CommandResult.failure(code, "x")) == expected

    def test_unknown_error_code(self):
        assert resolve_exit_code(CommandResult.failure("SOMETHING_ELSE", "x")) == 1

    def test_exit_code_aliases(self):
        assert ExitCode.TEMPLATE_NOT_FOUND == ExitCode.BUILD_FAILED == 3
        assert ExitCode.NETWORK_ERROR == ExitCode.MISSING_DEPENDENCY == 5


class TestToDict:
    """JSON result schema."""

    def test_success_payload(self):
        data = CommandResult.ok(outputFile="app.qpp", size=10).to_dict()
        assert data == {"success": True, "outputFile": "app.qpp", "size": 10}

    def test_failure_fields(self):
        data = CommandResult.failure(
            "NO_BUILD_SCRIPT", "No build script", suggestion="Add one", exit_code=4
        ).to_dict()
        assert data == {
            "success": False,
            "errorCode": "NO_BUILD_SCRIPT",
            "error": "No build script",
            "suggestion": "Add one",
        }

    def test_missing_suggestion_omitted(self):
        data = CommandResult.failure("BUILD_FAILED", "Build failed").to_dict()
        assert "suggestion" not in data

    def test_cancelled_has_no_error(self):
        data = CommandResult.cancelled_run().to_dict()
        assert data == {"success": False, "cancelled": True}

    def test_payload_cannot_override_schema_keys(self):
        data = CommandResult(success=False, error="real", payload={"error": "fake"}).to_dict()
        assert data["error"] == "real"


class TestInvalidArgsResult:
    def test_shape(self):
        result = invalid_args_result(["a", "b"], "quapp serve --help")
        data = result.to_dict()
        assert data["errorCode"] == "INVALID_ARGS"
        assert data["error"] == "a; b"
        assert data["errors"] == ["a", "b"]
        assert data["suggestion"] == 'Run "quapp serve --help" for usage'
        assert resolve_exit_code(result) == 2
