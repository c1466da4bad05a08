"""Command results and the exit-code policy.

Every handler returns exactly one ``CommandResult``. The run loop turns it
into a process exit code with ``resolve_exit_code`` and, in JSON mode, into
the single document written on stdout via ``CommandResult.to_dict``.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from quapp.constants import ERROR_CODE_EXIT_CODES, ExitCode


@dataclass
class CommandResult:
    """Outcome of one handler run.

    Attributes:
        success: Whether the command completed
        error_code: Stable machine-readable code (e.g. "NO_BUILD_SCRIPT")
        error: Human-readable error message
        suggestion: Actionable remediation for the user or agent
        exit_code: Explicit exit code override
        cancelled: User declined a confirmation or interrupted the run
        payload: Handler-specific fields, keyed by their JSON names
    """

    success: bool
    error_code: str | None = None
    error: str | None = None
    suggestion: str | None = None
    exit_code: int | None = None
    cancelled: bool = False
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **payload: Any) -> "CommandResult":
        return cls(success=True, payload=payload)

    @classmethod
    def failure(
        cls,
        error_code: str,
        error: str,
        *,
        suggestion: str | None = None,
        exit_code: int | None = None,
        **payload: Any,
    ) -> "CommandResult":
        return cls(
            success=False,
            error_code=error_code,
            error=error,
            suggestion=suggestion,
            exit_code=exit_code,
            payload=payload,
        )

    @classmethod
    def cancelled_run(cls, **payload: Any) -> "CommandResult":
        return cls(
            success=False,
            cancelled=True,
            exit_code=ExitCode.USER_CANCELLED,
            payload=payload,
        )

    def to_dict(self) -> dict[str, Any]:
        """Render the JSON result schema.

        Cancellation is reported with ``cancelled: true`` instead of an
        error. Keys with no value are omitted.
        """
        data: dict[str, Any] = {"success": self.success}
        if self.cancelled:
            data["cancelled"] = True
        else:
            if self.error_code is not None:
                data["errorCode"] = self.error_code
            if self.error is not None:
                data["error"] = self.error
            if self.suggestion is not None:
                data["suggestion"] = self.suggestion
        for key, value in self.payload.items():
            if key not in data:
                data[key] = value
        return data


def resolve_exit_code(result: CommandResult | None, errors: Sequence[str] = ()) -> int:
    """Map parse errors or a handler result to a process exit code.

    First match wins:
        1. parse/scoping errors present -> INVALID_ARGS
        2. cancelled -> USER_CANCELLED
        3. success -> SUCCESS
        4. explicit exit_code -> that value
        5. known error_code category -> its code
        6. otherwise -> GENERAL_ERROR
    """
    if errors:
        return ExitCode.INVALID_ARGS
    if result is None:
        return ExitCode.GENERAL_ERROR
    if result.cancelled:
        return ExitCode.USER_CANCELLED
    if result.success:
        return ExitCode.SUCCESS
    if result.exit_code is not None:
        return int(result.exit_code)
    if result.error_code in ERROR_CODE_EXIT_CODES:
        return ERROR_CODE_EXIT_CODES[result.error_code]
    return ExitCode.GENERAL_ERROR


def invalid_args_result(errors: Sequence[str], help_hint: str) -> CommandResult:
    """Result reported when parsing or scoping failed."""
    return CommandResult.failure(
        "INVALID_ARGS",
        "; ".join(errors),
        suggestion=f'Run "{help_hint}" for usage',
        exit_code=ExitCode.INVALID_ARGS,
        errors=list(errors),
    )
