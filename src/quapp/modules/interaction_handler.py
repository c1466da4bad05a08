"""User interaction abstraction for the CLI and for tests.

Handlers that need answers (build metadata, init confirmation, scaffold
choices) take an ``InteractionHandler`` instead of calling click directly,
so tests can script the answers.

Example:
    >>> handler = CLIInteractionHandler()
    >>> choices = [("react", "React"), ("vue", "Vue")]
    >>> idx = handler.prompt_choice("Select a framework:", choices)
    >>> framework = choices[idx][0]

    Testing example:
    >>> test_handler = MockInteractionHandler(choice_responses=[1], confirm_responses=[True])
    >>> test_handler.prompt_choice("Select:", [("a", "A"), ("b", "B")])
    1
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

import click

Validator = Callable[[str], str | None]


@runtime_checkable
class InteractionHandler(Protocol):
    """Protocol for user interaction."""

    def prompt_text(
        self, message: str, default: str | None = None, validate: Validator | None = None
    ) -> str:
        """Prompt for a line of text.

        Args:
            message: Prompt message to display
            default: Value returned when the user just presses Enter
            validate: Returns an error message for bad input, None when valid

        Raises:
            click.Abort: If the user cancels (CLI implementation)
        """
        ...

    def prompt_choice(self, message: str, choices: list[tuple[str, str]]) -> int:
        """Prompt user to select one of ``(value, label)`` pairs.

        Returns:
            Zero-based index of selected choice

        Raises:
            ValueError: If choices is empty
            click.Abort: If the user cancels (CLI implementation)
        """
        ...

    def confirm(self, message: str, default: bool = True) -> bool:
        """Prompt for yes/no confirmation."""
        ...


class CLIInteractionHandler:
    """Click-based terminal interaction.

    Args:
        color: Style prompts with ANSI colours (False for ``--no-color``)
    """

    def __init__(self, color: bool = True):
        self.color = color

    def _style(self, text: str, **styles) -> str:
        return click.style(text, **styles) if self.color else text

    def prompt_text(
        self, message: str, default: str | None = None, validate: Validator | None = None
    ) -> str:
        while True:
            try:
                value = click.prompt(
                    self._style(message, fg="cyan"),
                    default=default,
                    type=str,
                    show_default=default is not None,
                )
            except (KeyboardInterrupt, EOFError):
                click.echo()
                raise click.Abort() from None
            value = value.strip()
            error = validate(value) if validate else None
            if error is None:
                return value
            click.echo(self._style(error, fg="red"))

    def prompt_choice(self, message: str, choices: list[tuple[str, str]]) -> int:
        """Numbered menu; re-prompts until a valid number is entered."""
        if not choices:
            raise ValueError("choices cannot be empty")

        click.echo()
        click.echo(self._style(message, fg="cyan", bold=True))
        for i, (_value, label) in enumerate(choices, 1):
            click.echo(f"  {self._style(str(i), fg='cyan')}. {label}")
        click.echo()

        while True:
            try:
                choice_str = click.prompt("Enter choice", type=str, default="1")
                choice_num = int(choice_str)
                if 1 <= choice_num <= len(choices):
                    return choice_num - 1
                hint = f"Please enter a number between 1 and {len(choices)}"
                click.echo(self._style(hint, fg="red"))
            except ValueError:
                click.echo(self._style("Please enter a valid number", fg="red"))
            except (KeyboardInterrupt, EOFError):
                click.echo()
                raise click.Abort() from None

    def confirm(self, message: str, default: bool = True) -> bool:
        try:
            return click.confirm(self._style(message, fg="yellow"), default=default)
        except (KeyboardInterrupt, EOFError):
            click.echo()
            raise click.Abort() from None


class MockInteractionHandler:
    """Interaction handler with pre-programmed responses.

    Records every interaction for verification in tests. Running out of
    responses raises IndexError so a test notices an unexpected prompt.

    Example:
        >>> handler = MockInteractionHandler(text_responses=["my-app"], confirm_responses=[False])
        >>> handler.prompt_text("Project name:")
        'my-app'
        >>> handler.confirm("Continue?")
        False
        >>> len(handler.interactions)
        2
    """

    def __init__(
        self,
        text_responses: list[str] | None = None,
        choice_responses: list[int] | None = None,
        confirm_responses: list[bool] | None = None,
    ):
        self.text_responses = text_responses or []
        self.choice_responses = choice_responses or []
        self.confirm_responses = confirm_responses or []
        self.interactions: list[dict] = []
        self._text_index = 0
        self._choice_index = 0
        self._confirm_index = 0

    def _next(self, kind: str, responses: list, index: int):
        if index >= len(responses):
            raise IndexError(
                f"No more {kind} responses available. "
                f"Provided {len(responses)}, needed {index + 1}"
            )
        return responses[index]

    def prompt_text(
        self, message: str, default: str | None = None, validate: Validator | None = None
    ) -> str:
        response = self._next("text", self.text_responses, self._text_index)
        self._text_index += 1
        if response == "" and default is not None:
            response = default
        if validate is not None:
            error = validate(response)
            if error is not None:
                raise ValueError(f"Pre-programmed response {response!r} rejected: {error}")
        self.interactions.append(
            {"type": "text", "message": message, "default": default, "response": response}
        )
        return response

    def prompt_choice(self, message: str, choices: list[tuple[str, str]]) -> int:
        if not choices:
            raise ValueError("choices cannot be empty")

        response = self._next("choice", self.choice_responses, self._choice_index)
        self._choice_index += 1
        if not 0 <= response < len(choices):
            raise ValueError(
                f"Invalid pre-programmed response {response} for {len(choices)} choices"
            )
        self.interactions.append(
            {"type": "choice", "message": message, "choices": choices, "response": response}
        )
        return response

    def confirm(self, message: str, default: bool = True) -> bool:
        response = self._next("confirm", self.confirm_responses, self._confirm_index)
        self._confirm_index += 1
        self.interactions.append(
            {"type": "confirm", "message": message, "default": default, "response": response}
        )
        return response

    def get_interactions_by_type(self, interaction_type: str) -> list[dict]:
        return [i for i in self.interactions if i["type"] == interaction_type]
