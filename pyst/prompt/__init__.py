"""Interactive prompts backed by click."""

import logging
from typing import Sequence

import click

from ..errors import PromptCancelled

logger = logging.getLogger(__name__)


class ClickPrompter:
    """Terminal prompts. Ctrl-C or EOF raise PromptCancelled."""

    def text(self, message: str, default: str = "") -> str:
        try:
            return click.prompt(message, default=default, show_default=bool(default))
        except click.Abort as e:
            raise PromptCancelled(message) from e

    def select(self, message: str, options: Sequence[str]) -> str:
        """Pick one option by typing its name or its 1-based position."""
        if not options:
            raise PromptCancelled(f"{message} (nothing to choose from)")
        for index, option in enumerate(options, start=1):
            click.echo(f"  {index}) {option}")
        numbers = [str(i) for i in range(1, len(options) + 1)]
        try:
            answer = click.prompt(
                message,
                type=click.Choice(list(options) + numbers),
                default=options[0],
                show_choices=False,
            )
        except click.Abort as e:
            raise PromptCancelled(message) from e
        if answer in numbers and answer not in options:
            return options[int(answer) - 1]
        return answer

    def confirm(self, message: str, default: bool = True) -> bool:
        try:
            return click.confirm(message, default=default)
        except click.Abort as e:
            raise PromptCancelled(message) from e

    def editor(self, message: str, extension: str = ".md") -> str:
        """Open $EDITOR; an editor closed without saving yields ''."""
        click.echo(f"{message} (opening editor)")
        try:
            content = click.edit(text="", extension=extension)
        except click.ClickException as e:
            raise PromptCancelled(f"{message}: {e.format_message()}") from e
        if content is None:
            logger.debug("Editor closed without saving")
            return ""
        return content.strip()
