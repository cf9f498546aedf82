"""Interactive confirmation prompts."""

from typing import Protocol, Sequence

import click
import typer

__all__ = ["Prompter", "ConsolePrompter"]


class Prompter(Protocol):
    """Collaborator asked to confirm or choose during an import run."""

    def confirm(self, message: str) -> bool:
        ...

    def select(self, message: str, choices: Sequence[str]) -> str:
        ...


class ConsolePrompter:
    """Prompter that asks on the terminal."""

    def confirm(self, message: str) -> bool:
        return typer.confirm(message, default=False)

    def select(self, message: str, choices: Sequence[str]) -> str:
        typer.echo(message)
        for number, choice in enumerate(choices, start=1):
            typer.echo(f"  {number}) {choice}")
        number = typer.prompt(
            "Choice", type=click.IntRange(1, len(choices)), default=1
        )
        return choices[number - 1]
