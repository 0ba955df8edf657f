"""Interactive prompts for hostops.

QuestionaryPrompter implements the core Prompter interface with Questionary's
async prompts so it can be awaited inside the running event loop.
"""

from __future__ import annotations

from typing import Sequence

import questionary
import typer

from hostops.cli.common.output import console
from hostops.cli.common.tui_style import (
    QUESTIONARY_STYLE_CONFIRM,
    QUESTIONARY_STYLE_INPUT,
    QUESTIONARY_STYLE_SELECT,
)
from hostops.core.backends import Prompter, Repository


def _answered(answer):
    """Questionary returns None when the user cancels (Ctrl-C)."""
    if answer is None:
        raise typer.Abort()
    return answer


def repository_resource_name(
    project_id: str, location: str, connection_id: str, repository_id: str
) -> str:
    """Return the full resource name of a connected repository."""
    return (
        f"projects/{project_id}/locations/{location}"
        f"/connections/{connection_id}/repositories/{repository_id}"
    )


class QuestionaryPrompter:
    """Prompter backed by Questionary."""

    async def text(self, message: str, *, default: str = "") -> str:
        answer = await questionary.text(
            message, default=default, style=QUESTIONARY_STYLE_INPUT
        ).ask_async()
        return str(_answered(answer))

    async def select(
        self, message: str, choices: Sequence[str], *, default: str | None = None
    ) -> str:
        answer = await questionary.select(
            message,
            choices=list(choices),
            default=default,
            style=QUESTIONARY_STYLE_SELECT,
            instruction="Use ↑/↓ then Enter",
        ).ask_async()
        return str(_answered(answer))

    async def confirm(self, message: str, *, default: bool = False) -> bool:
        # Questionary renders `instruction=...` inline next to the echoed answer.
        console.print("[meta]Use y/n then Enter[/]")
        answer = await questionary.confirm(
            message,
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            auto_enter=False,
        ).ask_async()
        return bool(_answered(answer))


class PromptRepositoryLinker:
    """Asks for an already connected repository and returns its reference."""

    def __init__(self, prompter: Prompter) -> None:
        self.prompter = prompter

    async def link_repository(self, project_id: str, location: str) -> Repository:
        connection_id = (
            await self.prompter.text("Repository connection id", default="")
        ).strip()
        repository_id = (
            await self.prompter.text("Repository id (owner-repo)", default="")
        ).strip()
        if not connection_id or not repository_id:
            raise typer.BadParameter("Connection id and repository id are required.")
        return Repository(
            name=repository_resource_name(
                project_id, location, connection_id, repository_id
            )
        )
