"""
Interactive prompt pipeline.

A transfer is configured by an ordered list of stages. Each stage can look at
the answers given so far to build its choices or its default, so the pipeline
is a plain loop over stage descriptors.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Literal, Protocol

import click
from rich.console import Console
from rich.table import Table

from .config import Preferences
from .git_ops import Choice, GitRepository, list_repositories

console = Console()

Answers = dict[str, Any]


class PipelineError(Exception):
    """Raised when the prompt pipeline cannot continue."""


class PromptCancelled(PipelineError):
    """Raised when the operator aborts a prompt."""


# Stage names, in the order they are asked
REPOS = "repos"
FROM_REPO = "from_repo"
FROM_BRANCH = "from_branch"
TO_REPO = "to_repo"
TO_BRANCH = "to_branch"
SINCE_COMMIT = "since"


@dataclass
class Stage:
    """Descriptor for a single question."""

    name: str
    message: str
    kind: Literal["text", "select"]
    # Builds the choices of a select stage from earlier answers
    choices: Callable[[Answers], list[Choice]] | None = None
    # Builds the default of a text stage from earlier answers
    initial: Callable[[Answers], str | None] | None = None
    # Turns the raw answer into the stored value
    format: Callable[[Any, Answers], Any] | None = None


@dataclass
class PipelineResult:
    """Answers collected by the pipeline plus the choices each select stage showed."""

    answers: Answers = field(default_factory=dict)
    choices: dict[str, list[Choice]] = field(default_factory=dict)


class Prompter(Protocol):
    """Source of answers for the pipeline."""

    def ask_text(self, message: str, default: str | None) -> str: ...

    def ask_select(self, message: str, choices: list[Choice]) -> Any: ...


class ConsolePrompter:
    """Asks questions on the terminal."""

    def ask_text(self, message: str, default: str | None) -> str:
        try:
            return click.prompt(message, default=default, type=str)
        except click.Abort as e:
            raise PromptCancelled(message) from e

    def ask_select(self, message: str, choices: list[Choice]) -> Any:
        table = Table(title=message, show_header=False, box=None)
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Choice", style="white")
        for number, choice in enumerate(choices, start=1):
            table.add_row(str(number), choice.title)
        console.print(table)

        try:
            number = click.prompt(
                "Select",
                type=click.IntRange(1, len(choices)),
                default=1,
            )
        except click.Abort as e:
            raise PromptCancelled(message) from e
        return choices[number - 1].value


def run_pipeline(stages: list[Stage], prompter: Prompter) -> PipelineResult:
    """
    Ask every stage in order.

    A PromptCancelled from the prompter propagates unchanged; no later stage
    is evaluated.
    """
    result = PipelineResult()

    for stage in stages:
        answers = result.answers

        if stage.kind == "text":
            default = stage.initial(answers) if stage.initial else None
            raw = prompter.ask_text(stage.message, default)
        else:
            choices = stage.choices(answers) if stage.choices else []
            if not choices:
                raise PipelineError(f"Nothing to choose from for '{stage.message}'")
            result.choices[stage.name] = choices
            raw = prompter.ask_select(stage.message, choices)

        answers[stage.name] = stage.format(raw, answers) if stage.format else raw

    return result


def build_transfer_stages(preferences: Preferences, preferences_path: Path) -> list[Stage]:
    """Build the six questions that configure a transfer."""

    def expand_repos_root(value: str, answers: Answers) -> list[Choice]:
        repos_root = Path(value).expanduser()
        saved = Preferences(repos_root=repos_root).save(preferences_path)
        if not saved.success:
            console.print(f"[yellow]Could not save preferences to {saved.path}: {saved.error}[/yellow]")
        return list_repositories(repos_root)

    def branches_of(repo_stage: str) -> Callable[[Answers], list[Choice]]:
        return lambda answers: GitRepository(answers[repo_stage]).list_branches()

    return [
        Stage(
            name=REPOS,
            message="Directory containing the repositories to copy commits between",
            kind="text",
            initial=lambda answers: str(preferences.repos_root),
            format=expand_repos_root,
        ),
        Stage(
            name=FROM_REPO,
            message="From Repo:",
            kind="select",
            choices=lambda answers: answers[REPOS],
        ),
        Stage(
            name=FROM_BRANCH,
            message="From Branch:",
            kind="select",
            choices=branches_of(FROM_REPO),
        ),
        Stage(
            name=TO_REPO,
            message="To Repo:",
            kind="select",
            choices=lambda answers: answers[REPOS],
        ),
        Stage(
            name=TO_BRANCH,
            message="To Branch:",
            kind="select",
            choices=branches_of(TO_REPO),
        ),
        Stage(
            name=SINCE_COMMIT,
            message="Since Commit:",
            kind="select",
            choices=lambda answers: GitRepository(answers[FROM_REPO]).list_commits(
                answers[FROM_BRANCH]
            ),
        ),
    ]
