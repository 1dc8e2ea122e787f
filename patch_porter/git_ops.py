"""
Git operations for patch_porter.

Provides a thin wrapper around GitPython's command interface for listing
branches and commits, exporting patches and applying them. Every call is a
fresh git invocation; failures surface as GitCommandError.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

# One line per commit: <short-hash> <date> > <subject> <decorations> [<author>]
LOG_FORMAT = "%h %ad > %s%d [%an]"
LOG_DATE_FORMAT = "short"

SHORT_HASH_LENGTH = 7
BRANCH_MARKER_WIDTH = 2


@dataclass
class Choice:
    """A selectable entry: a human-readable title and the value it stands for."""

    title: str
    value: Any


def _non_blank_lines(output: str) -> list[str]:
    return [line for line in output.splitlines() if line]


def parse_branch_listing(output: str) -> list[Choice]:
    """Turn `git branch` output into branch choices."""
    branches = []
    for line in _non_blank_lines(output):
        # Strip the "* " / "  " current-branch marker
        name = line[BRANCH_MARKER_WIDTH:]
        branches.append(Choice(title=name, value=name))
    return branches


def parse_commit_listing(output: str) -> list[Choice]:
    """Turn `git log` output (LOG_FORMAT) into commit choices keyed by short hash."""
    return [
        Choice(title=line, value=line[:SHORT_HASH_LENGTH])
        for line in _non_blank_lines(output)
    ]


def list_repositories(root: Path) -> list[Choice]:
    """
    List the immediate subdirectories of root as candidate repositories.

    Entries are not checked for being git repositories; a bad pick fails later
    when git runs against it. Raises NotADirectoryError / FileNotFoundError
    if root itself is not a directory.
    """
    root = Path(root).expanduser().resolve()
    if not root.exists():
        raise FileNotFoundError(f"Repositories root not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Repositories root is not a directory: {root}")

    return [
        Choice(title=entry.name, value=str(entry))
        for entry in sorted(root.iterdir(), key=lambda p: p.name)
        if entry.is_dir()
    ]


class GitRepository:
    """Wrapper around a working copy for patch export and apply."""

    def __init__(self, path: Path):
        """Initialize repository wrapper."""
        self.path = Path(path).resolve()
        try:
            self.repo = Repo(self.path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise ValueError(f"Not a valid git repository: {self.path}") from e

    def list_branches(self) -> list[Choice]:
        """List local branches."""
        return parse_branch_listing(self.repo.git.branch())

    def list_commits(self, branch: str) -> list[Choice]:
        """List the history of a branch, newest first."""
        output = self.repo.git.log(
            f"--pretty=format:{LOG_FORMAT}",
            f"--date={LOG_DATE_FORMAT}",
            branch,
        )
        return parse_commit_listing(output)

    def current_branch(self) -> str | None:
        """Get the checked-out branch name, or None when HEAD is detached."""
        if self.repo.head.is_detached:
            return None
        return self.repo.active_branch.name

    def format_patches(self, range_spec: str, output_dir: Path) -> None:
        """
        Export one patch file per commit in range_spec into output_dir.

        range_spec is either a branch (whole history from the root commit)
        or a "<start>..<end>" range.
        """
        self.repo.git.format_patch("-o", str(Path(output_dir).resolve()), "--root", range_spec)

    def checkout(self, ref: str) -> None:
        """Switch the working copy to ref ("-" means the previous branch)."""
        self.repo.git.checkout(ref)

    def apply_patch(self, patch_path: Path, three_way: bool = True) -> None:
        """Apply a single mailbox patch on top of the current branch."""
        args = ["--3way"] if three_way else []
        args.append(str(Path(patch_path).resolve()))
        self.repo.git.am(*args)
