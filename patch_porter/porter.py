"""
Patch transfer between repositories.

Exports a range of commits from the source branch with git format-patch and
replays them onto the destination branch with git am, one file at a time.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from .config import PorterSettings
from .git_ops import Choice, GitRepository

console = Console()


@dataclass
class TransferRequest:
    """Everything the operator chose for one transfer."""

    source_repo: Path
    source_branch: str
    dest_repo: Path
    dest_branch: str
    since_commit: str
    # Newest-first history of the source branch, as shown to the operator
    commits: list[Choice]


@dataclass
class TransferResult:
    """Result of a completed transfer."""

    range_spec: str
    patches: list[Path] = field(default_factory=list)
    restored_branch: bool = False


def select_export_range(commits: list[Choice], since_commit: str, branch: str) -> str:
    """
    Compute the format-patch revision argument for "since <commit>".

    commits is newest first. The selected commit itself is included: the
    range starts after the next older commit. Picking the oldest commit
    exports the whole branch from its root.
    """
    index = next(
        (i for i, commit in enumerate(commits) if commit.value == since_commit),
        None,
    )
    if index is None:
        raise ValueError(f"Commit {since_commit} is not in the history of {branch}")

    if index == len(commits) - 1:
        return branch
    return f"{commits[index + 1].value}..{branch}"


def reset_patch_dir(patches_dir: Path) -> None:
    """Delete the scratch directory if present and recreate it empty."""
    shutil.rmtree(patches_dir, ignore_errors=True)
    patches_dir.mkdir(parents=True)


def list_patches(patches_dir: Path) -> list[Path]:
    """Patch files in application order (lexicographic by file name)."""
    return [patches_dir / name for name in sorted(p.name for p in patches_dir.iterdir())]


class PatchPorter:
    """Runs a single transfer with the given settings."""

    def __init__(self, settings: PorterSettings):
        self.settings = settings

    @property
    def patches_dir(self) -> Path:
        return Path(self.settings.patches_dir).expanduser().resolve()

    def transfer(self, request: TransferRequest) -> TransferResult:
        """
        Export the chosen commits and apply them to the destination branch.

        Any git failure propagates immediately. Nothing is rolled back: the
        patch directory stays populated and patches already applied stay
        applied.
        """
        range_spec = select_export_range(
            request.commits, request.since_commit, request.source_branch
        )
        result = TransferResult(range_spec=range_spec)

        source = GitRepository(request.source_repo)
        dest = GitRepository(request.dest_repo)

        patches_dir = self.patches_dir
        reset_patch_dir(patches_dir)

        console.print(f"[dim]Exporting {range_spec} from {source.path}...[/dim]")
        source.format_patches(range_spec, patches_dir)
        patches = list_patches(patches_dir)
        console.print(f"[dim]Exported {len(patches)} patches to {patches_dir}[/dim]")

        previous_branch = dest.current_branch()
        console.print(f"[dim]Checking out {request.dest_branch} in {dest.path}...[/dim]")
        dest.checkout(request.dest_branch)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Applying patches...", total=len(patches))

            for patch in patches:
                progress.update(task, description=f"Applying {patch.name}...")
                dest.apply_patch(patch, three_way=self.settings.three_way)
                result.patches.append(patch)
                console.print(f"  [green]✓[/green] {patch.name}")
                progress.advance(task)

        # "-" would walk to an unrelated branch if no switch happened
        if previous_branch != request.dest_branch:
            dest.checkout("-")
            result.restored_branch = True

        self._print_summary(request, result)
        return result

    def _print_summary(self, request: TransferRequest, result: TransferResult) -> None:
        """Print transfer summary."""
        console.print("\n[bold]Transfer Summary:[/bold]")
        console.print(
            f"  [green]✓ Applied {len(result.patches)} patches to "
            f"{request.dest_branch}[/green]"
        )
        console.print(f"  Range: {result.range_spec}")
        if result.restored_branch:
            console.print(f"  Restored previous branch in {request.dest_repo}")
