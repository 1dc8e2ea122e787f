"""Pytest configuration and fixtures for patch_porter tests."""

import tempfile
from pathlib import Path

import pytest
from git import Repo


def init_repo(repo_path: Path, branch: str) -> Repo:
    """Initialize a repository with a configured identity on an unborn branch."""
    repo_path.mkdir(parents=True)
    repo = Repo.init(repo_path)

    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    repo.git.checkout("-b", branch)
    return repo


def commit_file(repo: Repo, name: str, content: str, message: str) -> str:
    """Write a file, commit it and return the short hash."""
    (Path(repo.working_tree_dir) / name).write_text(content)
    repo.index.add([name])
    commit = repo.index.commit(message)
    return commit.hexsha[:7]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def repos_root(temp_dir: Path):
    """Directory that holds the source and destination repositories."""
    root = temp_dir / "repos"
    root.mkdir()
    yield root


@pytest.fixture
def source_repo(repos_root: Path):
    """
    Source repository with a `feature` branch of three commits.

    Commits c2 (root), c1, c0 each add one new file.
    """
    repo_path = repos_root / "source"
    repo = init_repo(repo_path, "feature")

    commit_file(repo, "a.txt", "a\n", "Add a")
    commit_file(repo, "b.txt", "b\n", "Add b")
    commit_file(repo, "c.txt", "c\n", "Add c")

    yield repo_path


@pytest.fixture
def dest_repo(repos_root: Path):
    """Destination repository with `main` and an `other` branch checked out."""
    repo_path = repos_root / "dest"
    repo = init_repo(repo_path, "main")

    commit_file(repo, "README.md", "# Destination\n", "Initial commit")
    repo.git.checkout("-b", "other")

    yield repo_path


@pytest.fixture
def preferences_path(temp_dir: Path):
    """Location for the preferences file."""
    return temp_dir / "prefs" / "defaults.json"


@pytest.fixture
def patches_dir(temp_dir: Path):
    """Location for the scratch patch directory."""
    return temp_dir / "patches"
