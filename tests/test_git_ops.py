"""Tests for git operations module."""

from pathlib import Path

import pytest
from git import Repo
from git.exc import GitCommandError

from patch_porter.git_ops import (
    Choice,
    GitRepository,
    list_repositories,
    parse_branch_listing,
    parse_commit_listing,
)


class TestParseBranchListing:
    """Tests for `git branch` output parsing."""

    def test_strips_marker_and_blank_lines(self):
        """Test that the selection marker is removed and blank lines dropped."""
        branches = parse_branch_listing("* main\n  dev\n")
        assert branches == [
            Choice(title="main", value="main"),
            Choice(title="dev", value="dev"),
        ]

    def test_blank_line_in_middle(self):
        """Test that an empty line between entries is ignored."""
        branches = parse_branch_listing("* main\n\n  dev")
        assert [b.value for b in branches] == ["main", "dev"]

    def test_empty_output(self):
        """Test that no output means no branches."""
        assert parse_branch_listing("") == []


class TestParseCommitListing:
    """Tests for `git log` output parsing."""

    def test_title_and_short_hash(self):
        """Test that the full line is the title and the hash prefix the value."""
        line = "abc1234 2024-01-01 > fix bug (HEAD -> main) [alice]"
        assert parse_commit_listing(line) == [Choice(title=line, value="abc1234")]

    def test_keeps_order_and_drops_blanks(self):
        """Test that order is preserved and blank lines are dropped."""
        output = (
            "aaaaaaa 2024-01-03 > third [bob]\n"
            "\n"
            "bbbbbbb 2024-01-02 > second [bob]\n"
            "ccccccc 2024-01-01 > first [bob]\n"
        )
        assert [c.value for c in parse_commit_listing(output)] == [
            "aaaaaaa",
            "bbbbbbb",
            "ccccccc",
        ]

    def test_longer_abbreviation_is_truncated(self):
        """Test that the value is always the leading seven characters."""
        line = "abc1234ef 2024-01-01 > subject [alice]"
        assert parse_commit_listing(line)[0].value == "abc1234"


class TestListRepositories:
    """Tests for repository discovery."""

    def test_lists_subdirectories(self, repos_root: Path):
        """Test that subdirectories become choices with absolute paths."""
        (repos_root / "beta").mkdir()
        (repos_root / "alpha").mkdir()
        (repos_root / "notes.txt").write_text("not a repo")

        repos = list_repositories(repos_root)
        assert [r.title for r in repos] == ["alpha", "beta"]
        assert repos[0].value == str(repos_root.resolve() / "alpha")

    def test_does_not_check_for_git(self, repos_root: Path):
        """Test that plain directories are still offered."""
        (repos_root / "plain").mkdir()
        assert [r.title for r in list_repositories(repos_root)] == ["plain"]

    def test_missing_root(self, temp_dir: Path):
        """Test that a missing root fails at listing time."""
        with pytest.raises(FileNotFoundError):
            list_repositories(temp_dir / "missing")

    def test_root_is_a_file(self, temp_dir: Path):
        """Test that a file root fails at listing time."""
        path = temp_dir / "file.txt"
        path.write_text("x")
        with pytest.raises(NotADirectoryError):
            list_repositories(path)


class TestGitRepository:
    """Tests for GitRepository wrapper."""

    def test_init_invalid_repo(self, temp_dir: Path):
        """Test initializing with invalid path raises error."""
        invalid_path = temp_dir / "not-a-repo"
        invalid_path.mkdir()

        with pytest.raises(ValueError, match="Not a valid git repository"):
            GitRepository(invalid_path)

    def test_list_branches(self, dest_repo: Path):
        """Test listing branches of a repository."""
        branches = GitRepository(dest_repo).list_branches()
        assert [b.value for b in branches] == ["main", "other"]

    def test_list_commits_newest_first(self, source_repo: Path):
        """Test that commits come back newest first with short hashes."""
        repo = Repo(source_repo)
        expected = [c.hexsha[:7] for c in repo.iter_commits("feature")]

        commits = GitRepository(source_repo).list_commits("feature")
        assert [c.value for c in commits] == expected
        assert "> Add c" in commits[0].title
        assert "[Test User]" in commits[0].title

    def test_list_commits_unknown_branch(self, source_repo: Path):
        """Test that an unknown branch is a git failure."""
        with pytest.raises(GitCommandError):
            GitRepository(source_repo).list_commits("no-such-branch")

    def test_current_branch(self, dest_repo: Path):
        """Test reading the checked-out branch."""
        assert GitRepository(dest_repo).current_branch() == "other"

    def test_current_branch_detached(self, dest_repo: Path):
        """Test that a detached HEAD has no current branch."""
        repo = Repo(dest_repo)
        repo.git.checkout("--detach")
        assert GitRepository(dest_repo).current_branch() is None

    def test_format_patches(self, source_repo: Path, temp_dir: Path):
        """Test exporting a range writes one file per commit."""
        output_dir = temp_dir / "out"
        commits = GitRepository(source_repo).list_commits("feature")

        GitRepository(source_repo).format_patches(f"{commits[2].value}..feature", output_dir)

        names = sorted(p.name for p in output_dir.iterdir())
        assert len(names) == 2
        assert names[0].startswith("0001-")
        assert names[1].startswith("0002-")

    def test_format_patches_from_root(self, source_repo: Path, temp_dir: Path):
        """Test exporting a bare branch includes the root commit."""
        output_dir = temp_dir / "out"
        GitRepository(source_repo).format_patches("feature", output_dir)
        assert len(list(output_dir.iterdir())) == 3

    def test_checkout_previous(self, dest_repo: Path):
        """Test that "-" switches back to the previous branch."""
        git_repo = GitRepository(dest_repo)
        git_repo.checkout("main")
        assert git_repo.current_branch() == "main"

        git_repo.checkout("-")
        assert git_repo.current_branch() == "other"

    def test_apply_patch(self, source_repo: Path, dest_repo: Path, temp_dir: Path):
        """Test applying an exported patch creates a commit in the destination."""
        output_dir = temp_dir / "out"
        GitRepository(source_repo).format_patches("feature", output_dir)
        first = sorted(output_dir.iterdir())[0]

        git_repo = GitRepository(dest_repo)
        git_repo.apply_patch(first)

        assert (dest_repo / "a.txt").read_text() == "a\n"
        assert Repo(dest_repo).head.commit.message.strip() == "Add a"
