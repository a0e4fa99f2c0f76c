"""Pytest fixtures for mgit tests"""
import tempfile
from pathlib import Path

import git
import pytest

from mgit.models.repo import Repo


@pytest.fixture(autouse=True)
def git_identity(monkeypatch):
    """Give every git process a fixed identity and no user/system config."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


def commit_file(repo: git.Repo, filename: str, content: str, message: str) -> str:
    """Write a file, commit it and return the new commit id."""
    path = Path(repo.working_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([filename])
    return repo.index.commit(message).hexsha


@pytest.fixture
def git_remote(temp_dir):
    """Create a bare repository with one commit on ``main``."""
    seed_path = temp_dir / "seed"
    seed = git.Repo.init(seed_path)
    commit_file(seed, "README.md", "# Test Repository\n", "Initial commit")
    seed.git.branch("-M", "main")

    remote = seed.clone(str(temp_dir / "remote.git"), bare=True)
    seed.close()
    yield remote
    remote.close()


@pytest.fixture
def git_clone(temp_dir, git_remote):
    """Clone the remote; ``main`` tracks ``origin/main``."""
    clone = git.Repo.clone_from(git_remote.git_dir, temp_dir / "clone")
    yield clone
    clone.close()


@pytest.fixture
def upstream_commit(temp_dir, git_remote):
    """Return a helper that pushes a new commit to the remote.

    The commit is made in a separate clone, so the clone under test only
    sees it after fetching.
    """
    pusher = git.Repo.clone_from(git_remote.git_dir, temp_dir / "pusher")
    counter = {"n": 0}

    def push(branch: str = "main", message: str = "Upstream change") -> str:
        counter["n"] += 1
        if branch not in [head.name for head in pusher.heads]:
            pusher.git.checkout("-b", branch)
        else:
            pusher.git.checkout(branch)
        sha = commit_file(pusher, f"upstream-{counter['n']}.txt", f"{message}\n", message)
        pusher.git.push("origin", f"{branch}:{branch}")
        return sha

    yield push
    pusher.close()


@pytest.fixture
def make_repo():
    """Return a helper turning a git repository into a Repo descriptor."""

    def make(git_repo: git.Repo, name=None, symbol=None, tags=()) -> Repo:
        path = git_repo.working_dir
        return Repo(path=path, full_path=path, name=name, symbol=symbol, tags=frozenset(tags))

    return make
