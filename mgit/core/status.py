"""Read-only repository status, computed without fetching."""
from typing import Dict, Iterable

import git

from mgit.logging_config import get_logger
from mgit.models.repo import Repo
from mgit.models.summary import Severity, StatusSummary
from mgit.services.git.branches import TrackingBranches, ahead_behind, describe_error, plural
from mgit.services.git.worktrees import Worktree

logger = get_logger(__name__)


def worktree_notes(worktree: Worktree, status: StatusSummary) -> None:
    counts = worktree.status()
    if counts.staged:
        status.add_note(Severity.WARNING, plural(counts.staged, 'staged file'))
    if counts.modified:
        status.add_note(Severity.WARNING, plural(counts.modified, 'modified file'))
    if counts.untracked:
        status.add_note(Severity.WARNING, plural(counts.untracked, 'untracked file'))


def branch_notes(repo: git.Repo, status: StatusSummary) -> None:
    branches = TrackingBranches.for_repository(repo)
    for error in branches.errors:
        status.add_note(Severity.WARNING, error)
    for branch in branches:
        local, upstream = branch.local_name, branch.upstream_name
        try:
            ahead, behind = ahead_behind(repo, branch.local_id, branch.upstream_id)
        except git.exc.GitCommandError as e:
            status.add_note(
                Severity.WARNING, f"failed to compare `{local}` with `{upstream}`: {describe_error(e)}"
            )
            continue
        if ahead and behind:
            status.add_note(
                Severity.WARNING,
                f"`{local}` has diverged from `{upstream}` ({ahead} and {behind} commits)",
            )
        elif ahead:
            status.add_note(
                Severity.NOTICE, f"`{local}` is ahead of `{upstream}` by {plural(ahead, 'commit')}"
            )
        elif behind:
            status.add_note(
                Severity.WARNING, f"`{local}` is behind `{upstream}` by {plural(behind, 'commit')}"
            )
        else:
            status.add_note(Severity.INFO, f"`{local}` is up to date with `{upstream}`")


def repo_status(repo: Repo) -> StatusSummary:
    """Describe the working tree and tracking branches of ``repo``."""
    status = StatusSummary()
    try:
        git_repo = repo.open()
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        status.add_note(Severity.WARNING, f"failed to open repository: {e}")
        return status
    try:
        worktree = Worktree(git_repo)
        if not git_repo.bare:
            worktree_notes(worktree, status)
        branch_notes(git_repo, status)
    except git.exc.GitCommandError as e:
        logger.error(f"Status of {repo.path} failed: {e}")
        status.add_note(Severity.WARNING, f"git failed: {describe_error(e)}")
    finally:
        git_repo.close()
    return status


def collect_status(repos: Iterable[Repo]) -> Dict[Repo, StatusSummary]:
    return {repo: repo_status(repo) for repo in repos}
