"""Tracking branch validation, comparison and fast-forwarding.

Only branches with an upstream are considered. Before any comparison
each one is validated: both names must be valid text and both commit
ids must resolve. A branch that fails validation is reported and left
alone; it never stops the other branches of the repository.

Moving a branch is only ever done when it is strictly behind its
upstream. The checked-out branch additionally requires a clean working
tree, and a failed attempt leaves the branch exactly where it was.
"""
import configparser
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import git

from mgit.constants import FAST_FORWARD_REFLOG
from mgit.exceptions import DirtyWorktreeError, GitOperationError
from mgit.logging_config import get_logger
from mgit.models.summary import Kind
from mgit.services.git.worktrees import Worktree

logger = get_logger(__name__)

RESOLVE_ERRORS = (ValueError, git.exc.GitCommandError, git.exc.BadName, git.exc.BadObject)


@dataclass(frozen=True)
class TrackingBranch:
    """A validated local branch paired with its upstream."""
    local_name: str
    local_id: str
    upstream_name: str
    upstream_id: str


def _is_text(name: str) -> bool:
    """False for names that only decoded with surrogate escapes."""
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _configured_remote(head: git.Head) -> Optional[str]:
    """Remote named in the branch's configuration, if it can be read."""
    try:
        value = head.config_reader().get_value("remote", None)
    except (ValueError, configparser.Error):
        return None
    return None if value is None else str(value)


def describe_error(error: Exception) -> str:
    """Short, single-purpose description of a git failure."""
    if isinstance(error, git.exc.GitCommandError):
        stderr = (error.stderr or "").strip()
        if stderr.startswith("stderr:"):
            stderr = stderr[len("stderr:"):].strip().strip("'").strip()
        return stderr or f"git exited with status {error.status}"
    return str(error)


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class TrackingBranches:
    """Validated tracking branches of a repository, plus the problems found."""

    def __init__(self, branches: List[TrackingBranch], errors: List[str]):
        self.branches = branches
        self.errors = errors

    def __iter__(self) -> Iterator[TrackingBranch]:
        return iter(self.branches)

    def __len__(self) -> int:
        return len(self.branches)

    @classmethod
    def for_repository(cls, repo: git.Repo) -> "TrackingBranches":
        """Every local branch with an upstream."""
        return cls._collect(repo, None)

    @classmethod
    def for_remote(cls, repo: git.Repo, remote: str) -> "TrackingBranches":
        """Local branches whose upstream lives on ``remote``."""
        return cls._collect(repo, remote)

    @classmethod
    def _collect(cls, repo: git.Repo, remote: Optional[str]) -> "TrackingBranches":
        branches: List[TrackingBranch] = []
        errors: List[str] = []
        for head in repo.heads:
            try:
                upstream = head.tracking_branch()
            except ValueError as e:
                # Report once, with the task for the remote the branch is configured on
                if remote is None or _configured_remote(head) in (remote, None):
                    errors.append(f"could not determine upstream of `{head.name}`: {e}")
                continue
            if upstream is None:
                # Most local branches have no upstream; that's fine
                continue
            if upstream.remote_name == ".":
                logger.debug(f"Skipping {head.name}: upstream is a local branch")
                continue

            upstream_name = upstream.name
            if remote is not None and not upstream_name.startswith(f"{remote}/"):
                continue

            local_name = head.name
            if not _is_text(local_name):
                errors.append(f"local branch {local_name!r} has a name that is not valid text")
                continue
            try:
                local_id = head.commit.hexsha
            except RESOLVE_ERRORS as e:
                errors.append(f"could not resolve commit of `{local_name}`: {e}")
                continue
            if not _is_text(upstream_name):
                errors.append(f"upstream of `{local_name}` has a name that is not valid text")
                continue
            try:
                upstream_id = upstream.commit.hexsha
            except RESOLVE_ERRORS as e:
                errors.append(
                    f"could not resolve upstream `{upstream_name}` of `{local_name}`: {e}"
                )
                continue

            branches.append(TrackingBranch(local_name, local_id, upstream_name, upstream_id))

        logger.debug(
            f"{repo.working_dir}: {len(branches)} tracking branches"
            f"{f' on {remote}' if remote else ''}, {len(errors)} invalid"
        )
        return cls(branches, errors)


def ahead_behind(repo: git.Repo, local_id: str, upstream_id: str) -> Tuple[int, int]:
    """Count commits only on the local side and only on the upstream side."""
    output = repo.git.rev_list("--left-right", "--count", f"{local_id}...{upstream_id}")
    ahead, behind = output.split()
    return int(ahead), int(behind)


def is_checked_out(repo: git.Repo, branch_name: str) -> bool:
    """True if HEAD points at ``branch_name`` in this working tree."""
    if repo.head.is_detached:
        return False
    try:
        return repo.head.ref.name == branch_name
    except (TypeError, ValueError):
        return False


def fast_forward(repo: git.Repo, branch: TrackingBranch) -> None:
    """Move ``branch`` to its upstream commit.

    The caller guarantees the branch is strictly behind. The reference
    update is a compare-and-swap against the validated local id, so a
    branch that moved in the meantime is not touched.

    Raises:
        GitOperationError: If the branch could not be moved. The branch
            (and, for the checked-out branch, the working tree) is left as
            it was before the call.
    """
    head = is_checked_out(repo, branch.local_name)
    worktree = Worktree(repo)
    if head and worktree.is_dirty():
        raise DirtyWorktreeError(branch.local_name)
    if not head and worktree.checked_out_elsewhere(branch.local_name):
        raise GitOperationError(
            "fast_forward", branch.local_name, "branch is checked out in another worktree"
        )

    ref_path = f"refs/heads/{branch.local_name}"
    message = f"{FAST_FORWARD_REFLOG} to {branch.upstream_name}"
    try:
        repo.git.update_ref("-m", message, ref_path, branch.upstream_id, branch.local_id)
    except git.exc.GitCommandError as e:
        raise GitOperationError("update_ref", branch.local_name, describe_error(e)) from e

    if not head:
        return

    try:
        repo.git.reset("--hard", branch.upstream_id)
    except git.exc.GitCommandError as e:
        logger.warning(f"Reset of {branch.local_name} failed, rolling back: {describe_error(e)}")
        # The tree was clean, so returning it to the old commit loses nothing
        repo.git.update_ref(
            "-m", f"{message} (rolled back)", ref_path, branch.local_id, branch.upstream_id
        )
        repo.git.reset("--hard", branch.local_id)
        raise GitOperationError("reset", branch.local_name, describe_error(e)) from e


def reconcile(repo: git.Repo, branch: TrackingBranch) -> Tuple[Kind, str]:
    """Decide what to do with ``branch`` and do it.

    Returns the kind and message of the note describing the outcome.
    Only a branch that is strictly behind is ever modified.
    """
    local = branch.local_name
    upstream = branch.upstream_name
    try:
        ahead, behind = ahead_behind(repo, branch.local_id, branch.upstream_id)
    except git.exc.GitCommandError as e:
        return Kind.FAILURE, f"failed to compare `{local}` with `{upstream}`: {describe_error(e)}"

    logger.debug(f"{local}...{upstream}: ahead={ahead} behind={behind}")
    if ahead and behind:
        return (
            Kind.FAILURE,
            f"`{local}` has diverged from `{upstream}` ({ahead} and {behind} commits)",
        )
    if ahead:
        return Kind.WARNING, f"`{local}` is ahead of `{upstream}` by {plural(ahead, 'commit')}"
    if behind:
        try:
            fast_forward(repo, branch)
        except GitOperationError as e:
            return (
                Kind.FAILURE,
                f"failed to fast-forward `{local}` to `{upstream}`: {e.message}",
            )
        except git.exc.GitCommandError as e:
            return (
                Kind.FAILURE,
                f"failed to fast-forward `{local}` to `{upstream}`: {describe_error(e)}",
            )
        return Kind.SUCCESS, f"fast-forwarded `{local}` to `{upstream}`"
    return Kind.NONE, f"`{local}` is up to date with `{upstream}`"
