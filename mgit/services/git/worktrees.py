"""Working tree inspection for mgit."""

import os
from typing import Dict, List

import git

from mgit.models.worktree import WorktreeInfo, WorktreeStatus
from mgit.logging_config import get_logger

logger = get_logger(__name__)

# Work tree status letters (second column of porcelain output) that
# mean a tracked file differs from the index
MODIFIED_CODES = set("MDRT")


class Worktree:
    """Read-only view of a repository's working tree."""

    def __init__(self, repo: git.Repo):
        self.repo = repo

    def status(self) -> WorktreeStatus:
        """Count staged, modified and untracked files.

        Submodules are excluded, renames are detected, and untracked
        directories are recursed so nested files are counted one by one.
        """
        output = self.repo.git.status(
            "--porcelain=v1",
            "-z",
            "--untracked-files=all",
            "--ignore-submodules=all",
            "--find-renames",
        )
        staged = modified = untracked = 0
        entries = iter(output.split("\0"))
        for entry in entries:
            if len(entry) < 3:
                continue
            index, work = entry[0], entry[1]
            if index == "?" and work == "?":
                untracked += 1
                continue
            if index == "!":
                continue
            if index not in " ?":
                staged += 1
            if work in MODIFIED_CODES:
                modified += 1
            if index in "RC":
                # Renames and copies carry the source path as the next entry
                next(entries, None)
        status = WorktreeStatus(staged=staged, modified=modified, untracked=untracked)
        logger.debug(f"Worktree {self.repo.working_dir}: {status}")
        return status

    def is_dirty(self) -> bool:
        """True if anything is staged, modified or untracked."""
        return not self.status().is_clean

    def list(self) -> List[WorktreeInfo]:
        """List every worktree attached to the repository."""
        output = self.repo.git.worktree("list", "--porcelain")

        # Format:
        # worktree /path/to/worktree
        # HEAD commit_sha
        # branch refs/heads/branch-name
        # (blank line between worktrees)
        worktree_list: List[WorktreeInfo] = []
        current: Dict[str, str] = {}

        def flush():
            if current.get("path"):
                worktree_list.append(
                    WorktreeInfo(
                        path=current["path"],
                        branch_name=current.get("branch", ""),
                        commit_sha=current.get("HEAD", ""),
                        # First worktree in list is always the main one
                        is_main=not worktree_list,
                    )
                )
            current.clear()

        for line in output.split("\n"):
            line = line.strip()
            if not line:
                flush()
            elif line.startswith("worktree "):
                current["path"] = line.split(" ", 1)[1]
            elif line.startswith("HEAD "):
                current["HEAD"] = line.split(" ", 1)[1]
            elif line.startswith("branch "):
                branch_ref = line.split(" ", 1)[1]
                if branch_ref.startswith("refs/heads/"):
                    current["branch"] = branch_ref[len("refs/heads/"):]
        flush()
        return worktree_list

    def checked_out_elsewhere(self, branch_name: str) -> bool:
        """True if ``branch_name`` is checked out in a different worktree."""
        here = os.path.realpath(self.repo.working_dir)
        for info in self.list():
            if info.branch_name == branch_name and os.path.realpath(info.path) != here:
                logger.debug(f"{branch_name} is checked out in {info}")
                return True
        return False
