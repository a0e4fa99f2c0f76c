"""Worktree data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WorktreeInfo:
    """Information about a git worktree."""

    path: str
    branch_name: str  # Empty when HEAD is detached
    commit_sha: str
    is_main: bool  # Is this the main working tree?

    def __str__(self) -> str:
        """String representation of worktree."""
        main_marker = " (main)" if self.is_main else ""
        return f"{self.branch_name or '(detached)'} @ {self.path}{main_marker}"


@dataclass(frozen=True)
class WorktreeStatus:
    """File counts describing how far a working tree is from HEAD."""

    staged: int = 0
    modified: int = 0
    untracked: int = 0

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.modified or self.untracked)
