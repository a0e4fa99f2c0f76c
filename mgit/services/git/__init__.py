"""Git-related services for mgit."""

from .branches import TrackingBranch, TrackingBranches, ahead_behind, fast_forward, reconcile
from .fetch import ProcessGroup, fetch_and_reconcile
from .worktrees import Worktree

__all__ = [
    "TrackingBranch",
    "TrackingBranches",
    "ahead_behind",
    "fast_forward",
    "reconcile",
    "ProcessGroup",
    "fetch_and_reconcile",
    "Worktree",
]
