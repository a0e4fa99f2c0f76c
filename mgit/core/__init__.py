"""Command implementations and the fetch machinery behind ``pull``."""

from .pull import run_pull
from .scheduler import CancelState, FetchScheduler, build_tasks
from .status import collect_status, repo_status
from .termination import KeystrokePoller, SignalListener, TerminationController

__all__ = [
    "run_pull",
    "CancelState",
    "FetchScheduler",
    "build_tasks",
    "collect_status",
    "repo_status",
    "KeystrokePoller",
    "SignalListener",
    "TerminationController",
]
