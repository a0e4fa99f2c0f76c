"""Data models for mgit."""

from .repo import Repo
from .summary import Kind, Note, Severity, StatusNote, StatusSummary, Summary
from .task import State, Task, TaskResult

__all__ = [
    "Repo",
    "Kind",
    "Note",
    "Summary",
    "Severity",
    "StatusNote",
    "StatusSummary",
    "State",
    "Task",
    "TaskResult",
]
