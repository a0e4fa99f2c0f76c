"""Fetch task model and states"""
from dataclasses import dataclass
from enum import Enum

from mgit.models.repo import Repo
from mgit.models.summary import Kind, Summary


class State(Enum):
    """State of a single (repository, remote) fetch."""
    PENDING = "pending"
    FETCHING = "fetching"
    CANCELED = "canceled"
    NO_CHANGE = "no-change"
    SUCCESS = "success"
    WARNING = "warning"
    FAILURE = "failure"

    @property
    def is_terminal(self) -> bool:
        return self not in (State.PENDING, State.FETCHING)

    @classmethod
    def from_kind(cls, kind: Kind) -> "State":
        """Translate a finished task's worst note into its final state."""
        return {
            Kind.NONE: cls.NO_CHANGE,
            Kind.SUCCESS: cls.SUCCESS,
            Kind.WARNING: cls.WARNING,
            Kind.FAILURE: cls.FAILURE,
        }[kind]


@dataclass(frozen=True)
class Task:
    """A remote of a repository waiting to be fetched."""
    repo: Repo
    remote: str

    def __str__(self) -> str:
        return f"{self.repo.name_or_default()}:{self.remote}"


@dataclass
class TaskResult:
    """Message a worker sends back when its fetch is over."""
    task: Task
    summary: Summary
