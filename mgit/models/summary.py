"""Summary/Note model.

A summary is an ordered collection of notes about one repository. Each
note carries a display group, a kind and a message; the summary as a
whole takes the kind of its worst note.

Two severity scales exist side by side. ``Kind`` describes the outcome
of a pull (something was done, or failed to be done). ``Severity`` is
used by the read-only status listing, where nothing is ever acted on.
Both resolve to "worst note wins".
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List


class Kind(IntEnum):
    """Outcome of a pull step, ordered from least to most serious."""
    NONE = 0
    SUCCESS = 1
    WARNING = 2
    FAILURE = 3


class Severity(IntEnum):
    """Seriousness of a status finding."""
    INFO = 0     # No action needed
    NOTICE = 1   # Local branch is ahead of remote (action needed, not "bad")
    WARNING = 2  # Uncommitted work, or behind/diverged from remote


@dataclass(frozen=True)
class Note:
    """A single finding about a repository."""
    group: int
    kind: Kind
    message: str


@dataclass(frozen=True)
class StatusNote:
    """A single finding from the status listing."""
    severity: Severity
    message: str


class Summary:
    """Append-only collection of notes for one repository."""

    def __init__(self):
        self._notes: List[Note] = []

    def add_note(self, group: int, kind: Kind, message: str) -> Note:
        """Append a new note and return it."""
        note = Note(group, kind, message)
        self._notes.append(note)
        return note

    def merge(self, other: "Summary") -> None:
        """Append every note of ``other`` to this summary."""
        if other is self:
            raise ValueError("cannot merge a summary into itself")
        self._notes.extend(other._notes)

    @property
    def notes(self) -> List[Note]:
        """Notes in display order: by group, then insertion order."""
        return sorted(self._notes, key=lambda note: note.group)

    def kind(self) -> Kind:
        """Return the most serious kind among the notes."""
        return max((note.kind for note in self._notes), default=Kind.NONE)

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self.notes)

    def __bool__(self) -> bool:
        return bool(self._notes)

    def __repr__(self) -> str:
        return f"Summary(kind={self.kind().name}, notes={len(self._notes)})"


class StatusSummary:
    """Collection of status notes for one repository."""

    def __init__(self):
        self.notes: List[StatusNote] = []

    def add_note(self, severity: Severity, message: str) -> None:
        self.notes.append(StatusNote(severity, message))

    def severity(self) -> Severity:
        """Return the most serious severity among the notes."""
        return max((note.severity for note in self.notes), default=Severity.INFO)
