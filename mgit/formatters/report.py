"""Final pull report."""
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.text import Text

from mgit.constants import GROUP_FETCH, KIND_STYLES
from mgit.models.repo import Repo
from mgit.models.summary import Kind, Note, Summary
from mgit.models.task import Task

TAG_STYLE = "bold underline"
NOTE_INDENT = "  "


def visible_notes(summary: Summary, verbose: bool = False) -> List[Note]:
    """Notes worth printing for a repository.

    Plain "fetched from" notes are noise next to the branch notes that
    follow them, so they are hidden unless ``verbose`` is set or they
    are all there is to say.
    """
    notes = summary.notes
    if verbose:
        return notes
    interesting = [
        note for note in notes
        if not (note.group == GROUP_FETCH and note.kind is Kind.NONE)
    ]
    return interesting or notes


def kind_style(kind: Kind) -> str:
    """Style for a repository name whose worst note is ``kind``."""
    if kind is Kind.NONE:
        return "bold"
    return f"bold {KIND_STYLES[kind.name]}"


def format_repo_header(repo: Repo, summary: Optional[Summary]) -> Text:
    kind = summary.kind() if summary is not None else Kind.NONE
    return Text(f"{repo.symbol_or_default()} {repo.name_or_default()}", style=kind_style(kind))


def format_note(note: Note) -> Text:
    """Indent a note, continuation lines included, and color it by kind."""
    lines = note.message.splitlines() or [""]
    text = "\n".join(NOTE_INDENT + line for line in lines)
    return Text(text, style=KIND_STYLES[note.kind.name])


def print_report(
    console: Console,
    groups: Iterable[Tuple[Optional[str], Sequence[Repo]]],
    results: Dict[Repo, Summary],
    verbose: bool = False,
    canceled: Sequence[Task] = (),
) -> None:
    """Print every selected repository and its notes.

    Args:
        console: Console to print to
        groups: ``(tag, repos)`` pairs; a ``None`` tag prints no header
        results: Merged summaries per repository
        verbose: Also show notes that carry no news
        canceled: Tasks dropped by a soft cancel
    """
    for tag, repos in groups:
        if tag is not None:
            console.print()
            console.print(Text(f"TAG: {tag}", style=TAG_STYLE))
        for repo in repos:
            summary = results.get(repo)
            if summary is None:
                continue
            console.print(format_repo_header(repo, summary))
            for note in visible_notes(summary, verbose):
                console.print(format_note(note))

    if canceled:
        fetches = "fetch was" if len(canceled) == 1 else "fetches were"
        console.print()
        console.print(Text(f"Canceled: {len(canceled)} {fetches} never started.", style="magenta"))
