"""Status listing for ``mgit status``."""
from typing import Dict, Iterable, Optional, Sequence, Tuple

from rich.console import Console
from rich.text import Text

from mgit.constants import SEVERITY_STYLES
from mgit.models.repo import Repo
from mgit.models.summary import Severity, StatusSummary


def print_status(
    console: Console,
    groups: Iterable[Tuple[Optional[str], Sequence[Repo]]],
    statuses: Dict[Repo, StatusSummary],
    verbose: bool = False,
) -> None:
    """Print repositories that need attention.

    Repositories with nothing above ``INFO`` to report, and ``INFO``
    notes themselves, are only printed when ``verbose`` is set.
    """
    for tag, repos in groups:
        if tag is not None:
            console.print()
            console.print(Text(f"TAG: {tag}", style="bold underline"))
        for repo in repos:
            status = statuses.get(repo)
            if status is None:
                continue
            severity = status.severity()
            if severity is Severity.INFO and not verbose:
                continue
            style = "bold" if severity is Severity.INFO else f"bold {SEVERITY_STYLES[severity.name]}"
            console.print(Text(f"{repo.symbol_or_default()} {repo.name_or_default()}", style=style))
            for note in status.notes:
                if note.severity is Severity.INFO and not verbose:
                    continue
                console.print(Text(f"  {note.message}", style=SEVERITY_STYLES[note.severity.name]))
