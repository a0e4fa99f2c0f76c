"""Output formatting for mgit commands.

- report: final pull report
- listing: configuration tree for ``mgit config``
- status: read-only status listing
"""

from .listing import print_repos, repo_facts
from .report import format_note, format_repo_header, print_report, visible_notes
from .status import print_status

__all__ = [
    # Listing
    "print_repos",
    "repo_facts",
    # Report
    "format_note",
    "format_repo_header",
    "print_report",
    "visible_notes",
    # Status
    "print_status",
]
