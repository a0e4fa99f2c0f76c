"""Shared constants for mgit."""

# Symbol shown before a repository name when none is configured
DEFAULT_SYMBOL = "•"

# Display name for a repository configured at the filesystem root
ROOT_NAME = "<root>"

# Ellipsis used when a dashboard row is wider than the terminal
ELLIPSIS = "…"

# Note ordering groups. Notes are displayed by ascending group, and in
# insertion order within a group.
GROUP_FETCH = 10
GROUP_VALIDATION = 20
GROUP_BRANCH = 30

# Reflog message written when a branch is moved forward
FAST_FORWARD_REFLOG = "mgit: fast-forward"

# Key sent by the terminal for Ctrl-C when signal translation is off
INTERRUPT_KEY = b"\x03"

# Process exit statuses
EXIT_OK = 0
EXIT_FATAL = 1
EXIT_SOFT_CANCELED = 2
EXIT_HARD_CANCELED = 130


# Rich styles for fetch task states (keys are State values)
STATE_STYLES = {
    "pending": "bright_black",
    "fetching": "bold cyan",
    "canceled": "magenta",
    "no-change": "dim",
    "success": "green",
    "warning": "yellow",
    "failure": "bold red",
}


# Rich styles for note kinds (keys are Kind names)
KIND_STYLES = {
    "NONE": "dim",
    "SUCCESS": "green",
    "WARNING": "yellow",
    "FAILURE": "red",
}


# Rich styles for status severities (keys are Severity names)
SEVERITY_STYLES = {
    "INFO": "dim",
    "NOTICE": "cyan",
    "WARNING": "yellow",
}


CANCEL_BANNER = (
    "Canceling: waiting for running fetches to finish. "
    "Interrupt again to abort them."
)
