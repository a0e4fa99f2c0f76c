"""Custom exceptions for mgit"""

from typing import Optional


class MgitError(Exception):
    """Base exception for all mgit errors."""
    pass


class GitOperationError(MgitError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class DirtyWorktreeError(GitOperationError):
    """Exception raised when the checked-out branch has uncommitted work."""

    def __init__(self, branch: str):
        super().__init__("fast_forward", branch, "working tree has uncommitted changes")


class ConfigError(MgitError):
    """A problem found while reading repository definitions.

    These are collected and returned by the config reader rather than
    raised, so a single bad section never hides the rest of the file.
    """

    def __init__(
        self,
        config_path: str,
        repo_path: Optional[str] = None,
        message: str = "",
        cause: Optional[str] = None,
    ):
        self.config_path = config_path
        self.repo_path = repo_path
        self.message = message
        self.cause = cause

        error_msg = config_path
        if repo_path:
            error_msg += f" [{repo_path}]"
        error_msg += f": {message}"
        if cause:
            error_msg += f" ({cause})"

        super().__init__(error_msg)
