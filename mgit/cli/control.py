"""Reporting warnings and fatal errors to the user."""

import sys
from typing import Iterable, Optional

from rich.console import Console
from rich.text import Text

from mgit.config import WARNING_ACTIONS
from mgit.constants import EXIT_FATAL
from mgit.logging_config import get_logger

logger = get_logger(__name__)


class Control:
    """Applies the configured warning action.

    ``ignore`` drops warnings, ``print`` shows them and carries on, and
    ``fatal`` treats the first one as a fatal error.
    """

    def __init__(self, warning_action: str = "print", console: Optional[Console] = None):
        if warning_action not in WARNING_ACTIONS:
            raise ValueError(f"warning_action must be one of {WARNING_ACTIONS}, got '{warning_action}'")
        self.warning_action = warning_action
        self.console = console or Console(stderr=True, highlight=False)
        self.warnings = 0

    def warning(self, message: str) -> None:
        self.warnings += 1
        logger.info(f"Config warning: {message}")
        if self.warning_action == "ignore":
            return
        if self.warning_action == "fatal":
            self.fatal(message)
        text = Text("warning: ", style="bold yellow")
        text.append(message, style="yellow")
        self.console.print(text, soft_wrap=True)

    def warnings_from(self, problems: Iterable[Exception]) -> None:
        for problem in problems:
            self.warning(str(problem))

    def fatal(self, message: str) -> None:
        """Print ``message`` as an error and exit."""
        logger.info(f"Fatal: {message}")
        text = Text("error: ", style="bold red")
        text.append(message, style="red")
        self.console.print(text, soft_wrap=True)
        sys.exit(EXIT_FATAL)
