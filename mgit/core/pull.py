"""The ``pull`` command: fetch everything, reconcile, report."""
import sys
from typing import Optional

from rich.console import Console

from mgit.config import Config
from mgit.constants import EXIT_HARD_CANCELED, EXIT_OK, EXIT_SOFT_CANCELED
from mgit.core.scheduler import CancelState, FetchScheduler, build_tasks
from mgit.core.termination import TerminationController
from mgit.formatters.report import print_report
from mgit.logging_config import get_logger
from mgit.services.repo_config import RepoConfig
from mgit.ui.terminal import TerminalUI

logger = get_logger(__name__)


def terminal_fd() -> Optional[int]:
    """File descriptor of the controlling terminal on stdin, if there is one."""
    try:
        fd = sys.stdin.fileno()
    except (AttributeError, OSError, ValueError):
        return None
    return fd if sys.stdin.isatty() else None


def run_pull(
    config: Config,
    repo_config: RepoConfig,
    console: Optional[Console] = None,
    fd: Optional[int] = None,
) -> int:
    """Pull every selected repository and return the exit status."""
    console = console or Console(highlight=False)
    repos = repo_config.selected(config.tags)
    tasks = build_tasks(repos)

    with TerminalUI(console, raw_fd=fd, settle=config.resize_settle) as ui:
        with TerminationController.for_terminal(fd) as termination:
            scheduler = FetchScheduler(
                ui, termination, concurrency=config.concurrency, tick=config.tick
            )
            results = scheduler.run(tasks)

    if scheduler.state is CancelState.HARD:
        logger.info("Hard-canceled, skipping report")
        return EXIT_HARD_CANCELED

    print_report(
        console,
        repo_config.iter_tags(config.tags),
        results,
        verbose=config.verbose,
        canceled=scheduler.canceled,
    )
    if scheduler.state is CancelState.SOFT:
        return EXIT_SOFT_CANCELED
    return EXIT_OK
