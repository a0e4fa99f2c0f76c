"""Entry point for the mgit command."""

import sys
from typing import List, Optional

import git
from rich.console import Console
from rich.text import Text

from mgit.cli.args import parse_args
from mgit.cli.control import Control
from mgit.config import DEFAULT_CONCURRENCY, Config
from mgit.constants import EXIT_FATAL, EXIT_HARD_CANCELED, EXIT_OK
from mgit.core.pull import run_pull, terminal_fd
from mgit.core.status import collect_status
from mgit.exceptions import MgitError
from mgit.formatters import print_repos, print_status
from mgit.logging_config import get_logger, log_path, setup_logging
from mgit.services.repo_config import RepoConfig

logger = get_logger(__name__)


def load_repos(config: Config, control: Control) -> RepoConfig:
    """Read every config path, reporting problems through ``control``."""
    repo_config = RepoConfig()
    for path in config.config_paths:
        control.warnings_from(repo_config.read(path))
    if not len(repo_config):
        control.fatal("no repositories configured")
    return repo_config


def run_config(config: Config, repo_config: RepoConfig, console: Console) -> int:
    for tag, repos in repo_config.iter_tags(config.tags):
        console.print()
        if tag is not None:
            console.print(Text(f"TAG: {tag}", style="bold underline"))
        print_repos(console, repos, verbose=config.verbose)
    console.print()
    return EXIT_OK


def run_status(config: Config, repo_config: RepoConfig, console: Console) -> int:
    statuses = collect_status(repo_config.selected(config.tags))
    print_status(console, repo_config.iter_tags(config.tags), statuses, verbose=config.verbose)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)

    # The pull dashboard owns the terminal, so it logs to a file only
    setup_logging(verbose=args.verbose, debug=args.debug, tui_mode=args.command == "pull")

    console = Console(highlight=False)
    control = Control(args.warning_action)
    try:
        config = Config(
            config_paths=args.config_paths,
            warning_action=args.warning_action,
            tags=args.tags,
            concurrency=getattr(args, "concurrency", DEFAULT_CONCURRENCY),
            verbose=args.verbose,
            debug=args.debug,
        )
    except ValueError as e:
        control.fatal(str(e))

    if args.debug:
        console.print("[yellow]Configuration:[/yellow]")
        for key, value in config.to_dict().items():
            console.print(f"  {key}: {value}")

    try:
        repo_config = load_repos(config, control)
        if args.command == "config":
            return run_config(config, repo_config, console)
        if args.command == "status":
            return run_status(config, repo_config, console)
        return run_pull(config, repo_config, console, fd=terminal_fd())
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return EXIT_HARD_CANCELED
    except (MgitError, git.exc.GitError, OSError) as e:
        console.print(Text(f"Error: {e}", style="red"))
        if args.command == "pull":
            # Pull logs only to the file, which is where the traceback went
            logger.error(f"Pull failed: {e}", exc_info=True)
            console.print(Text(f"Details in {log_path()}", style="dim"))
        if args.debug:
            console.print_exception()
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
