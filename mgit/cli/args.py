"""Command-line argument parsing for mgit."""

import argparse
from typing import List, Optional

from mgit.__version__ import __version__
from mgit.config import DEFAULT_CONCURRENCY, DEFAULT_CONFIG_PATH, WARNING_ACTIONS


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _add_tag_arg(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument(
        "-t", "--tag", dest="tags", action="append", default=[], metavar="TAG", help=help_text
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mgit",
        description="Fetch and fast-forward many git repositories at once",
    )
    parser.add_argument(
        "-c",
        "--config",
        dest="config_paths",
        action="append",
        metavar="PATH",
        help=f"Config file or directory of .conf files; repeatable (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "-W",
        "--warning",
        dest="warning_action",
        choices=WARNING_ACTIONS,
        default="print",
        help="What to do with configuration warnings (default: print)",
    )
    parser.add_argument(
        "-v", "--verbose", dest="global_verbose", action="store_true", help="Show verbose output"
    )
    parser.add_argument("--debug", action="store_true", help="Show debug information for troubleshooting")
    parser.add_argument("--version", action="version", version=f"mgit {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    config_parser = subparsers.add_parser("config", help="Print configured repositories")
    _add_tag_arg(config_parser, "Limit display to repos with this tag; repeatable")
    config_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show defaults as well as configured values"
    )

    status_parser = subparsers.add_parser("status", help="Print status of repositories without fetching")
    _add_tag_arg(status_parser, "Limit display to repos with this tag; repeatable")
    status_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show everything, even when up to date"
    )

    pull_parser = subparsers.add_parser("pull", help="Fetch all remotes and fast-forward tracking branches")
    _add_tag_arg(pull_parser, "Limit to repos with this tag; repeatable")
    pull_parser.add_argument(
        "-j",
        "--concurrency",
        type=_positive_int,
        default=DEFAULT_CONCURRENCY,
        metavar="N",
        help=f"Number of fetches to run at once (default: {DEFAULT_CONCURRENCY})",
    )
    pull_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Include notes that carry no news in the report"
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    args = build_parser().parse_args(argv)
    if not args.config_paths:
        args.config_paths = [DEFAULT_CONFIG_PATH]
    args.verbose = args.global_verbose or args.verbose
    return args
