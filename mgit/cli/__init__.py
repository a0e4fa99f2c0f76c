"""Command-line interface for mgit.

This package provides the CLI entry point, argument parsing and
warning/fatal error reporting.
"""

from .main import main
from .args import parse_args
from .control import Control

__all__ = ["main", "parse_args", "Control"]
