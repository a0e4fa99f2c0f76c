"""Logging configuration for mgit

Most work happens on fetch worker threads, so every detailed format
carries the thread name (``fetch-<repo>/<remote>`` for workers,
``MainThread`` for the scheduler and dashboard).

During ``pull`` the dashboard owns the terminal and nothing may be
written to stderr; logs then go only to ``~/.cache/mgit/mgit.log``.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

LOG_DIR = Path.home() / '.cache' / 'mgit'
LOG_FILE = 'mgit.log'

DETAILED_FORMAT = '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'
BRIEF_FORMAT = '[%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# GitPython logs every git invocation at DEBUG; only let that through with --debug
LIBRARY_LOGGERS = ('git',)


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when its stream is a terminal."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str, datefmt: Optional[str] = None, stream: Optional[TextIO] = None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        stream = stream if stream is not None else sys.stderr
        self.use_color = hasattr(stream, 'isatty') and stream.isatty()

    def formatMessage(self, record):
        color = self.COLORS.get(record.levelname) if self.use_color else None
        if color is None:
            return super().formatMessage(record)
        # Color a copy so other handlers still see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().formatMessage(colored)


def log_path() -> Path:
    """Where the log file is written for ``pull`` and ``--debug`` runs."""
    return LOG_DIR / LOG_FILE


def setup_logging(verbose: bool = False, debug: bool = False, tui_mode: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, show INFO level messages
        debug: If True, show DEBUG level messages with thread names
        tui_mode: If True, log only to file (the live dashboard owns the terminal)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # The file handler wants everything; handlers filter what they emit
    root_logger.setLevel(logging.DEBUG if tui_mode else level)

    if tui_mode or debug:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path(), mode='w', encoding='utf-8')  # Overwrite each run
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(fmt=DETAILED_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    # Anything written to stderr would tear the dashboard
    if not tui_mode:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        if debug:
            formatter = ColoredFormatter(DETAILED_FORMAT, DATE_FORMAT, stream=sys.stderr)
        else:
            formatter = ColoredFormatter(BRIEF_FORMAT, stream=sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    ``mgit.core.scheduler`` becomes ``core.scheduler``, which keeps the
    brief console format short. The ``services.`` level stays so that
    ``services.git.*`` never falls under GitPython's own ``git`` logger.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Logger instance
    """
    if name.startswith('mgit.'):
        name = name[len('mgit.'):]
    return logging.getLogger(name)
