"""Live terminal dashboard for a pull.

One row per repository: the name, right-aligned and colored by the worst
note kind so far, followed by each remote colored by its fetch state::

      dotfiles origin
    mgit-tests github origin upstream

Rows are painted with absolute cursor positioning. After a full draw,
each painted region is remembered by the entity it shows, so later state
changes repaint just that region instead of the whole screen. Resizing
invalidates everything; the full redraw waits until the size has been
stable for a settle window so dragging a window edge does not flicker.
"""
import os
import termios
import time
import tty
from collections import deque
from typing import Callable, Deque, Dict, List, NamedTuple, Optional, Tuple

from rich.cells import cell_len, set_cell_size
from rich.console import Console
from rich.control import Control
from rich.text import Text

from mgit.constants import CANCEL_BANNER, ELLIPSIS, STATE_STYLES
from mgit.formatters.report import kind_style
from mgit.logging_config import get_logger
from mgit.models.repo import Repo
from mgit.models.summary import Kind, Summary
from mgit.models.task import State, Task

logger = get_logger(__name__)

DEFAULT_SETTLE = 0.5

CellKey = Tuple[Repo, Optional[str]]  # (repo, remote), remote None for the name


class Cell(NamedTuple):
    """A painted region of the screen."""
    column: int
    row: int
    text: str
    style: str


class RawTerminal:
    """Raw mode on a terminal, acquired on construction and released once."""

    def __init__(self, fd: Optional[int]):
        self.fd = fd
        self._saved = None
        if fd is not None and os.isatty(fd):
            self._saved = termios.tcgetattr(fd)
            tty.setraw(fd)
            logger.debug(f"Terminal on fd {fd} switched to raw mode")

    @property
    def active(self) -> bool:
        return self._saved is not None

    def restore(self) -> None:
        if not self.active:
            return
        try:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
        finally:
            self._saved = None
            logger.debug(f"Terminal on fd {self.fd} restored")


def layout_row(tokens: List[Tuple[str, str]], width: int) -> List[Tuple[int, str, str]]:
    """Place space-separated ``(text, style)`` tokens on a row ``width`` wide.

    Returns ``(column, text, style)`` for every token that is at least
    partly visible. Columns and widths are measured in terminal cells,
    so wide characters count twice. When the row is too wide, the first
    token that does not fit is cut short and ends in an ellipsis. Full
    tokens are only placed while they leave room for one more cell and
    the ellipsis, so the cut token always keeps at least one cell.
    """
    if width < 2 or not tokens:
        return []
    total = sum(cell_len(text) for text, _ in tokens) + len(tokens) - 1
    placed = []
    column = 0
    for text, style in tokens:
        # A full token must leave room for " x…" after it unless the row fits
        size = cell_len(text)
        if total <= width or column + size + 3 <= width:
            placed.append((column, text, style))
            column += size + 1
            continue
        keep = width - column - 1
        placed.append((column, set_cell_size(text, keep) + ELLIPSIS, style))
        break
    return placed


class TerminalUI:
    """Dashboard showing per-remote and per-repository state."""

    def __init__(
        self,
        console: Optional[Console] = None,
        raw_fd: Optional[int] = None,
        get_size: Optional[Callable[[], Tuple[int, int]]] = None,
        clock: Callable[[], float] = time.monotonic,
        settle: float = DEFAULT_SETTLE,
    ):
        """Take over the terminal.

        Args:
            console: Console to paint on (defaults to stdout)
            raw_fd: Terminal file descriptor to put in raw mode, or None
            get_size: Returns the current ``(width, height)``
            clock: Monotonic clock used for the resize debounce
            settle: Seconds the size must be stable before a full redraw
        """
        self.console = console or Console(highlight=False)
        self._get_size = get_size or (lambda: tuple(self.console.size))
        self._clock = clock
        self._settle = settle

        self._states: Dict[Task, State] = {}
        self._updates: Deque[Tuple[Task, State]] = deque()
        self._cells: Dict[CellKey, Cell] = {}

        self._drawn = False
        self._needs_full_draw = True
        self._last_size: Optional[Tuple[int, int]] = None
        self._settle_deadline: Optional[float] = None
        self._canceled = False
        self._closed = False

        self._raw = RawTerminal(raw_fd)
        self.console.control(Control.show_cursor(False))

    def __enter__(self) -> "TerminalUI":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def add_task(self, task: Task) -> None:
        """Show ``task`` as pending; new rows need a full draw."""
        self._states[task] = State.PENDING
        self._needs_full_draw = True

    def set_state(self, task: Task, state: State) -> None:
        """Queue a state change, painted on the next update."""
        self._updates.append((task, state))

    def state(self, task: Task) -> Optional[State]:
        """Last state of ``task`` applied to the dashboard."""
        return self._states.get(task)

    def cancel(self) -> None:
        """Show the cancellation banner under the rows."""
        if not self._canceled:
            self._canceled = True
            self._needs_full_draw = True

    def update(self, results: Dict[Repo, Summary]) -> None:
        """Bring the screen up to date with queued changes and ``results``."""
        if not self.console.is_terminal:
            # Cursor movement is dropped off a terminal; just keep state current
            self._apply_updates()
            return

        size = tuple(self._get_size())
        now = self._clock()

        if self._drawn and size != self._last_size:
            logger.debug(f"Terminal resized to {size[0]}x{size[1]}")
            self._settle_deadline = now + self._settle
            self._needs_full_draw = True
        self._last_size = size

        if self._settle_deadline is not None:
            if now < self._settle_deadline:
                return
            self._settle_deadline = None

        with self.console:
            if self._needs_full_draw:
                self._full_draw(results, size)
            else:
                self._repaint(results)

    def close(self) -> None:
        """Give the terminal back. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self.console.control(Control.show_cursor(True), Control.clear(), Control.home())
        finally:
            self._raw.restore()

    def _apply_updates(self) -> List[Task]:
        changed = []
        while self._updates:
            task, state = self._updates.popleft()
            if self._states.get(task) is state:
                continue
            self._states[task] = state
            changed.append(task)
        return changed

    def _repaint(self, results: Dict[Repo, Summary]) -> None:
        touched = []
        for task in self._apply_updates():
            self._paint((task.repo, task.remote), STATE_STYLES[self._states[task].value])
            if task.repo not in touched:
                touched.append(task.repo)
        for repo in touched:
            self._paint((repo, None), kind_style(self._kind(repo, results)))

    def _paint(self, key: CellKey, style: str) -> None:
        cell = self._cells.get(key)
        if cell is None or cell.style == style:
            return
        cell = cell._replace(style=style)
        self._cells[key] = cell
        self._write(cell)

    def _write(self, cell: Cell) -> None:
        self.console.control(Control.move_to(cell.column, cell.row))
        self.console.print(Text(cell.text, style=cell.style), end="", soft_wrap=True)

    def _kind(self, repo: Repo, results: Dict[Repo, Summary]) -> Kind:
        summary = results.get(repo)
        return summary.kind() if summary is not None else Kind.NONE

    def _full_draw(self, results: Dict[Repo, Summary], size: Tuple[int, int]) -> None:
        self._apply_updates()
        width, height = size
        self._cells.clear()
        self.console.control(Control.clear(), Control.home())

        remotes: Dict[Repo, List[str]] = {}
        for task in self._states:
            remotes.setdefault(task.repo, []).append(task.remote)
        repos = sorted(remotes, key=Repo.sort_key)
        name_width = max((cell_len(repo.name_or_default()) for repo in repos), default=0)

        rows = height - 1 if self._canceled else height
        visible = repos
        hidden = 0
        if len(repos) > rows:
            visible = repos[:max(rows - 1, 0)]
            hidden = len(repos) - len(visible)

        for row, repo in enumerate(visible):
            keys: List[CellKey] = [(repo, None)]
            name = repo.name_or_default()
            tokens = [(" " * (name_width - cell_len(name)) + name, kind_style(self._kind(repo, results)))]
            for remote in sorted(remotes[repo]):
                keys.append((repo, remote))
                tokens.append((remote, STATE_STYLES[self._states[Task(repo, remote)].value]))
            for key, (column, text, style) in zip(keys, layout_row(tokens, width)):
                cell = Cell(column, row, text, style)
                self._cells[key] = cell
                self._write(cell)

        row = len(visible)
        if hidden and rows > 0:
            self._write_line(row, f"{ELLIPSIS}{hidden} more not shown", "dim", width)
            row += 1
        if self._canceled and row < height:
            self._write_line(row, CANCEL_BANNER, "bold magenta", width)

        self._drawn = True
        self._needs_full_draw = False
        logger.debug(f"Full draw at {width}x{height}: {len(visible)} rows, {hidden} hidden")

    def _write_line(self, row: int, text: str, style: str, width: int) -> None:
        for column, fitted, fitted_style in layout_row([(text, style)], width):
            self._write(Cell(column, row, fitted, fitted_style))
