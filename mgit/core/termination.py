"""Turning interrupts into cancellation requests.

Two independent sources are polled by the scheduler loop:

* ``SignalListener`` receives SIGINT/SIGTERM from the OS. Python runs
  signal handlers on the main thread, so the handler only enqueues the
  signal number on a ``SimpleQueue`` (safe to use from a handler).
* ``KeystrokePoller`` reads Ctrl-C bytes from the terminal. While the
  dashboard holds the terminal in raw mode the OS no longer turns that
  keystroke into SIGINT, so it has to be picked up by hand.

``TerminationController`` sums them; what a request *means* (soft, then
hard) is decided by the scheduler.
"""
import os
import queue
import select
import signal
from typing import Dict, Iterable, List, Optional

from mgit.constants import INTERRUPT_KEY
from mgit.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalListener:
    """Collects OS termination signals while installed."""

    def __init__(self, signals: Iterable[int] = DEFAULT_SIGNALS):
        self.signals = tuple(signals)
        self._received: "queue.SimpleQueue[int]" = queue.SimpleQueue()
        self._previous: Dict[int, object] = {}

    def _handle(self, signum, frame):
        self._received.put(signum)

    def start(self) -> None:
        for signum in self.signals:
            self._previous[signum] = signal.signal(signum, self._handle)

    def stop(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def poll(self) -> int:
        """Return how many signals arrived since the last poll."""
        count = 0
        while True:
            try:
                signum = self._received.get_nowait()
            except queue.Empty:
                return count
            logger.info(f"Received signal {signal.Signals(signum).name}")
            count += 1


class KeystrokePoller:
    """Counts interrupt keystrokes waiting on a terminal file descriptor."""

    def __init__(self, fd: Optional[int]):
        self.fd = fd

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass

    def poll(self) -> int:
        if self.fd is None:
            return 0
        count = 0
        while True:
            try:
                readable, _, _ = select.select([self.fd], [], [], 0)
                if not readable:
                    return count
                data = os.read(self.fd, 1024)
            except OSError as e:
                logger.debug(f"Stopped polling keystrokes: {e}")
                self.fd = None
                return count
            if not data:
                self.fd = None
                return count
            hits = data.count(INTERRUPT_KEY)
            if hits:
                logger.info(f"Received {hits} interrupt keystroke(s)")
            count += hits


class TerminationController:
    """Feeds every cancellation source into a single count per poll."""

    def __init__(self, sources: List):
        self.sources = sources

    @classmethod
    def for_terminal(cls, fd: Optional[int]) -> "TerminationController":
        return cls([SignalListener(), KeystrokePoller(fd)])

    def __enter__(self) -> "TerminationController":
        for source in self.sources:
            source.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for source in self.sources:
            source.stop()

    def poll(self) -> int:
        """Number of cancellation requests received since the last poll."""
        return sum(source.poll() for source in self.sources)
