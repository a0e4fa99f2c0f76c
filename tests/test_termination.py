"""Tests for turning interrupts into cancellation requests"""
import os
import signal

import pytest

from mgit.constants import INTERRUPT_KEY
from mgit.core.termination import KeystrokePoller, SignalListener, TerminationController


class TestSignalListener:
    """Test collecting OS signals."""

    def test_counts_signals(self):
        """Test counting SIGINT deliveries."""
        listener = SignalListener([signal.SIGUSR1])
        listener.start()
        try:
            os.kill(os.getpid(), signal.SIGUSR1)
            os.kill(os.getpid(), signal.SIGUSR1)

            assert listener.poll() == 2
            assert listener.poll() == 0
        finally:
            listener.stop()

    def test_sigterm_is_a_request(self):
        """Test that SIGTERM also requests termination."""
        listener = SignalListener()
        listener.start()
        try:
            os.kill(os.getpid(), signal.SIGTERM)
            assert listener.poll() == 1
        finally:
            listener.stop()

    def test_previous_handlers_restored(self):
        """Test restoring signal handlers on stop."""
        previous = signal.getsignal(signal.SIGUSR1)
        listener = SignalListener([signal.SIGUSR1])
        listener.start()
        assert signal.getsignal(signal.SIGUSR1) != previous
        listener.stop()

        assert signal.getsignal(signal.SIGUSR1) == previous


class TestKeystrokePoller:
    """Test reading interrupt keystrokes."""

    @pytest.fixture
    def pipe(self):
        read_fd, write_fd = os.pipe()
        yield read_fd, write_fd
        for fd in (read_fd, write_fd):
            try:
                os.close(fd)
            except OSError:
                pass

    def test_counts_interrupt_bytes(self, pipe):
        """Test counting Ctrl-C bytes from the terminal."""
        read_fd, write_fd = pipe
        poller = KeystrokePoller(read_fd)
        os.write(write_fd, b"ab" + INTERRUPT_KEY + b"c" + INTERRUPT_KEY)

        assert poller.poll() == 2
        assert poller.poll() == 0

    def test_nothing_waiting(self, pipe):
        read_fd, _ = pipe
        assert KeystrokePoller(read_fd).poll() == 0

    def test_closed_input_stops_polling(self, pipe):
        """Test polling after the input was closed."""
        read_fd, write_fd = pipe
        os.close(write_fd)
        poller = KeystrokePoller(read_fd)

        assert poller.poll() == 0
        assert poller.fd is None

    def test_without_terminal(self):
        """Test polling with no terminal."""
        assert KeystrokePoller(None).poll() == 0


class FixedSource:
    def __init__(self, count):
        self.count = count
        self.started = self.stopped = False

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def poll(self):
        return self.count


class TestTerminationController:
    """Test combining sources."""

    def test_sums_sources(self):
        """Test summing requests from every source."""
        sources = [FixedSource(1), FixedSource(2)]
        with TerminationController(sources) as controller:
            assert all(source.started for source in sources)
            assert controller.poll() == 3
        assert all(source.stopped for source in sources)

    def test_for_terminal(self):
        controller = TerminationController.for_terminal(None)
        kinds = [type(source) for source in controller.sources]
        assert kinds == [SignalListener, KeystrokePoller]
