"""Concurrent fetch scheduler.

One thread is started per fetch, on demand, and never more than
``concurrency`` are running at once. Workers talk to the scheduler
only through queues: a shared results channel, and a single-slot
cancel channel per worker. The results map and the dashboard are only
ever touched from the scheduler's own thread.

Cancellation is a small state machine driven by interrupts:

    NONE --first interrupt--> SOFT --second interrupt--> HARD

SOFT cancels every task that has not started and lets running fetches
finish. HARD asks every running worker to kill its git process group
and leaves the loop at once.
"""
import queue
import threading
import time
from collections import deque
from enum import Enum
from typing import Callable, Deque, Dict, Iterable, List, Sequence

import git

from mgit.config import DEFAULT_CONCURRENCY
from mgit.constants import GROUP_FETCH
from mgit.logging_config import get_logger
from mgit.models.repo import Repo
from mgit.models.summary import Kind, Summary
from mgit.models.task import State, Task, TaskResult
from mgit.services.git.fetch import DEFAULT_TICK, fetch_and_reconcile

logger = get_logger(__name__)

# How long to wait for killed workers to reap their children, in ticks
HARD_CANCEL_GRACE_TICKS = 40


class CancelState(Enum):
    """How far cancellation has progressed."""
    NONE = "none"
    SOFT = "soft"
    HARD = "hard"


def build_tasks(repos: Iterable[Repo]) -> List[Task]:
    """One task per configured remote of each repository.

    Repositories are taken in the order given and remotes alphabetically.
    """
    tasks = []
    for repo in repos:
        git_repo = repo.open()
        try:
            remotes = sorted(remote.name for remote in git_repo.remotes)
        finally:
            git_repo.close()
        if not remotes:
            logger.info(f"{repo.path} has no remotes, nothing to fetch")
        tasks.extend(Task(repo, remote) for remote in remotes)
    return tasks


class FetchScheduler:
    """Runs fetch tasks with bounded concurrency and a live dashboard."""

    def __init__(
        self,
        ui,
        termination,
        concurrency: int = DEFAULT_CONCURRENCY,
        tick: float = DEFAULT_TICK,
        worker: Callable[..., Summary] = fetch_and_reconcile,
    ):
        """Initialize the scheduler.

        Args:
            ui: Dashboard receiving task states (``add_task``, ``set_state``,
                ``cancel`` and ``update``)
            termination: Source of cancellation requests (``poll``)
            concurrency: Maximum number of fetches running at once
            tick: Seconds to sleep between loop iterations
            worker: Callable run on each worker thread as
                ``worker(cancel, repo, remote, tick=tick)``

        Raises:
            ValueError: If concurrency is less than 1
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.ui = ui
        self.termination = termination
        self.concurrency = concurrency
        self.tick = tick
        self.worker = worker

        self.state = CancelState.NONE
        self.active = 0
        self.peak_active = 0
        self.canceled: List[Task] = []
        self._pending: Deque[Task] = deque()
        self._results_channel: "queue.Queue[TaskResult]" = queue.Queue()
        self._cancel_channels: Dict[Task, "queue.Queue[None]"] = {}
        self._threads: List[threading.Thread] = []

    def run(self, tasks: Sequence[Task]) -> Dict[Repo, Summary]:
        """Fetch every task and return one merged summary per repository."""
        results: Dict[Repo, Summary] = {}
        for task in tasks:
            results.setdefault(task.repo, Summary())
            self.ui.add_task(task)
        self._pending = deque(tasks)
        logger.info(f"Pulling {len(tasks)} remotes of {len(results)} repos, concurrency {self.concurrency}")

        while True:
            self._drain(results)

            for _ in range(self.termination.poll()):
                self._escalate()
            if self.state is CancelState.HARD:
                break

            while (
                self.state is CancelState.NONE
                and self.active < self.concurrency
                and self._pending
            ):
                self._launch(self._pending.popleft())

            self.ui.update(results)

            if self.active == 0 and not self._pending:
                break
            time.sleep(self.tick)

        if self.state is CancelState.HARD:
            self._await_killed_workers()
        logger.info(f"Pull finished: state={self.state.value}, canceled={len(self.canceled)}")
        return results

    def _drain(self, results: Dict[Repo, Summary]) -> None:
        """Merge every finished task's summary without blocking."""
        while True:
            try:
                result = self._results_channel.get_nowait()
            except queue.Empty:
                return
            task = result.task
            results[task.repo].merge(result.summary)
            state = State.from_kind(result.summary.kind())
            self.ui.set_state(task, state)
            self._cancel_channels.pop(task, None)
            self.active -= 1
            logger.debug(f"{task} finished: {state.value}")

    def _escalate(self) -> None:
        if self.state is CancelState.NONE:
            self.state = CancelState.SOFT
            logger.info(f"Soft cancel: dropping {len(self._pending)} pending tasks")
            while self._pending:
                task = self._pending.popleft()
                self.canceled.append(task)
                self.ui.set_state(task, State.CANCELED)
            self.ui.cancel()
        elif self.state is CancelState.SOFT:
            self.state = CancelState.HARD
            logger.info(f"Hard cancel: stopping {len(self._cancel_channels)} running fetches")
            for cancel in self._cancel_channels.values():
                try:
                    cancel.put_nowait(None)
                except queue.Full:
                    pass

    def _launch(self, task: Task) -> None:
        cancel: "queue.Queue[None]" = queue.Queue(maxsize=1)
        self._cancel_channels[task] = cancel
        self.ui.set_state(task, State.FETCHING)
        thread = threading.Thread(
            target=self._work,
            args=(task, cancel),
            name=f"fetch-{task}",
            daemon=True,
        )
        self._threads.append(thread)
        self.active += 1
        self.peak_active = max(self.peak_active, self.active)
        thread.start()
        logger.debug(f"{task} started ({self.active}/{self.concurrency} active)")

    def _work(self, task: Task, cancel: "queue.Queue[None]") -> None:
        """Worker thread body: never raises, always sends exactly one result."""
        try:
            summary = self.worker(cancel, task.repo, task.remote, tick=self.tick)
        except (git.exc.GitError, OSError, ValueError) as e:
            logger.error(f"Error pulling {task}: {e}")
            summary = Summary()
            summary.add_note(
                GROUP_FETCH, Kind.FAILURE, f"failed to pull from `{task.remote}`: {e}"
            )
        except Exception as e:
            logger.exception(f"Unexpected error pulling {task}")
            summary = Summary()
            summary.add_note(
                GROUP_FETCH, Kind.FAILURE, f"unexpected error pulling from `{task.remote}`: {e!r}"
            )
        self._results_channel.put(TaskResult(task, summary))

    def _await_killed_workers(self) -> None:
        deadline = time.monotonic() + self.tick * HARD_CANCEL_GRACE_TICKS
        for thread in self._threads:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            thread.join(remaining)
