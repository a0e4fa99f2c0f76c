"""Fetching one remote of one repository, then reconciling its branches.

Each fetch runs ``git fetch <remote>`` as a child placed in a new
process group, so a hard cancel can kill the whole subtree (git spawns
helpers such as ``git-remote-https`` and ``ssh``) without touching mgit
itself. This relies on POSIX process groups.
"""
import os
import queue
import signal
import subprocess
import tempfile
import time
from typing import List, Optional

from mgit.constants import GROUP_BRANCH, GROUP_FETCH, GROUP_VALIDATION
from mgit.logging_config import get_logger
from mgit.models.repo import Repo
from mgit.models.summary import Kind, Summary
from mgit.services.git.branches import TrackingBranches, reconcile

logger = get_logger(__name__)

DEFAULT_TICK = 0.05


class ProcessGroup:
    """A child process that leads its own process group.

    Output is captured to temporary files rather than pipes so a chatty
    child can never stall on a full pipe while it is being polled.
    """

    def __init__(self, args: List[str], cwd: str, env: Optional[dict] = None):
        self.args = args
        self._stdout = tempfile.TemporaryFile()
        self._stderr = tempfile.TemporaryFile()
        try:
            self.process = subprocess.Popen(
                args,
                cwd=cwd,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=self._stdout,
                stderr=self._stderr,
                start_new_session=True,
            )
        except OSError:
            self.close()
            raise
        # A new session makes the child the leader of a new group
        self.pgid = self.process.pid

    def __enter__(self) -> "ProcessGroup":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.process.poll() is None:
            self.kill()
        self.close()

    def poll(self) -> Optional[int]:
        """Return the exit status, or None while the child is running."""
        return self.process.poll()

    def kill(self) -> None:
        """Kill every process in the group and reap the leader."""
        try:
            os.killpg(self.pgid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        self.process.wait()
        logger.debug(f"Killed process group {self.pgid} ({' '.join(self.args)})")

    def output(self) -> str:
        """Captured stdout and stderr, combined."""
        parts = []
        for stream in (self._stdout, self._stderr):
            stream.seek(0)
            text = stream.read().decode("utf-8", errors="replace").strip()
            if text:
                parts.append(text)
        return "\n".join(parts)

    def close(self) -> None:
        self._stdout.close()
        self._stderr.close()


def _canceled(cancel: "queue.Queue") -> bool:
    try:
        cancel.get_nowait()
    except queue.Empty:
        return False
    return True


def fetch_and_reconcile(
    cancel: "queue.Queue", repo: Repo, remote: str, tick: float = DEFAULT_TICK
) -> Summary:
    """Fetch ``remote`` of ``repo`` and reconcile the branches tracking it.

    Runs on a worker thread. ``cancel`` is the single-slot channel the
    scheduler uses to ask for a hard stop; when a message arrives the
    child's process group is killed and an empty summary is returned.

    Returns:
        A summary holding only this task's notes, for the scheduler to merge.
    """
    summary = Summary()
    env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
    logger.debug(f"Fetching {remote} in {repo.full_path}")
    started = time.monotonic()
    try:
        child = ProcessGroup(["git", "fetch", remote], cwd=repo.full_path, env=env)
    except OSError as e:
        summary.add_note(
            GROUP_FETCH, Kind.FAILURE, f"failed to fetch from `{remote}`: could not run git: {e}"
        )
        return summary

    with child:
        while True:
            status = child.poll()
            if status is not None:
                break
            if _canceled(cancel):
                child.kill()
                logger.info(f"Fetch of {remote} in {repo.full_path} killed")
                return Summary()
            time.sleep(tick)
        output = child.output()

    logger.debug(
        f"git fetch {remote} in {repo.full_path} exited {status} "
        f"after {time.monotonic() - started:.2f}s"
    )
    if status != 0:
        detail = output or f"git exited with status {status}"
        summary.add_note(GROUP_FETCH, Kind.FAILURE, f"failed to fetch from `{remote}`: {detail}")
        return summary

    summary.add_note(GROUP_FETCH, Kind.NONE, f"fetched from `{remote}`")

    git_repo = repo.open()
    try:
        branches = TrackingBranches.for_remote(git_repo, remote)
        for error in branches.errors:
            summary.add_note(GROUP_VALIDATION, Kind.FAILURE, error)
        for branch in branches:
            if _canceled(cancel):
                logger.info(f"Reconciliation of {repo.full_path} abandoned")
                return Summary()
            kind, message = reconcile(git_repo, branch)
            summary.add_note(GROUP_BRANCH, kind, message)
    finally:
        git_repo.close()
    return summary
