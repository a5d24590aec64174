import time
import logging
from enum import Enum
from typing import Callable, List, Optional

import psutil

from modlaunch.local import app_globals
from modlaunch.local.launcher import process_utils
from modlaunch.local.launcher.models import ErrorCategory, LaunchOutcome, error_result, success_result
from modlaunch.local.launcher.windows import default_closer

log = logging.getLogger(__name__)


class StopState(Enum):
    RUNNING = "running"
    GRACEFUL_PENDING = "graceful_pending"
    FORCE_KILL = "force_kill"
    EXITED = "exited"
    KILL_FAILED = "kill_failed"


class ProcessShutdown:
    """
    Drives one process tree from RUNNING to EXITED or KILL_FAILED.

    RUNNING -> EXITED                           (already gone)
    RUNNING -> GRACEFUL_PENDING -> EXITED        (tree closed before the deadline)
    RUNNING -> GRACEFUL_PENDING -> FORCE_KILL    (deadline passed, or descendants outlived the root)
    RUNNING -> FORCE_KILL                       (no closable window)
    FORCE_KILL -> EXITED | KILL_FAILED

    Descendants are recorded before the close request goes out, since a root
    that exits hands its children to init and they can no longer be found
    through it.
    """

    def __init__(self, proc: psutil.Process, closer, graceful_timeout: float,
                 reap_timeout: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.proc = proc
        self.label = process_utils.describe(proc)
        self.closer = closer
        self.graceful_timeout = graceful_timeout
        self.reap_timeout = reap_timeout
        self.clock = clock
        self.state = StopState.RUNNING
        self.deadline: Optional[float] = None
        self.descendants: List[psutil.Process] = []
        self.error: Optional[str] = None

    def _transition(self, state: StopState) -> None:
        log.debug(f"{self.label}: {self.state.value} -> {state.value}")
        self.state = state

    def _list_descendants(self) -> List[psutil.Process]:
        try:
            return self.proc.children(recursive=True)
        except psutil.NoSuchProcess:
            return []
        except psutil.Error as e:
            log.warning(f"Could not list children of {self.label}: {e}")
            return []

    def _live_descendants(self) -> List[psutil.Process]:
        return [p for p in self.descendants if process_utils.is_alive(p)]

    def begin(self) -> None:
        """Leaves RUNNING: either the process is already gone or a close request goes out."""
        if not process_utils.is_alive(self.proc):
            self._reap()
            self._transition(StopState.EXITED)
            return

        self.descendants = self._list_descendants()
        try:
            closed = self.closer.request_close(self.proc)
        except psutil.NoSuchProcess:
            closed = True
        except psutil.Error as e:
            log.warning(f"Close request for {self.label} failed: {e}")
            closed = False

        if closed:
            self.deadline = self.clock() + self.graceful_timeout
            self._transition(StopState.GRACEFUL_PENDING)
        else:
            log.info(f"{self.label} has no closable window, skipping graceful close.")
            self._transition(StopState.FORCE_KILL)

    def await_exit(self) -> None:
        """Waits out the deadline armed by begin(). Returns early once the process exits."""
        if self.state is not StopState.GRACEFUL_PENDING:
            return
        remaining = max(0.0, self.deadline - self.clock())
        try:
            self.proc.wait(timeout=remaining)
        except psutil.TimeoutExpired:
            log.warning(f"{self.label} ignored the close request for {self.graceful_timeout}s.")
            self._transition(StopState.FORCE_KILL)
            return
        except psutil.NoSuchProcess:
            pass

        survivors = self._live_descendants()
        if survivors:
            log.warning(f"{self.label} exited but left {len(survivors)} descendant(s) running.")
            self._transition(StopState.FORCE_KILL)
        else:
            self._transition(StopState.EXITED)

    def force_kill(self) -> None:
        """Kills every live member of the tree: recorded descendants, current children and the root."""
        if self.state is not StopState.FORCE_KILL:
            return
        members = {p.pid: p for p in self.descendants}
        for child in self._list_descendants():
            members.setdefault(child.pid, child)
        tree = [p for pid, p in members.items() if pid != self.proc.pid]
        tree.append(self.proc)

        errors = []
        for member in tree:
            if not process_utils.is_alive(member):
                continue
            try:
                log.warning(f"Killing {process_utils.describe(member)}.")
                member.kill()
            except psutil.NoSuchProcess:
                continue
            except psutil.Error as e:
                errors.append(f"{process_utils.describe(member)}: {e}")

        psutil.wait_procs(tree, timeout=self.reap_timeout)
        survivors = [p for p in tree if process_utils.is_alive(p)]
        if survivors:
            errors.append("still alive after kill: " + ", ".join(process_utils.describe(p) for p in survivors))
            self.error = "; ".join(errors)
            self._transition(StopState.KILL_FAILED)
            return
        if errors:
            log.warning(f"Errors while killing the tree of {self.label}: {'; '.join(errors)}")
        self._transition(StopState.EXITED)

    def _reap(self) -> None:
        try:
            self.proc.wait(timeout=0)
        except (psutil.TimeoutExpired, psutil.NoSuchProcess):
            pass
        except psutil.Error as e:
            log.debug(f"Could not reap {self.label}: {e}")


class ShutdownOrchestrator:
    """Stops a process group gracefully first, forcefully after the timeout."""

    def __init__(self, closer=None, graceful_timeout: Optional[float] = None,
                 reap_timeout: Optional[float] = None, clock: Callable[[], float] = time.monotonic) -> None:
        self._closer = closer
        self._graceful_timeout = graceful_timeout
        self._reap_timeout = reap_timeout
        self.clock = clock

    @property
    def closer(self):
        # Resolved per stop so a changed POSIX_SIGTERM_CLOSE setting applies.
        return self._closer or default_closer()

    @property
    def graceful_timeout(self) -> float:
        if self._graceful_timeout is not None:
            return self._graceful_timeout
        return app_globals.GRACEFUL_SHUTDOWN_TIMEOUT

    @property
    def reap_timeout(self) -> float:
        if self._reap_timeout is not None:
            return self._reap_timeout
        return app_globals.KILL_REAP_TIMEOUT

    def stop(self, group: Optional[List[psutil.Process]]) -> LaunchOutcome:
        """
        Runs the shutdown sequence for every process in the group.

        Close requests go out to all processes first so their deadlines run in
        parallel; a failure on one process never prevents the others from being
        stopped.
        """
        if not group:
            return error_result(ErrorCategory.NOT_RUNNING, "no running processes", "stop failed")

        closer = self.closer
        machines = [
            ProcessShutdown(proc, closer, self.graceful_timeout, self.reap_timeout, self.clock)
            for proc in group
        ]
        log.info(f"Initiating graceful shutdown for {len(machines)} process(es)...")
        for machine in machines:
            machine.begin()
        for machine in machines:
            machine.await_exit()
        for machine in machines:
            machine.force_kill()

        failures = [m for m in machines if m.state is StopState.KILL_FAILED]
        if failures:
            details = "; ".join(f"{m.label}: {m.error}" for m in failures)
            log.error(f"Failed to stop {len(failures)} process(es): {details}")
            return error_result(ErrorCategory.TERMINATION_FAILED, details, "failed to stop game")

        log.info("All processes stopped.")
        return success_result("game stopped")
