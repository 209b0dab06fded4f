"""Bounded execution of untrusted compiled candidates.

Each call to :meth:`ExecutionSupervisor.run` starts one child process and
enforces a wall-clock deadline on it:

- A spawn-and-reap task starts the child and hands the process handle
  over through a future. The deadline is armed only after the handle has
  been handed over, so there is always a process to kill.
- The reap task is the only caller of ``wait()``. When the child exits it
  sets a ``finished`` flag under a condition and notifies. The flag is
  durable: a child that exits before the supervisor starts waiting is
  still observed.
- If the deadline passes first, the whole process group is killed with
  SIGKILL and the supervisor waits for the reap to finish.
- After the reap the process group is swept with SIGKILL, so nothing the
  child left running in the background can keep writing to its output.
"""

import asyncio
import logging
import os
import signal
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Optional, Sequence

from golfsearch.core.exceptions import ExecutionFailedError
from golfsearch.core.metrics import record_execution


logger = logging.getLogger(__name__)


class ExecutionStatus(str, Enum):
    """How a supervised execution ended."""
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"  # Could not be launched at all


@dataclass
class ExecutionResult:
    """Result of one supervised execution."""
    status: ExecutionStatus
    exit_code: Optional[int]
    execution_time_ms: int
    pid: Optional[int] = None
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.status == ExecutionStatus.COMPLETED

    @property
    def timed_out(self) -> bool:
        return self.status == ExecutionStatus.TIMED_OUT


@dataclass
class _ExecutionState:
    """State shared by the two halves of a single invocation."""
    handle: asyncio.Future
    condition: asyncio.Condition = field(default_factory=asyncio.Condition)
    finished: bool = False
    exit_code: Optional[int] = None
    killed: bool = False


class ExecutionSupervisor:
    """Runs one external command at a time under a hard deadline."""

    def __init__(self, default_timeout: float = 1.0):
        self.default_timeout = default_timeout

    async def run(
        self,
        command: Sequence[str],
        stdin: Optional[IO[bytes]] = None,
        stdout: Optional[IO[bytes]] = None,
        timeout: Optional[float] = None,
    ) -> ExecutionResult:
        """Run ``command`` and wait at most ``timeout`` seconds for it.

        Args:
            command: Program and arguments, executed without a shell
            stdin: Open file to use as the child's standard input
            stdout: Open file that receives the child's standard output
            timeout: Deadline in seconds, defaults to ``default_timeout``

        Returns:
            ExecutionResult, never raises for a misbehaving child
        """
        timeout = self.default_timeout if timeout is None else timeout
        loop = asyncio.get_running_loop()
        state = _ExecutionState(handle=loop.create_future())

        start_time = time.perf_counter()
        reaper = asyncio.create_task(self._spawn_and_reap(command, stdin, stdout, state))

        # Rendezvous: do not arm the deadline before the child exists.
        try:
            proc = await state.handle
        except OSError as e:
            await reaper
            execution_time_ms = int((time.perf_counter() - start_time) * 1000)
            logger.debug(f"Could not launch {command[0]}: {e}")
            record_execution(ExecutionStatus.FAILED.value, execution_time_ms / 1000)
            return ExecutionResult(
                status=ExecutionStatus.FAILED,
                exit_code=None,
                execution_time_ms=execution_time_ms,
                error=str(e),
            )
        except Exception as e:
            # Malformed command, e.g. an embedded NUL byte.
            raise ExecutionFailedError(
                f"Could not launch {command[0]!r}: {e}",
                code="invalid_command",
            ) from e

        status = ExecutionStatus.COMPLETED
        try:
            async with state.condition:
                await asyncio.wait_for(
                    state.condition.wait_for(lambda: state.finished),
                    timeout=timeout,
                )
        except asyncio.TimeoutError:
            if self._has_exited(proc):
                logger.debug(f"Process {proc.pid} exited before its deadline was checked")
            else:
                status = ExecutionStatus.TIMED_OUT
                self._kill(proc, state)
        except asyncio.CancelledError:
            # Cancelled from outside: do not leave the child behind.
            self._kill(proc, state)
            raise
        finally:
            await asyncio.shield(reaper)

        execution_time_ms = int((time.perf_counter() - start_time) * 1000)
        record_execution(status.value, execution_time_ms / 1000)

        if status == ExecutionStatus.TIMED_OUT:
            logger.debug(f"Process {proc.pid} killed after {timeout}s")

        return ExecutionResult(
            status=status,
            exit_code=state.exit_code,
            execution_time_ms=execution_time_ms,
            pid=proc.pid,
        )

    async def _spawn_and_reap(
        self,
        command: Sequence[str],
        stdin: Optional[IO[bytes]],
        stdout: Optional[IO[bytes]],
        state: _ExecutionState,
    ) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdin=stdin if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=stdout if stdout is not None else asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
                start_new_session=True,  # Own process group, killed as a whole
            )
        except asyncio.CancelledError:
            state.handle.cancel()
            raise
        except Exception as e:
            state.handle.set_exception(e)
            return

        state.handle.set_result(proc)

        # The only reap of this child.
        exit_code = await proc.wait()
        kill_process_group(proc.pid)

        async with state.condition:
            state.exit_code = exit_code
            state.finished = True
            state.condition.notify_all()

    def _kill(self, proc: asyncio.subprocess.Process, state: _ExecutionState) -> None:
        """SIGKILL the child's process group. Safe to call more than once."""
        if state.killed or proc.returncode is not None:
            return
        state.killed = True
        kill_process_group(proc.pid)

    def _has_exited(self, proc: asyncio.subprocess.Process) -> bool:
        """Check for a pending exit status without reaping the child."""
        if proc.returncode is not None:
            return True
        if not hasattr(os, "waitid"):
            return False
        try:
            return os.waitid(os.P_PID, proc.pid, os.WEXITED | os.WNOHANG | os.WNOWAIT) is not None
        except ChildProcessError:
            # Already collected by the event loop's child watcher.
            return True


def kill_process_group(pgid: int) -> None:
    """SIGKILL every process left in a group. A group that is gone is fine."""
    try:
        os.killpg(pgid, signal.SIGKILL)
    except ProcessLookupError:
        pass
