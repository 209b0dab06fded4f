"""Test harness for compiled candidates.

Runs a compiled candidate against every registered test vector and
accepts it only if all captured outputs match byte for byte.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

from golfsearch.core.exceptions import WorkspaceIOError
from golfsearch.engine.supervisor import ExecutionStatus, ExecutionSupervisor
from golfsearch.engine.workspace import TestVector, Workspace


logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class RunOutcome(str, Enum):
    """Outcome of running a candidate on one test vector."""
    MATCHED = "matched"
    MISMATCHED = "mismatched"
    TIMED_OUT = "timed_out"
    EXECUTION_FAILED = "execution_failed"


@dataclass
class VectorResult:
    """Result of running a single test vector."""
    index: int
    outcome: RunOutcome
    exit_code: Optional[int]
    execution_time_ms: int
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.outcome == RunOutcome.MATCHED


@dataclass
class HarnessReport:
    """Complete result of testing one candidate."""
    accepted: bool  # All vectors matched
    passed_tests: int
    total_tests: int
    total_execution_time_ms: int
    results: list[VectorResult]

    @property
    def launch_failed(self) -> bool:
        return any(r.outcome == RunOutcome.EXECUTION_FAILED for r in self.results)


def are_streams_equal(first: BinaryIO, second: BinaryIO) -> bool:
    """Compare two binary streams to the end of both.

    Streams of different length are never equal, even when one is a
    prefix of the other.
    """
    while True:
        chunk1 = first.read(CHUNK_SIZE)
        chunk2 = second.read(CHUNK_SIZE)
        if chunk1 != chunk2:
            return False
        if not chunk1:
            return True


def are_files_equal(path1: str | Path, path2: str | Path) -> bool:
    """Byte-exact comparison of two files."""
    try:
        with open(path1, "rb") as f1, open(path2, "rb") as f2:
            return are_streams_equal(f1, f2)
    except OSError as e:
        raise WorkspaceIOError(f"Could not compare {path1} with {path2}: {e}") from e


class TestHarness:
    """Runs a compiled candidate against the workspace's test vectors.

    By default every vector is run even after a mismatch, so that all
    failures show up in the report. ``stop_on_first_mismatch`` skips the
    rest; the accept/reject decision is the same either way.
    """
    __test__ = False

    def __init__(
        self,
        supervisor: ExecutionSupervisor,
        workspace: Workspace,
        timeout: float = 1.0,
        stop_on_first_mismatch: bool = False,
    ):
        self.supervisor = supervisor
        self.workspace = workspace
        self.timeout = timeout
        self.stop_on_first_mismatch = stop_on_first_mismatch

    async def evaluate(
        self,
        run_command: Sequence[str],
        vectors: Optional[Sequence[TestVector]] = None,
    ) -> HarnessReport:
        """Run ``run_command`` once per vector and compare outputs.

        Args:
            run_command: Command that runs the compiled candidate
            vectors: Vectors to run, defaults to all registered vectors

        Returns:
            HarnessReport with per-vector outcomes
        """
        if vectors is None:
            vectors = self.workspace.vectors

        results: list[VectorResult] = []
        total_time = 0

        for vector in sorted(vectors, key=lambda v: v.index):
            result = await self.run_vector(run_command, vector)
            total_time += result.execution_time_ms
            results.append(result)

            if not result.passed and self.stop_on_first_mismatch:
                break

        passed_count = sum(1 for r in results if r.passed)

        return HarnessReport(
            accepted=passed_count == len(vectors),
            passed_tests=passed_count,
            total_tests=len(vectors),
            total_execution_time_ms=total_time,
            results=results,
        )

    async def run_vector(self, run_command: Sequence[str], vector: TestVector) -> VectorResult:
        """Run the candidate on one vector with redirected input and output."""
        input_path = self.workspace.input_path(vector)
        output_path = self.workspace.captured_output_path

        try:
            with open(input_path, "rb") as stdin, open(output_path, "wb") as stdout:
                execution = await self.supervisor.run(
                    run_command,
                    stdin=stdin,
                    stdout=stdout,
                    timeout=self.timeout,
                )
        except OSError as e:
            raise WorkspaceIOError(f"Could not open files for test case {vector.index}: {e}") from e

        if execution.status == ExecutionStatus.FAILED:
            outcome = RunOutcome.EXECUTION_FAILED
        elif execution.status == ExecutionStatus.TIMED_OUT:
            outcome = RunOutcome.TIMED_OUT
        elif are_files_equal(self.workspace.expected_output_path(vector), output_path):
            outcome = RunOutcome.MATCHED
        else:
            outcome = RunOutcome.MISMATCHED

        return VectorResult(
            index=vector.index,
            outcome=outcome,
            exit_code=execution.exit_code,
            execution_time_ms=execution.execution_time_ms,
            error=execution.error,
        )
