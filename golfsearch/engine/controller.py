"""Search controller.

Drives the outer loop of the search: lengths from the start length up to
the maximum, and every candidate of each length in enumeration order.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from golfsearch.core.exceptions import ExecutionFailedError
from golfsearch.core.metrics import record_candidate, record_length
from golfsearch.engine.alphabet import Alphabet
from golfsearch.engine.compiler import Compiler
from golfsearch.engine.enumerator import MixedRadixEnumerator
from golfsearch.engine.harness import HarnessReport, RunOutcome, TestHarness


logger = logging.getLogger(__name__)


class SearchStatus(str, Enum):
    FOUND = "found"
    EXHAUSTED = "exhausted"


@dataclass
class SearchResult:
    """Result of a complete search."""
    status: SearchStatus
    source: Optional[str]  # Accepted candidate text if found
    length: Optional[int]
    candidates_tried: int
    elapsed_seconds: float

    @property
    def found(self) -> bool:
        return self.status == SearchStatus.FOUND


class SearchController:
    """Enumerates, compiles and tests candidates until one is accepted.

    Features:
    - Lengths from the start length up to ``max_length`` inclusive
    - Resuming from a given candidate text
    - Per-candidate verbose logging
    - Periodic progress logging
    """

    def __init__(
        self,
        alphabet: Alphabet,
        compiler: Compiler,
        harness: TestHarness,
        max_length: int,
        min_length: int = 0,
        start: Optional[str] = None,
        verbose: bool = False,
        progress_interval: int = 10000,
    ):
        self.alphabet = alphabet
        self.compiler = compiler
        self.harness = harness
        self.max_length = max_length
        self.verbose = verbose
        self.progress_interval = progress_interval

        if start:
            # Validates the resume text before any search starts.
            self.start_indices: Optional[list[int]] = alphabet.decode(start)
            self.start_length = len(start)
        else:
            self.start_indices = None
            self.start_length = min_length

        self.candidates_tried = 0

    async def run(self) -> SearchResult:
        """Search until a candidate is accepted or the space is exhausted."""
        started = time.perf_counter()

        for length in range(self.start_length, self.max_length + 1):
            start = self.start_indices if length == self.start_length else None
            source = await self.search_length(length, start)
            if source is not None:
                return SearchResult(
                    status=SearchStatus.FOUND,
                    source=source,
                    length=length,
                    candidates_tried=self.candidates_tried,
                    elapsed_seconds=time.perf_counter() - started,
                )

        return SearchResult(
            status=SearchStatus.EXHAUSTED,
            source=None,
            length=None,
            candidates_tried=self.candidates_tried,
            elapsed_seconds=time.perf_counter() - started,
        )

    async def search_length(self, length: int, start: Optional[list[int]] = None) -> Optional[str]:
        """Try every candidate of one length, returning the first accepted text."""
        enumerator = MixedRadixEnumerator(self.alphabet.radix, length, start)
        record_length(length)
        logger.info(f"Searching length {length} ({enumerator.space_size} candidates from rank {enumerator.rank()})")

        for indices in enumerator.candidates():
            source = self.alphabet.encode(indices)
            if await self.test_candidate(source):
                return source

            if self.progress_interval and self.candidates_tried % self.progress_interval == 0:
                logger.debug(
                    f"Tried {self.candidates_tried} candidates, "
                    f"at {enumerator.rank() + 1}/{enumerator.space_size} of length {length}"
                )

        return None

    async def test_candidate(self, source: str) -> bool:
        """Compile and test one candidate.

        Raises:
            ExecutionFailedError: The compiled candidate could not be launched
        """
        self.candidates_tried += 1

        compile_result = await self.compiler.compile(source)
        if not compile_result.success:
            record_candidate("compile_error")
            if self.verbose:
                logger.info(f"[ Compile Error ] {source}")
            return False

        report: HarnessReport = await self.harness.evaluate(self.compiler.run_command)

        if report.launch_failed:
            failed = next(r for r in report.results if r.outcome == RunOutcome.EXECUTION_FAILED)
            raise ExecutionFailedError(
                f"Could not run the compiled program: {failed.error}",
                code="execution_failed",
            )

        if report.accepted:
            record_candidate("accepted")
            return True

        record_candidate("rejected")
        if self.verbose:
            timeouts = sum(1 for r in report.results if r.outcome == RunOutcome.TIMED_OUT)
            suffix = f" ({timeouts} timed out)" if timeouts else ""
            logger.info(f"[  Not Passing  ] {source}{suffix}")
        return False

