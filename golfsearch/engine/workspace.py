"""Fixed temporary files shared by the compiler and the test harness.

Candidates are resolved one at a time, so the same handful of paths is
reused for every candidate. Every writer closes its file before the next
reader opens it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from golfsearch.core.exceptions import WorkspaceIOError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestVector:
    """A single (input, expected output) pair a candidate must satisfy."""
    __test__ = False

    index: int  # Positive, assigned in registration order
    input: bytes
    expected_output: bytes


class Workspace:
    """Owns the well-known file paths of one search run."""

    def __init__(self, root: str | Path, source_extension: str = ".c"):
        self.root = Path(root)
        self.source_extension = source_extension
        self._vectors: list[TestVector] = []

    @property
    def source_path(self) -> Path:
        return self.root / f"test_source{self.source_extension}"

    @property
    def artifact_path(self) -> Path:
        return self.root / "test_program.out"

    @property
    def captured_output_path(self) -> Path:
        return self.root / "test_program_output"

    def input_path(self, vector: TestVector) -> Path:
        return self.root / f"test{vector.index}_in"

    def expected_output_path(self, vector: TestVector) -> Path:
        return self.root / f"test{vector.index}_out"

    @property
    def vectors(self) -> list[TestVector]:
        """Registered vectors in ascending index order."""
        return list(self._vectors)

    def prepare(self) -> None:
        """Create the workspace directory if needed."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkspaceIOError(f"Could not create work directory {self.root}: {e}") from e

    def register(self, input_data: bytes, expected_output: bytes) -> TestVector:
        """Persist a test vector to its fixed files and return it."""
        vector = TestVector(
            index=len(self._vectors) + 1,
            input=input_data,
            expected_output=expected_output,
        )

        self._write(self.input_path(vector), input_data, f"input for test case {vector.index}")
        self._write(self.expected_output_path(vector), expected_output, f"output for test case {vector.index}")

        self._vectors.append(vector)
        logger.debug(f"Registered test case {vector.index} ({len(input_data)} bytes in, {len(expected_output)} bytes out)")
        return vector

    def write_source(self, text: str) -> Path:
        """Write candidate text to the fixed source path."""
        self._write(self.source_path, text.encode("utf-8"), "source file")
        return self.source_path

    def remove_artifact(self) -> None:
        try:
            self.artifact_path.unlink(missing_ok=True)
        except OSError as e:
            raise WorkspaceIOError(f"Could not remove stale artifact {self.artifact_path}: {e}") from e

    def _write(self, path: Path, data: bytes, what: str) -> None:
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise WorkspaceIOError(f"Could not write {what} at {path}: {e}") from e
