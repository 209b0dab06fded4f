"""Search engine - brute-force search for the shortest passing program.

Enumerates candidate programs over a fixed alphabet in order of length,
compiles each one and runs it against the registered test vectors under
a hard deadline.
"""

from golfsearch.engine.alphabet import Alphabet
from golfsearch.engine.controller import SearchController, SearchResult
from golfsearch.engine.enumerator import MixedRadixEnumerator
from golfsearch.engine.harness import TestHarness
from golfsearch.engine.supervisor import ExecutionSupervisor

__all__ = [
    "Alphabet",
    "ExecutionSupervisor",
    "MixedRadixEnumerator",
    "SearchController",
    "SearchResult",
    "TestHarness",
]
