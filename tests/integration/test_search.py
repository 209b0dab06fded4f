"""End-to-end searches with a stand-in compiler."""

import time

import pytest

from golfsearch.core.exceptions import ExecutionFailedError, InvalidCharacterError
from golfsearch.engine.compiler import Compiler, LanguageConfig
from golfsearch.engine.controller import SearchController, SearchStatus
from golfsearch.engine.harness import TestHarness


@pytest.mark.asyncio
async def test_finds_first_passing_candidate(workspace, digits, make_pipeline):
    workspace.register(b"", b"42")
    compiler, harness = make_pipeline()
    controller = SearchController(digits, compiler, harness, max_length=3)

    result = await controller.run()

    assert result.status == SearchStatus.FOUND
    assert result.found
    assert result.source == "42"
    assert result.length == 2
    # "", then 0-9, then 00 through 42
    assert result.candidates_tried == 1 + 10 + 43


@pytest.mark.asyncio
async def test_hanging_candidate_is_rejected(workspace, digits, make_pipeline):
    workspace.register(b"", b"8")
    compiler, harness = make_pipeline(hang="7", timeout=0.3)
    controller = SearchController(digits, compiler, harness, max_length=2)

    started = time.perf_counter()
    result = await controller.run()

    assert result.found
    assert result.source == "8"
    assert time.perf_counter() - started < 10.0


@pytest.mark.asyncio
async def test_exhausted_below_solution_length(workspace, digits, make_pipeline):
    workspace.register(b"", b"42")
    compiler, harness = make_pipeline()
    controller = SearchController(digits, compiler, harness, max_length=1)

    result = await controller.run()

    assert result.status == SearchStatus.EXHAUSTED
    assert not result.found
    assert result.source is None
    assert result.candidates_tried == 11


@pytest.mark.asyncio
async def test_resume_from_start_candidate(workspace, digits, make_pipeline):
    workspace.register(b"", b"42")
    compiler, harness = make_pipeline()
    controller = SearchController(digits, compiler, harness, max_length=2, start="8")

    result = await controller.run()

    assert result.source == "42"
    # "8" and "9", then 00 through 42
    assert result.candidates_tried == 2 + 43


@pytest.mark.asyncio
async def test_resume_past_solution_skips_it(workspace, digits, make_pipeline):
    workspace.register(b"", b"42")
    compiler, harness = make_pipeline()
    controller = SearchController(digits, compiler, harness, max_length=2, start="43")

    result = await controller.run()

    assert result.status == SearchStatus.EXHAUSTED
    assert result.candidates_tried == 100 - 43


@pytest.mark.asyncio
async def test_every_vector_must_match(workspace, digits, make_pipeline):
    workspace.register(b"", b"5")
    workspace.register(b"ignored", b"6")
    compiler, harness = make_pipeline()
    controller = SearchController(digits, compiler, harness, max_length=1)

    result = await controller.run()
    assert result.status == SearchStatus.EXHAUSTED


def test_start_outside_alphabet(workspace, digits, make_pipeline):
    compiler, harness = make_pipeline()
    with pytest.raises(InvalidCharacterError):
        SearchController(digits, compiler, harness, max_length=2, start="4x")


@pytest.mark.asyncio
async def test_launch_failure_is_fatal(workspace, digits, make_toolchain, supervisor):
    workspace.register(b"", b"1")
    toolchain = make_toolchain()
    broken = LanguageConfig(
        file_extension=toolchain.file_extension,
        compile_command=toolchain.compile_command,
        run_command=["/nonexistent/golfsearch-program"],
    )
    harness = TestHarness(supervisor, workspace, timeout=1.0)
    compiler = Compiler(broken, workspace)
    controller = SearchController(digits, compiler, harness, max_length=1)

    with pytest.raises(ExecutionFailedError):
        await controller.run()
