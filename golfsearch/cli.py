"""Command-line interface for golf-search.

Usage:
    golfsearch -n 3 -t "" "42" -l c
    golfsearch -n 4 -t "1 2" "3" -s "main" -T 0.5 -v
"""

import argparse
import asyncio
import logging
import os
import shutil
import sys
from enum import IntEnum
from typing import Optional, Sequence

from pydantic import ValidationError

from golfsearch.config import Settings, get_settings
from golfsearch.core.exceptions import (
    CompilerUnavailableError,
    ConfigurationError,
    GolfSearchError,
)
from golfsearch.core.metrics import record_app_info, write_metrics
from golfsearch.engine.alphabet import ALPHABETS, alphabet_from_settings
from golfsearch.engine.compiler import Compiler, Language, parse_command, resolve_language
from golfsearch.engine.controller import SearchController, SearchResult
from golfsearch.engine.harness import TestHarness
from golfsearch.engine.supervisor import ExecutionSupervisor
from golfsearch.engine.workspace import Workspace


logger = logging.getLogger("golfsearch")


class ExitCode(IntEnum):
    FOUND = 0
    FAILURE = 1
    CONFIGURATION_ERROR = 2  # Same as argparse usage errors
    EXHAUSTED = 3


class VectorAction(argparse.Action):
    """Collects -t and -f vectors into one list, keeping command-line order."""

    def __call__(self, parser, namespace, values, option_string=None):
        vectors = list(getattr(namespace, self.dest, None) or [])
        vectors.append((self.const, values[0], values[1]))
        setattr(namespace, self.dest, vectors)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="golfsearch",
        description="Brute-force search for the shortest program that passes every test",
    )
    parser.add_argument("-n", "--max-length", type=int, help="Maximum candidate length")
    parser.add_argument(
        "-t", "--test", nargs=2, metavar=("INPUT", "OUTPUT"), dest="vectors",
        action=VectorAction, const="text", help="Register a test from literal input and output",
    )
    parser.add_argument(
        "-f", "--test-files", nargs=2, metavar=("INPUT_PATH", "OUTPUT_PATH"), dest="vectors",
        action=VectorAction, const="file", help="Register a test read from two files",
    )
    parser.add_argument("-s", "--start", help="Resume the search from this candidate")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log every candidate to stderr, keeping stdout for the result (twice for debug)")
    parser.add_argument("-T", "--timeout", type=float, help="Seconds each test may run")
    parser.add_argument(
        "-l", "--language", choices=[l.value for l in Language], help="Candidate language",
    )
    parser.add_argument("-a", "--alphabet", choices=sorted(ALPHABETS), help="Named alphabet")
    parser.add_argument("--charset", help="Literal alphabet, in search order")
    parser.add_argument("--compile-command", help="Compiler command with {source} and {artifact} placeholders")
    parser.add_argument("--run-command", help="Run command with {source} and {artifact} placeholders")
    parser.add_argument("--work-dir", help="Directory for the fixed temporary files")
    parser.add_argument("--escapes", action="store_true", help="Interpret backslash escapes in -t arguments")
    parser.add_argument("--stop-on-first-mismatch", action="store_true", default=None, help="Skip remaining tests after a failure")
    parser.add_argument("--metrics-file", help="Write Prometheus metrics to this file on exit")
    return parser


def build_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Overlay command-line options on the environment settings."""
    if base is None:
        try:
            base = get_settings()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid environment configuration: {e}", code="invalid_settings") from e

    updates = {
        "max_length": args.max_length,
        "timeout_seconds": args.timeout,
        "language": args.language,
        "alphabet": args.alphabet,
        "charset": args.charset,
        "work_dir": args.work_dir,
        "stop_on_first_mismatch": args.stop_on_first_mismatch,
        "metrics_file": args.metrics_file,
    }
    if args.compile_command is not None:
        updates["compile_command"] = parse_command(args.compile_command)
    if args.run_command is not None:
        updates["run_command"] = parse_command(args.run_command)
    if args.verbose:
        updates["verbose"] = True

    data = base.model_dump()
    data.update({k: v for k, v in updates.items() if v is not None})

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", code="invalid_settings") from e


def unescape(text: bytes) -> bytes:
    try:
        return text.decode("unicode_escape").encode("latin-1")
    except (UnicodeDecodeError, UnicodeEncodeError) as e:
        raise ConfigurationError(f"Invalid escape sequence in {text!r}: {e}", code="invalid_escape") from e


def load_vectors(entries: Sequence[tuple[str, str, str]], escapes: bool = False) -> list[tuple[bytes, bytes]]:
    """Turn -t/-f arguments into (input, expected output) byte pairs."""
    vectors = []
    for kind, first, second in entries:
        if kind == "file":
            try:
                with open(first, "rb") as f:
                    input_data = f.read()
                with open(second, "rb") as f:
                    output_data = f.read()
            except OSError as e:
                raise ConfigurationError(f"Could not read test files: {e}", code="unreadable_test") from e
        else:
            input_data = os.fsencode(first)
            output_data = os.fsencode(second)
            if escapes:
                input_data = unescape(input_data)
                output_data = unescape(output_data)
        vectors.append((input_data, output_data))
    return vectors


async def run_search(config: Settings, vectors: Sequence[tuple[bytes, bytes]], start: Optional[str] = None) -> SearchResult:
    """Set up the workspace and toolchain, then run the search."""
    alphabet = alphabet_from_settings(config.alphabet, config.charset)
    language = resolve_language(config.language, config.compile_command, config.run_command)
    record_app_info(config.language)

    if language.compile_command and shutil.which(language.compile_command[0]) is None:
        raise CompilerUnavailableError(
            f"Could not find the compiler: {language.compile_command[0]}",
            code="compiler_unavailable",
        )

    workspace = Workspace(config.work_dir, source_extension=language.file_extension)
    workspace.prepare()
    for input_data, output_data in vectors:
        workspace.register(input_data, output_data)

    if not vectors:
        logger.warning("No tests registered: the first candidate that compiles will be accepted")

    supervisor = ExecutionSupervisor(default_timeout=config.timeout_seconds)
    harness = TestHarness(
        supervisor,
        workspace,
        timeout=config.timeout_seconds,
        stop_on_first_mismatch=config.stop_on_first_mismatch,
    )
    compiler = Compiler(language, workspace, timeout=config.compile_timeout_seconds)
    controller = SearchController(
        alphabet,
        compiler,
        harness,
        max_length=config.max_length,
        min_length=config.min_length,
        start=start,
        verbose=config.verbose,
        progress_interval=config.progress_interval,
    )

    return await controller.run()


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(stream=sys.stderr, level=level, format="%(message)s")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    config: Optional[Settings] = None
    try:
        config = build_settings(args)
        if config.verbose and not args.verbose:
            logger.setLevel(logging.INFO)
        vectors = load_vectors(args.vectors or [], escapes=args.escapes)
        result = asyncio.run(run_search(config, vectors, start=args.start))
    except ConfigurationError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return ExitCode.CONFIGURATION_ERROR
    except GolfSearchError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return ExitCode.FAILURE
    finally:
        if config is not None and config.metrics_file:
            try:
                write_metrics(config.metrics_file)
            except OSError as e:
                logger.warning(f"Could not write metrics to {config.metrics_file}: {e}")

    if result.found:
        print(result.source)
        logger.info(f"Found after {result.candidates_tried} candidates in {result.elapsed_seconds:.1f}s")
        return ExitCode.FOUND

    print(
        f"Search space exhausted: no candidate up to length {config.max_length} passed "
        f"({result.candidates_tried} tried)",
        file=sys.stderr,
    )
    return ExitCode.EXHAUSTED


if __name__ == "__main__":
    sys.exit(main())
