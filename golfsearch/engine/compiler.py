"""Toolchain table and compiler invocation for candidates.

Compilation failures are the common case during a search and are not
errors: the candidate is simply rejected. Only a compiler that cannot be
started at all is fatal.
"""

import asyncio
import logging
import shlex
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from golfsearch.core.exceptions import CompilerUnavailableError, ConfigurationError
from golfsearch.core.metrics import record_compilation
from golfsearch.engine.workspace import Workspace


logger = logging.getLogger(__name__)


class Language(str, Enum):
    """Supported candidate languages."""
    C = "c"
    CPP = "cpp"
    PYTHON = "python"


@dataclass(frozen=True)
class LanguageConfig:
    """Configuration for a candidate language.

    Commands may contain ``{source}`` and ``{artifact}`` placeholders.
    """
    file_extension: str
    compile_command: Optional[list[str]]
    run_command: list[str]


LANGUAGE_CONFIGS: dict[Language, LanguageConfig] = {
    Language.C: LanguageConfig(
        file_extension=".c",
        compile_command=["gcc", "{source}", "-o", "{artifact}"],
        run_command=["{artifact}"],
    ),
    Language.CPP: LanguageConfig(
        file_extension=".cpp",
        compile_command=["g++", "{source}", "-o", "{artifact}"],
        run_command=["{artifact}"],
    ),
    Language.PYTHON: LanguageConfig(
        file_extension=".py",
        compile_command=[sys.executable, "-m", "py_compile", "{source}"],  # Syntax check only
        run_command=[sys.executable, "{source}"],
    ),
}


def resolve_language(
    language: str,
    compile_command: Optional[list[str]] = None,
    run_command: Optional[list[str]] = None,
) -> LanguageConfig:
    """Pick a toolchain, letting explicit commands override the table."""
    try:
        config = LANGUAGE_CONFIGS[Language(language.lower())]
    except ValueError:
        raise ConfigurationError(
            f"Unsupported language: {language} (choose from {', '.join(l.value for l in Language)})",
            code="unsupported_language",
        )

    if compile_command is None and run_command is None:
        return config

    return LanguageConfig(
        file_extension=config.file_extension,
        compile_command=compile_command if compile_command is not None else config.compile_command,
        run_command=run_command if run_command is not None else config.run_command,
    )


def parse_command(command: str) -> list[str]:
    """Split a command line given as a single string."""
    parts = shlex.split(command)
    if not parts:
        raise ConfigurationError("Command must not be empty", code="empty_command")
    return parts


@dataclass
class CompileResult:
    """Result of compiling one candidate."""
    success: bool
    exit_code: Optional[int]
    stderr: str = ""
    timed_out: bool = False


class Compiler:
    """Compiles candidate text at the workspace's fixed paths."""

    def __init__(self, config: LanguageConfig, workspace: Workspace, timeout: float = 30.0):
        self.config = config
        self.workspace = workspace
        self.timeout = timeout

    def _expand(self, command: list[str]) -> list[str]:
        source = str(self.workspace.source_path)
        artifact = str(self.workspace.artifact_path)
        return [part.replace("{source}", source).replace("{artifact}", artifact) for part in command]

    @property
    def run_command(self) -> list[str]:
        """Command that runs the compiled candidate."""
        return self._expand(self.config.run_command)

    async def compile(self, source: str) -> CompileResult:
        """Write ``source`` to the source path and run the compiler on it.

        Raises:
            CompilerUnavailableError: The compiler could not be started
            WorkspaceIOError: The source file could not be written
        """
        self.workspace.write_source(source)

        if not self.config.compile_command:
            record_compilation("success")
            return CompileResult(success=True, exit_code=0)

        self.workspace.remove_artifact()
        compile_cmd = self._expand(self.config.compile_command)

        try:
            proc = await asyncio.create_subprocess_exec(
                *compile_cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CompilerUnavailableError(
                f"Could not run the compiler {compile_cmd[0]}: {e}",
                code="compiler_unavailable",
            ) from e

        try:
            _, compile_stderr = await asyncio.wait_for(
                proc.communicate(),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
            record_compilation("timeout")
            logger.warning(f"Compilation timed out after {self.timeout}s: {source!r}")
            return CompileResult(success=False, exit_code=None, timed_out=True)

        success = proc.returncode == 0
        record_compilation("success" if success else "failure")

        return CompileResult(
            success=success,
            exit_code=proc.returncode,
            stderr=compile_stderr.decode(errors="replace")[:2000],
        )
