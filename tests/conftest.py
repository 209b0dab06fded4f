import stat
from pathlib import Path
from typing import Callable, Optional

import pytest

from golfsearch.engine.alphabet import Alphabet
from golfsearch.engine.compiler import Compiler, LanguageConfig
from golfsearch.engine.harness import TestHarness
from golfsearch.engine.supervisor import ExecutionSupervisor
from golfsearch.engine.workspace import Workspace


# A stand-in compiler: the "compiled" program prints its own source text.
# Sources with a leading zero fail to compile; the source in $HANG hangs.
FAKE_COMPILER = """#!/bin/sh
src=$(cat "$1")
case "$src" in
  0*) echo "leading zero" >&2; exit 1 ;;
esac
if [ -n "{hang}" ] && [ "$src" = "{hang}" ]; then
  printf '#!/bin/sh\\nexec sleep 30\\n' > "$2"
else
  printf '#!/bin/sh\\nprintf %%s "%s"\\n' "$src" > "$2"
fi
chmod +x "$2"
"""


def write_script(path: Path, body: str) -> Path:
    """Write an executable shell script."""
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def workspace(tmp_path) -> Workspace:
    """A workspace rooted in a fresh temporary directory."""
    ws = Workspace(tmp_path / "work", source_extension=".txt")
    ws.prepare()
    return ws


@pytest.fixture
def supervisor() -> ExecutionSupervisor:
    return ExecutionSupervisor(default_timeout=2.0)


@pytest.fixture
def digits() -> Alphabet:
    return Alphabet("0123456789")


@pytest.fixture
def make_toolchain(tmp_path) -> Callable[..., LanguageConfig]:
    """Build a LanguageConfig around the fake compiler."""

    def factory(hang: Optional[str] = None) -> LanguageConfig:
        script = write_script(
            tmp_path / f"fake_cc_{hang or 'none'}.sh",
            FAKE_COMPILER.replace("{hang}", hang or ""),
        )
        return LanguageConfig(
            file_extension=".txt",
            compile_command=[str(script), "{source}", "{artifact}"],
            run_command=["{artifact}"],
        )

    return factory


@pytest.fixture
def make_pipeline(workspace, supervisor, make_toolchain):
    """Build (compiler, harness) for the fake toolchain."""

    def factory(hang: Optional[str] = None, timeout: float = 2.0, stop_on_first_mismatch: bool = False):
        compiler = Compiler(make_toolchain(hang), workspace, timeout=10.0)
        harness = TestHarness(
            supervisor,
            workspace,
            timeout=timeout,
            stop_on_first_mismatch=stop_on_first_mismatch,
        )
        return compiler, harness

    return factory
