"""Pytest configuration and fixtures for pkgtester tests."""

import stat
import sys
from pathlib import Path

import pytest

from pkgtester.core.config import TesterSettings, Verbosity
from pkgtester.core.log import ConsoleSink, setup_logger
from pkgtester.core.result import StepOutcome

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="fake drivers are POSIX shell scripts"
)

# Shared Setup driver. Echoes its arguments, then behaves according
# to marker files in the package directory.
FAKE_SETUP = """#!/bin/sh
echo "setup $*"
case "$1" in
  clean)
    if [ -f fail-clean ]; then echo "clean exploded" >&2; exit 3; fi
    ;;
  configure)
    for arg in "$@"; do
      case "$arg" in
        --bogus*) echo "setup: Unrecognised flags: $arg" >&2; exit 1 ;;
      esac
    done
    echo "Configuring samplePkg-0.1..."
    ;;
  build)
    if [ -f fail-build ]; then echo "Main.hs:3:1: error" >&2; exit 1; fi
    printf 'Building samplePkg-0.1...\\r\\nLinking dist/build/sample\\n'
    ;;
  haddock)
    echo "Documentation created: dist/doc/html/samplePkg/index.html"
    ;;
  install)
    echo "Installing library in /home/user/.cabal/lib"
    ;;
  test)
    if [ "$2" = "--fail" ]; then echo "0 of 1 test suites passed."; exit 1; fi
    echo "1 of 1 test suites (1 of 1 test cases) passed."
    ;;
  bench)
    echo "Benchmark bench-sample: FINISH"
    ;;
esac
exit 0
"""

# Compiler stand-in: "compiles" Setup.hs by writing a Setup script.
FAKE_GHC = """#!/bin/sh
echo "[1 of 1] Compiling Main ( Setup.hs, Setup.o )"
echo "ghc $*"
if [ -f compile-error ]; then echo "Setup.hs:1:1: parse error" >&2; exit 1; fi
cat > Setup <<'SCRIPT'
#!/bin/sh
echo "custom setup $*"
SCRIPT
chmod +x Setup
"""

# Registry tool stand-in: only "registered" knows about anything.
FAKE_GHC_PKG = """#!/bin/sh
if [ "$3" = "registered" ]; then
  echo "Unregistering registered-0.1..."
  exit 0
fi
if [ "$3" = "locked" ]; then
  echo "ghc-pkg: permission denied" >&2
  exit 2
fi
echo "ghc-pkg: cannot find package $3" >&2
exit 1
"""


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only debug logging for the whole test session."""
    setup_logger(run_name="pkgtester-tests", console=ConsoleSink(level="debug"))


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the developer's environment out of settings."""
    monkeypatch.delenv("VERBOSE", raising=False)
    monkeypatch.delenv("VERBOSITY", raising=False)
    for name in [
        "GHC_PATH", "GHC_PKG_PATH", "SETUP_PATH",
        "PACKAGE_DB", "LOG_NAME", "LOG_FILE",
    ]:
        monkeypatch.delenv(f"PKGTESTER_{name}", raising=False)


def write_script(path: Path, body: str) -> Path:
    """Write an executable shell script."""
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Directory holding the shared Setup driver and fake tools.

    The current directory is switched to it, since the shared driver
    is resolved relative to the current directory.
    """
    write_script(tmp_path / "Setup", FAKE_SETUP)
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    write_script(bin_dir / "ghc", FAKE_GHC)
    write_script(bin_dir / "ghc-pkg", FAKE_GHC_PKG)
    (tmp_path / "samplePkg").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(workspace):
    """Settings pointing at the fake tools in the workspace."""
    return TesterSettings(
        verbosity=Verbosity.NORMAL,
        ghc_path=str(workspace / "bin" / "ghc"),
        ghc_pkg_path=str(workspace / "bin" / "ghc-pkg"),
    )


class FakeDispatcher:
    """Dispatcher that records calls instead of running processes.

    Args:
        exit_codes: Exit code per verb (first argument); default 0
    """

    def __init__(self, exit_codes: dict[str, int] | None = None):
        self.exit_codes = exit_codes or {}
        self.calls: list[list[str]] = []
        self.compiled: list[Path] = []

    def setup(self, spec, args):
        args = list(args)
        self.calls.append(args)
        verb = args[0]
        return StepOutcome(
            command=f'"Setup {" ".join(args)}" in {spec.directory}',
            exit_code=self.exit_codes.get(verb, 0),
            output=f"{verb} output\n",
        )

    def compile_setup(self, package_dir):
        self.compiled.append(package_dir)

    @property
    def verbs(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeRunner:
    """ProcessRunner stand-in returning canned outcomes."""

    def __init__(self, *outcomes: StepOutcome):
        self.outcomes = list(outcomes)
        self.calls: list[tuple] = []
        self.searched: list[bool] = []

    def run(self, path, args, cwd=None, search_path=False):
        self.calls.append((str(path), list(args), cwd))
        self.searched.append(search_path)
        return self.outcomes.pop(0)
