"""Tests for ProcessRunner and executable resolution."""

import sys
from pathlib import Path

import pytest
from conftest import posix_only, write_script

from pkgtester.core import runner as runner_module
from pkgtester.core.config import Verbosity
from pkgtester.core.errors import PkgTesterError, ProcessLaunchError
from pkgtester.core.runner import ProcessRunner, resolve_executable


def test_resolve_existing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "tool").write_text("")

    resolved = resolve_executable("tool")

    assert resolved == (tmp_path / "tool").resolve()
    assert resolved.is_absolute()


def test_resolve_appends_platform_suffix(tmp_path, monkeypatch):
    """With no file at the literal path, the suffixed one is used."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(runner_module, "EXE_EXTENSION", ".bin")
    (tmp_path / "tool.bin").write_text("")

    resolved = resolve_executable("tool")

    assert resolved.name == "tool.bin"
    assert resolved.is_absolute()
    assert resolved.exists()


def test_resolve_prefers_literal_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(runner_module, "EXE_EXTENSION", ".bin")
    (tmp_path / "tool").write_text("")
    (tmp_path / "tool.bin").write_text("")

    assert resolve_executable("tool").name == "tool"


def test_resolve_relative_path_in_subdirectory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "Setup").write_text("")

    assert resolve_executable(Path("pkg") / "Setup") == (
        tmp_path / "pkg" / "Setup"
    ).resolve()


def test_resolve_bare_name_falls_back_to_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        runner_module.shutil, "which", lambda name: "/usr/bin/" + name
    )

    assert resolve_executable("ghc-pkg", search_path=True) == Path(
        "/usr/bin/ghc-pkg"
    ).resolve()


def test_resolve_bare_name_stays_local_by_default(tmp_path, monkeypatch):
    """A missing shared driver must not pick up an unrelated one on PATH."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        runner_module.shutil, "which", lambda name: "/usr/bin/" + name
    )

    assert resolve_executable("Setup") == (
        tmp_path / f"Setup{runner_module.EXE_EXTENSION}"
    ).resolve()


@posix_only
def test_captures_exit_code_and_output(tmp_path):
    script = write_script(tmp_path / "hello", "#!/bin/sh\necho hello\nexit 4\n")

    step = ProcessRunner().run(script, [])

    assert step.exit_code == 4
    assert step.output == "hello\n"
    assert step.success is False


@posix_only
def test_merges_stderr_in_order(tmp_path):
    """stdout and stderr share one pipe, so write order is kept."""
    script = write_script(
        tmp_path / "mixed",
        "#!/bin/sh\necho one\necho two >&2\necho three\necho four >&2\n",
    )

    step = ProcessRunner().run(script, [])

    assert step.output == "one\ntwo\nthree\nfour\n"


@posix_only
def test_preserves_carriage_returns(tmp_path):
    script = write_script(
        tmp_path / "crlf", "#!/bin/sh\nprintf 'a\\r\\nb\\rc'\n"
    )

    step = ProcessRunner().run(script, [])

    assert step.output == "a\r\nb\rc"


@posix_only
def test_large_output_is_complete(tmp_path):
    script = write_script(
        tmp_path / "many",
        "#!/bin/sh\ni=0\nwhile [ $i -lt 5000 ]; do echo \"line $i\"; "
        "i=$((i+1)); done\n",
    )

    step = ProcessRunner().run(script, [])

    lines = step.output.splitlines()
    assert len(lines) == 5000
    assert lines[0] == "line 0"
    assert lines[-1] == "line 4999"


@posix_only
def test_runs_in_working_directory(tmp_path, monkeypatch):
    """A relative executable still runs after cwd changes."""
    monkeypatch.chdir(tmp_path)
    write_script(tmp_path / "where", "#!/bin/sh\npwd\n")
    (tmp_path / "pkg").mkdir()

    step = ProcessRunner().run("where", [], cwd="pkg")

    assert Path(step.output.strip()).resolve() == (tmp_path / "pkg").resolve()


@posix_only
def test_command_description(tmp_path):
    script = write_script(tmp_path / "args", "#!/bin/sh\necho \"$@\"\n")
    resolved = script.resolve()

    with_cwd = ProcessRunner().run(script, ["build", "-v"], cwd=tmp_path)
    without_cwd = ProcessRunner().run(script, ["x"])

    assert with_cwd.command == f'"{resolved} build -v" in {tmp_path}'
    assert with_cwd.output == "build -v\n"
    assert without_cwd.command == f'"{resolved} x" in '


@posix_only
def test_verbose_logging_does_not_change_output(tmp_path):
    script = write_script(tmp_path / "noisy", "#!/bin/sh\necho out\necho err >&2\n")

    quiet = ProcessRunner(Verbosity.SILENT).run(script, ["a"])
    loud = ProcessRunner(Verbosity.DEAFENING).run(script, ["a"])

    assert quiet == loud


@posix_only
def test_utf8_output(tmp_path):
    script = write_script(tmp_path / "utf8", "#!/bin/sh\nprintf 'caf\\303\\251\\n'\n")

    assert ProcessRunner().run(script, []).output == "café\n"


def test_missing_executable(tmp_path):
    missing = tmp_path / "does-not-exist"

    with pytest.raises(ProcessLaunchError) as excinfo:
        ProcessRunner().run(missing, [])

    assert isinstance(excinfo.value, PkgTesterError)
    assert "does-not-exist" in str(excinfo.value)


@pytest.mark.skipif(sys.platform != "win32", reason="Windows only")
def test_windows_suffix():
    assert runner_module.EXE_EXTENSION == ".exe"
