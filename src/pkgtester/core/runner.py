"""Run one external command and capture its combined output."""

from __future__ import annotations

import codecs
import shutil
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO

from pkgtester.core.config import Verbosity
from pkgtester.core.errors import ProcessLaunchError
from pkgtester.core.log import logger
from pkgtester.core.result import StepOutcome

EXE_EXTENSION = ".exe" if sys.platform == "win32" else ""

CHUNK_SIZE = 4096


def resolve_executable(path: str | Path, search_path: bool = False) -> Path:
    """Turn a possibly relative, suffix-less path into an absolute one.

    The literal path is used when a file exists there; otherwise the
    platform executable suffix is appended. The result is absolute,
    so changing the working directory of the child cannot break the
    lookup.

    Args:
        path: Executable path, relative to the current directory
        search_path: Look a bare command name up on PATH when it exists
            in neither form

    Returns:
        Absolute path to the executable (which may not exist)
    """
    candidate = Path(path)
    if candidate.is_file():
        return candidate.resolve()
    suffixed = Path(f"{candidate}{EXE_EXTENSION}")
    if search_path and not suffixed.is_file() and candidate.name == str(path):
        found = shutil.which(str(path))
        if found:
            return Path(found).resolve()
    return suffixed.resolve()


class ProcessRunner:
    """Runs executables synchronously, one at a time.

    stdout and stderr share a single pipe so the captured text keeps
    the order in which the child wrote it. There is no timeout: a
    child that never exits blocks the caller.
    """

    def __init__(self, verbosity: Verbosity = Verbosity.NORMAL):
        self.verbosity = verbosity

    def run(
        self,
        path: str | Path,
        args: Sequence[str],
        cwd: str | Path | None = None,
        search_path: bool = False,
    ) -> StepOutcome:
        """Run path with args in cwd and wait for it to finish.

        Args:
            path: Executable to run (see resolve_executable)
            args: Arguments passed to the executable
            cwd: Working directory, or None for the current one
            search_path: Allow a PATH lookup for a bare command name

        Returns:
            StepOutcome with the command description, exit code and
            the combined stdout/stderr text

        Raises:
            ProcessLaunchError: If the executable can't be started
        """
        resolved = resolve_executable(path, search_path=search_path)
        args = [str(arg) for arg in args]

        if self.verbosity >= Verbosity.VERBOSE:
            logger.info(
                "Running {executable} {arguments}",
                executable=str(resolved),
                arguments=args,
                cwd=str(cwd) if cwd is not None else "",
            )

        try:
            process = subprocess.Popen(
                [str(resolved), *args],
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            raise ProcessLaunchError(str(resolved), e.strerror or str(e)) from e

        with process:
            output = self._drain(process.stdout)
            process.stdout.close()
            exit_code = process.wait()

        if self.verbosity >= Verbosity.DEAFENING:
            logger.trace(
                "{executable} exited with {exit_code}",
                executable=resolved.name,
                exit_code=exit_code,
                output_chars=len(output),
            )

        full_command = " ".join([str(resolved), *args])
        where = "" if cwd is None else str(cwd)
        return StepOutcome(
            command=f'"{full_command}" in {where}',
            exit_code=exit_code,
            output=output,
        )

    @staticmethod
    def _drain(stream: BinaryIO) -> str:
        """Read stream to end-of-file, decoding UTF-8 incrementally.

        Decoding is done without newline translation, so carriage
        returns survive.
        """
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        chunks = []
        while chunk := stream.read1(CHUNK_SIZE):
            chunks.append(decoder.decode(chunk))
        chunks.append(decoder.decode(b"", final=True))
        return "".join(chunks)
