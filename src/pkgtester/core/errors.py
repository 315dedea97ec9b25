"""Exceptions raised by the harness."""


class PkgTesterError(Exception):
    """Base class for harness errors."""


class ProcessLaunchError(PkgTesterError):
    """An executable could not be started."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not run {path}: {reason}")


class CommandFailedError(PkgTesterError, AssertionError):
    """A command that must succeed exited non-zero.

    Raised for steps where carrying on is meaningless (clean before
    configure, compiling Setup.hs, an unexpected unregister
    failure). It is an AssertionError so test runners report it as
    a test failure.
    """

    def __init__(self, command: str, exit_code: int, output: str):
        self.command = command
        self.exit_code = exit_code
        self.output = output
        super().__init__(f"Command {command} failed.\noutput: {output}")
