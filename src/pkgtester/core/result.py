"""Package, step and result models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class PackageSpec(BaseModel):
    """A sample package under test."""

    model_config = ConfigDict(frozen=True)

    directory: Path
    config_opts: tuple[str, ...] = ()


class OutcomeKind(str, Enum):
    """The last step of a chain that completed successfully.

    FAILURE doubles as the initial value, so only
    Result.successful says whether a chain succeeded.
    """

    FAILURE = "failure"
    CONFIGURE_SUCCESS = "configure"
    BUILD_SUCCESS = "build"
    HADDOCK_SUCCESS = "haddock"
    INSTALL_SUCCESS = "install"
    TEST_SUCCESS = "test"
    BENCH_SUCCESS = "bench"


class StepOutcome(BaseModel):
    """What one external process invocation produced."""

    model_config = ConfigDict(frozen=True)

    command: str
    exit_code: int
    output: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def block(self) -> str:
        """Transcript block: the command line, then its output."""
        return f"{self.command}\n{self.output}"


class Result(BaseModel):
    """Accumulated outcome of a chain of steps.

    Result() is the starting point of every chain.
    """

    model_config = ConfigDict(frozen=True)

    successful: bool = True
    kind: OutcomeKind = OutcomeKind.FAILURE
    output_text: str = ""

    def append_text(self, text: str) -> "Result":
        """Return a copy with text appended as a new transcript block."""
        if self.output_text:
            text = f"{self.output_text}\n{text}"
        return self.model_copy(update={"output_text": text})


def record_run(
    step: StepOutcome, kind: OutcomeKind, result: Result
) -> Result:
    """Fold one step into a result.

    The step's block is appended to the transcript. The result stays
    successful only if the step exited zero, and kind moves to the
    given tag only on success.
    """
    folded = result.append_text(step.block())
    return folded.model_copy(update={
        "successful": result.successful and step.success,
        "kind": kind if step.success else result.kind,
    })
