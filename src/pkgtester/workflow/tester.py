"""Build-tool workflows run against sample packages."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from pkgtester.core.config import TesterSettings
from pkgtester.core.dispatcher import CommandDispatcher, require_success
from pkgtester.core.log import configure_logging, is_configured, logger
from pkgtester.core.result import (
    OutcomeKind,
    PackageSpec,
    Result,
    StepOutcome,
    record_run,
)
from pkgtester.core.runner import ProcessRunner

NOT_REGISTERED = "cannot find package"


class PackageTester:
    """Runs configure/build/haddock/install/test/bench chains.

    Each chain stops at the first failing step and returns the
    Result accumulated so far. Every method that returns a Result
    also writes its transcript to settings.log_name inside the
    package directory.
    """

    def __init__(
        self,
        settings: TesterSettings | None = None,
        runner: ProcessRunner | None = None,
        dispatcher: CommandDispatcher | None = None,
    ):
        """Initialize the tester.

        Args:
            settings: Harness settings; loaded from the environment
                when None
            runner: Process runner; built from settings.verbosity
                when None
            dispatcher: Setup driver dispatcher; built from settings
                and runner when None

        Logging is set up from settings unless a logger is already
        configured.
        """
        self.settings = settings or TesterSettings()
        if not is_configured():
            configure_logging(self.settings)
        self.runner = runner or ProcessRunner(self.settings.verbosity)
        self.dispatcher = dispatcher or CommandDispatcher(
            self.settings, self.runner
        )

    def configure(self, spec: PackageSpec) -> Result:
        return self._recorded(spec, self._configure(spec))

    def build(self, spec: PackageSpec) -> Result:
        return self._recorded(spec, self._build(spec))

    def haddock(
        self, spec: PackageSpec, extra_args: Sequence[str] = ()
    ) -> Result:
        result = self._configure(spec)
        if result.successful:
            step = self.dispatcher.setup(spec, ["haddock", *extra_args])
            result = record_run(step, OutcomeKind.HADDOCK_SUCCESS, result)
        return self._recorded(spec, result)

    def install(self, spec: PackageSpec) -> Result:
        """Build the package, then install it in the user package db."""
        result = self._build(spec)
        if result.successful:
            step = self.dispatcher.setup(spec, ["install"])
            result = record_run(step, OutcomeKind.INSTALL_SUCCESS, result)
        return self._recorded(spec, result)

    def test(self, spec: PackageSpec, extra_args: Sequence[str] = ()) -> Result:
        """Run the package's test suites without configuring first."""
        step = self.dispatcher.setup(spec, ["test", *extra_args])
        return self._recorded(
            spec, record_run(step, OutcomeKind.TEST_SUCCESS, Result())
        )

    def bench(self, spec: PackageSpec, extra_args: Sequence[str] = ()) -> Result:
        """Run the package's benchmarks without configuring first."""
        step = self.dispatcher.setup(spec, ["bench", *extra_args])
        return self._recorded(
            spec, record_run(step, OutcomeKind.BENCH_SUCCESS, Result())
        )

    def unregister(self, library_name: str) -> None:
        """Remove library_name from the user package db.

        A library that isn't registered counts as success, so this
        can be called repeatedly.

        Raises:
            CommandFailedError: If the registry tool fails for any
                other reason
        """
        step = self.runner.run(
            self.settings.ghc_pkg_path,
            ["unregister", "--user", library_name],
            search_path=True,
        )
        if NOT_REGISTERED in step.output:
            logger.debug(
                "{library} was not registered", library=library_name
            )
            return
        require_success(step)

    def compile_setup(self, package_dir: Path) -> None:
        self.dispatcher.compile_setup(Path(package_dir))

    def run(
        self,
        path: str | Path,
        args: Sequence[str],
        cwd: str | Path | None = None,
    ) -> StepOutcome:
        return self.runner.run(path, args, cwd=cwd)

    def _configure(self, spec: PackageSpec) -> Result:
        """Clean, then configure.

        A failing clean raises; its output otherwise opens the
        transcript without affecting success or kind.
        """
        clean = self.dispatcher.setup(spec, ["clean"])
        require_success(clean)
        step = self.dispatcher.setup(
            spec,
            ["configure", "--user", "-w", self.settings.ghc_path,
             *spec.config_opts],
        )
        result = Result().append_text(clean.block())
        return record_run(step, OutcomeKind.CONFIGURE_SUCCESS, result)

    def _build(self, spec: PackageSpec) -> Result:
        result = self._configure(spec)
        if not result.successful:
            return result
        step = self.dispatcher.setup(spec, ["build", "-v"])
        return record_run(step, OutcomeKind.BUILD_SUCCESS, result)

    def _recorded(self, spec: PackageSpec, result: Result) -> Result:
        log_path = spec.directory / self.settings.log_name
        log_path.write_text(result.output_text, encoding="utf-8", newline="")
        logger.info(
            "{package}: {outcome}",
            package=str(spec.directory),
            outcome="ok" if result.successful else "failed",
            kind=result.kind.value,
            log_file=str(log_path),
        )
        return result
