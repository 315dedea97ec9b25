"""Choose and run the Setup driver for a package."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from pkgtester.core.config import TesterSettings
from pkgtester.core.errors import CommandFailedError
from pkgtester.core.log import logger
from pkgtester.core.result import PackageSpec, StepOutcome
from pkgtester.core.runner import ProcessRunner

SETUP_SOURCE = "Setup.hs"
SETUP_EXECUTABLE = "Setup"


def require_success(step: StepOutcome) -> None:
    """Raise CommandFailedError unless step exited zero."""
    if not step.success:
        raise CommandFailedError(step.command, step.exit_code, step.output)


class CommandDispatcher:
    """Runs build-tool commands for a package.

    A package with its own Setup.hs gets that script compiled and
    used as the driver; every other package uses the shared
    pre-built driver from settings.setup_path.
    """

    def __init__(self, settings: TesterSettings, runner: ProcessRunner):
        self.settings = settings
        self.runner = runner

    def setup(self, spec: PackageSpec, args: Sequence[str]) -> StepOutcome:
        """Run one build-tool command in the package directory.

        Raises:
            CommandFailedError: If compiling a custom Setup.hs fails
        """
        package_dir = spec.directory
        if (package_dir / SETUP_SOURCE).is_file():
            self.compile_setup(package_dir)
            driver = package_dir / SETUP_EXECUTABLE
        else:
            driver = Path(self.settings.setup_path)
        return self.runner.run(driver, args, cwd=package_dir)

    def compile_setup(self, package_dir: Path) -> None:
        """Compile package_dir/Setup.hs against the in-place package db.

        Raises:
            CommandFailedError: If the compiler exits non-zero
        """
        package_db = Path.cwd() / self.settings.package_db
        logger.debug(
            "Compiling {source} in {package_dir}",
            source=SETUP_SOURCE,
            package_dir=str(package_dir),
        )
        step = self.runner.run(
            self.settings.ghc_path,
            ["--make", "-package-conf", str(package_db), SETUP_SOURCE],
            cwd=package_dir,
            search_path=True,
        )
        require_success(step)
