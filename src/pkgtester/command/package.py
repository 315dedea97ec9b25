"""Subcommands that run a workflow against one package directory."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from pkgtester.core.errors import PkgTesterError
from pkgtester.core.log import logger
from pkgtester.core.result import PackageSpec, Result
from pkgtester.workflow.tester import PackageTester


class PackageCommand(BaseModel):
    """Base for subcommands that take a package directory."""

    model_config = ConfigDict(populate_by_name=True)

    directory: Path = Field(
        default=Path("."),
        description="Package directory containing the .cabal file",
    )
    config_opts: list[str] = Field(
        default_factory=list,
        alias="config-opts",
        description=(
            "Extra options for 'setup configure' "
            "(e.g. --config-opts='[\"--enable-tests\"]')"
        ),
    )

    def spec(self) -> PackageSpec:
        return PackageSpec(directory=self.directory, config_opts=self.config_opts)

    def execute(self, tester: PackageTester, spec: PackageSpec) -> Result:
        raise NotImplementedError

    def run_workflow(self, tester: PackageTester) -> int:
        """Run the workflow and print its transcript.

        A step that must succeed (clean, compiling Setup.hs, launching
        the driver) aborts the workflow; its error is printed instead
        of a transcript.

        Returns:
            Exit code (0=success)
        """
        try:
            result = self.execute(tester, self.spec())
        except PkgTesterError as e:
            print(e)
            logger.error(
                "Workflow aborted", directory=str(self.directory)
            )
            return 1
        print(result.output_text)
        if not result.successful:
            logger.error(
                "Workflow failed", directory=str(self.directory)
            )
            return 1
        return 0


class ExtraArgsCommand(PackageCommand):
    """Base for subcommands that forward extra arguments to setup."""

    extra_args: list[str] = Field(
        default_factory=list,
        alias="extra-args",
        description="Arguments appended to the setup command",
    )


class ConfigureCommand(PackageCommand):
    """Clean and configure the package."""

    def execute(self, tester: PackageTester, spec: PackageSpec) -> Result:
        return tester.configure(spec)


class BuildCommand(PackageCommand):
    """Clean, configure and build the package."""

    def execute(self, tester: PackageTester, spec: PackageSpec) -> Result:
        return tester.build(spec)


class InstallCommand(PackageCommand):
    """Build the package and install it in the user package db."""

    def execute(self, tester: PackageTester, spec: PackageSpec) -> Result:
        return tester.install(spec)


class HaddockCommand(ExtraArgsCommand):
    """Configure the package and generate its documentation."""

    def execute(self, tester: PackageTester, spec: PackageSpec) -> Result:
        return tester.haddock(spec, self.extra_args)


class RunTestsCommand(ExtraArgsCommand):
    """Run the package's test suites."""

    def execute(self, tester: PackageTester, spec: PackageSpec) -> Result:
        return tester.test(spec, self.extra_args)


class BenchCommand(ExtraArgsCommand):
    """Run the package's benchmarks."""

    def execute(self, tester: PackageTester, spec: PackageSpec) -> Result:
        return tester.bench(spec, self.extra_args)
