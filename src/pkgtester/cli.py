#!/usr/bin/env python3
"""pkgtester CLI - drive a package's Setup workflow from the shell."""

import sys

from pydantic import BaseModel, ValidationError
from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from pkgtester.command import (
    BenchCommand,
    BuildCommand,
    ConfigureCommand,
    HaddockCommand,
    InstallCommand,
    RunTestsCommand,
    UnregisterCommand,
)
from pkgtester.core.config import TesterSettings
from pkgtester.core.log import configure_logging, logger
from pkgtester.workflow.tester import PackageTester


class CliState(BaseModel):
    """Run Setup commands against a sample package and report the
    transcript.

    Harness settings come from, in priority order:
    1. pkgtester.yaml in the current directory
    2. .env file
    3. Environment variables (VERBOSE=0..3 or
       silent/normal/verbose/deafening, PKGTESTER_GHC_PATH=...,
       PKGTESTER_GHC_PKG_PATH=..., PKGTESTER_SETUP_PATH=...)
    """

    configure: CliSubCommand[ConfigureCommand]
    build: CliSubCommand[BuildCommand]
    haddock: CliSubCommand[HaddockCommand]
    install: CliSubCommand[InstallCommand]
    test: CliSubCommand[RunTestsCommand]
    bench: CliSubCommand[BenchCommand]
    unregister: CliSubCommand[UnregisterCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help if none."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        try:
            settings = TesterSettings()
        except ValidationError as e:
            sys.exit(f"pkgtester: invalid settings\n{e}")

        configure_logging(settings)
        with logger:
            exit_code = subcommand.run_workflow(PackageTester(settings))
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
