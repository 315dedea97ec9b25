"""CLI command modules for pkgtester."""

from pkgtester.command.package import (
    BenchCommand,
    BuildCommand,
    ConfigureCommand,
    HaddockCommand,
    InstallCommand,
    RunTestsCommand,
)
from pkgtester.command.unregister import UnregisterCommand

__all__ = [
    "BenchCommand",
    "BuildCommand",
    "ConfigureCommand",
    "HaddockCommand",
    "InstallCommand",
    "RunTestsCommand",
    "UnregisterCommand",
]
