"""Test harness for driving a package build tool's Setup workflow."""

from pkgtester.assertions import (
    assert_bench_succeeded,
    assert_build_failed,
    assert_build_succeeded,
    assert_configure_succeeded,
    assert_haddock_succeeded,
    assert_install_succeeded,
    assert_output_contains,
    assert_output_does_not_contain,
    assert_test_succeeded,
)
from pkgtester.core.config import TesterSettings, Verbosity
from pkgtester.core.errors import (
    CommandFailedError,
    PkgTesterError,
    ProcessLaunchError,
)
from pkgtester.core.result import OutcomeKind, PackageSpec, Result, StepOutcome
from pkgtester.workflow.tester import PackageTester

__all__ = [
    "CommandFailedError",
    "OutcomeKind",
    "PackageSpec",
    "PackageTester",
    "PkgTesterError",
    "ProcessLaunchError",
    "Result",
    "StepOutcome",
    "TesterSettings",
    "Verbosity",
    "assert_bench_succeeded",
    "assert_build_failed",
    "assert_build_succeeded",
    "assert_configure_succeeded",
    "assert_haddock_succeeded",
    "assert_install_succeeded",
    "assert_output_contains",
    "assert_output_does_not_contain",
    "assert_test_succeeded",
]
