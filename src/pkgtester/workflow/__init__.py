"""Workflow chains for the Setup verbs."""

from pkgtester.workflow.tester import PackageTester

__all__ = ["PackageTester"]
