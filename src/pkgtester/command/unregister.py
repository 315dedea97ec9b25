"""Unregister command - removes a library from the user package db."""

from pydantic import BaseModel, Field

from pkgtester.core.errors import CommandFailedError
from pkgtester.core.log import logger
from pkgtester.workflow.tester import PackageTester


class UnregisterCommand(BaseModel):
    """Unregister a library from the user package database.

    A library that is not registered is not an error.
    """

    library: str = Field(description="Name of the library to unregister")

    def run_workflow(self, tester: PackageTester) -> int:
        try:
            tester.unregister(self.library)
        except CommandFailedError as e:
            print(e.output)
            logger.error("Unregister failed", command=e.command)
            return 1
        logger.info("Unregistered {library}", library=self.library)
        return 0
