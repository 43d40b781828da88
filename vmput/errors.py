"""Project-specific exception types."""

from __future__ import annotations


class VMPutError(RuntimeError):
    """Base error for failures that abort a vmput run."""


class UsageError(VMPutError):
    """Raised for missing, empty, or conflicting command line arguments."""


class VMStateError(VMPutError):
    """Raised when the target VM is not confirmed shut off."""


class StagingError(VMPutError):
    """Raised when the temporary staging file cannot be created or filled."""


class ExternalToolError(VMPutError):
    """Raised when the offline copy utility fails or cannot be executed."""

    def __init__(self, message: str, output: str = ''):
        self.output = output
        super().__init__(message)
