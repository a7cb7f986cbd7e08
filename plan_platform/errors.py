"""
Exception hierarchy for the makeaplan system.
"""


class MakeAPlanError(Exception):
    """Base class for all errors the CLI reports as a one-line failure."""


class StorageError(MakeAPlanError):
    """Raised when a session record cannot be written to disk."""


class GenerationError(MakeAPlanError):
    """Raised when a provider call fails or returns content that cannot be used."""

    def __init__(self, message: str, raw_output: str = ""):
        super().__init__(message)
        self.raw_output = raw_output


class ValidationError(MakeAPlanError):
    """Raised for malformed user or command-line input."""


class NotFoundError(MakeAPlanError):
    """Raised when a referenced session id has no stored record."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class WorkflowError(MakeAPlanError):
    """Raised when the workflow engine meets a broken session invariant."""


class ExportError(MakeAPlanError):
    """Raised when a partial export is requested for an artifact that does not exist."""
