"""Status persistence failures shared by every status store implementation."""

from __future__ import annotations


class StatusPersistenceError(RuntimeError):
    """Base exception for failed status record writes.

    Attributes:
        retryable: Whether re-reading the record and re-running the decision may succeed.
    """

    retryable: bool = False

    def __init__(self, message: str, application_name: str | None = None, namespace: str | None = None):
        super().__init__(message)
        self.application_name = application_name
        self.namespace = namespace


class StatusUpdateConflictError(StatusPersistenceError):
    """The record changed since it was read; the conditional update was rejected."""

    retryable = True


class StatusRecordNotFoundError(StatusPersistenceError, LookupError):
    """The application whose status should be written does not exist."""
