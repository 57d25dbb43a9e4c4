"""Errors raised by the Terminology Store adapter."""

from __future__ import annotations


class TerminologyStoreError(RuntimeError):
    """Base class for failed Terminology Store interactions."""


class RemoteCallFailed(TerminologyStoreError):
    """Raised when the store answers a call with a non-success status."""

    def __init__(self, url: str, status: int, reason: str) -> None:
        super().__init__(
            f"Call to URL '{url}' wasn't successful. Status: {status} Message: {reason}"
        )
        self.url = url
        self.status = status
        self.reason = reason


class MissingJobHandle(TerminologyStoreError):
    """Raised when an accepted bulk submission carries no job location."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Bulk request to '{url}' was accepted without a job location")
        self.url = url


class BulkJobFailed(TerminologyStoreError):
    """Raised when a bulk job reaches the ``FAILED`` state."""

    def __init__(self, url: str, message: str | None) -> None:
        super().__init__(f"Bulk job {url} failed: {message or 'no message'}")
        self.url = url
        self.message = message


class JobTimeout(TerminologyStoreError):
    """Raised when a bulk job does not finish before the polling deadline."""

    def __init__(self, url: str, deadline: float) -> None:
        super().__init__(f"Bulk job {url} did not finish within {deadline:g} seconds")
        self.url = url
        self.deadline = deadline
