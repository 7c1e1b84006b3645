"""Upload error types and the retry decision."""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    TRANSIENT = "transient"        # request timed out
    SERVER_ERROR = "server_error"  # remote answered with 5xx
    CLIENT_ERROR = "client_error"  # remote answered with another non-2xx
    OTHER = "other"                # connect failures, malformed responses


class SubmitError(Exception):
    """A failed call to the remote ingestion service."""

    def __init__(self, kind: FailureKind, message: str = "", status_code: int | None = None) -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"SubmitError(kind={self.kind.value!r}, status_code={self.status_code!r})"


class StorageError(Exception):
    """The report store could not be read or updated."""


def classify_failure(error: BaseException) -> bool:
    """Return True if a failed submission should be retried later.

    Timeouts are retried because the device is most likely just offline for
    a while. HTTP 5xx answers are retried as a server-side transient
    condition. Everything else, refused connections included, is terminal.
    """
    if isinstance(error, SubmitError):
        if error.kind is FailureKind.TRANSIENT:
            return True
        if error.kind is FailureKind.SERVER_ERROR and error.status_code is not None:
            return 500 <= error.status_code <= 599
        return False

    return isinstance(error, TimeoutError)
