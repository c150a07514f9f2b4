"""Exception types raised by stores, the settings registry, and collaborators."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for recoverable tracker errors."""


class FloorViolationError(TrackerError, ValueError):
    """Raised when a removal would leave a settings vocabulary empty."""

    def __init__(self, vocabulary: str, message: str | None = None) -> None:
        self.vocabulary = vocabulary
        super().__init__(message or f"At least one {vocabulary} is required.")


class StorageError(TrackerError):
    """Raised when the local persistence backend cannot read or write state."""


class TransportError(TrackerError):
    """Raised when the remote collaborator request fails.

    `status_code` is set for HTTP error responses and left as None for
    network-level failures. `retryable` hints whether repeating the call may
    succeed; the stores never retry on their own.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable
