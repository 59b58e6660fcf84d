"""Exception types shared across the refactorer package."""

from __future__ import annotations


class InstructionError(Exception):
    """The instruction could not be resolved.  Fatal at startup."""


class CompletionError(Exception):
    """A completion request for one file failed.

    Recoverable at the batch level: the file is reported as failed and the
    batch moves on.  `cause` is a short label used in the final summary.
    """

    cause = "completion error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.cause}: {self.message}"


class AuthenticationFailedError(CompletionError):
    cause = "authentication failure"


class RateLimitedError(CompletionError):
    cause = "rate limited"


class NetworkError(CompletionError):
    cause = "network failure"


class MalformedResponseError(CompletionError):
    cause = "malformed response"
