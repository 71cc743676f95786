"""Error taxonomy shared by the service layer and the polling client."""

from __future__ import annotations


class BoardwatchError(RuntimeError):
    """Base exception for all Boardwatch failures."""


class InvalidInputError(BoardwatchError, ValueError):
    """Malformed coordinates or missing required fields; never partially applied."""


class NotFoundError(BoardwatchError):
    """The requested row does not exist."""


class NoActiveRequestError(NotFoundError):
    """A confirmation was attempted without any boarding request on record."""


class ConflictError(BoardwatchError):
    """A concurrent write could not be serialized, or a unique key is taken."""


class UnauthenticatedError(BoardwatchError):
    """Missing, invalid or expired bearer credential."""

    def __init__(self, message: str = "Not authenticated", status_code: int = 401) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientError(BoardwatchError):
    """Network failure, timeout or server-side 5xx; safe to retry."""


class SessionInvalidError(UnauthenticatedError):
    """The polling session was terminated because its credential was rejected."""


class RequestPendingError(BoardwatchError):
    """A new boarding request was attempted while another is still pending."""
