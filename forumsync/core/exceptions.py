"""
Forum client exceptions.

- ForumClientError: base for everything the transport raises
- ForumUnavailableError: remote service unreachable or timed out
- ForumRequestError: remote service answered with a non-2xx status
"""

from typing import Any


class ForumClientError(Exception):
    """
    Base exception for forum transport errors.

    Attributes:
        message: Human-readable error description
        details: Extra context (status, endpoint, ...)
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ForumUnavailableError(ForumClientError):
    """Host unreachable, connection reset or request timed out."""


class ForumRequestError(ForumClientError):
    """
    Remote service rejected the request.

    The message is the body's ``error`` field when present,
    otherwise the operation's default message.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
