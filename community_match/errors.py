"""Exception hierarchy for the matching engine."""

from __future__ import annotations


class MatchingError(Exception):
    """Base class for errors raised by community-match."""


class MatchNotFoundError(MatchingError):
    """The requested member has no profile, or it is not open to matching."""

    def __init__(self, message: str, user_id: str | None = None):
        super().__init__(message)
        self.user_id = user_id


class InvalidFilterError(MatchingError):
    """Caller-supplied filter or paging values are out of domain."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class StoreUnavailableError(MatchingError):
    """A persistence or identity collaborator could not be reached."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error
