from __future__ import annotations

from typing import Any


class JoblyError(Exception):
    """Base exception for jobly errors."""


class BadRequestError(JoblyError):
    """The caller supplied a malformed request; not retryable."""


class NoFieldsToUpdate(BadRequestError):
    """A partial update was requested with an empty payload."""

    def __init__(self, message: str = "No data to update") -> None:
        super().__init__(message)


class InvalidFilterField(BadRequestError):
    """A filter key is not recognized for the entity being searched."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Invalid filter field: {field!r}")


class InvalidRange(BadRequestError):
    """A declared lower bound exceeds its upper bound."""

    def __init__(self, lower_field: str, upper_field: str, lower: Any, upper: Any) -> None:
        self.lower_field = lower_field
        self.upper_field = upper_field
        self.lower = lower
        self.upper = upper
        super().__init__(
            f"{lower_field} ({lower!r}) must be less than or equal to "
            f"{upper_field} ({upper!r})"
        )


class NotFoundError(JoblyError):
    """No row matched the requested key."""


class DbQueryError(JoblyError):
    """Any failure while executing a statement."""


class UnauthorizedError(JoblyError):
    """Credentials did not match a known user."""
