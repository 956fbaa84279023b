"""Exception taxonomy for the analyzer.

Every failure a user can trigger is raised as one of these and converted to
user-facing state by :class:`cv_match.session.controller.SessionController`.
"""

from __future__ import annotations


class CVMatchError(Exception):
    """Base class for all analyzer errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class ValidationFailure(CVMatchError):
    """CV or job description text is empty or whitespace-only."""


class AnalysisFailure(CVMatchError):
    """The model call failed or returned a payload that does not fit the schema."""


class AuthFailure(CVMatchError):
    """Login against an unknown email, or a signup with missing fields."""


class AccountExistsError(AuthFailure):
    """Signup attempted for an email that already has an account."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Account already exists: {email}")


class StorageCorruption(CVMatchError):
    """A persisted value is not valid JSON or does not match its model."""

    def __init__(self, key: str, cause: Exception | None = None):
        self.key = key
        super().__init__(f"Corrupt value stored under {key!r}", cause=cause)


class InvalidTransition(ValueError):
    """A view change that the session state machine does not allow."""
