"""Error taxonomy for pinnote.

Services raise these; the application maps each class to an HTTP status
and a ``{"success": false, "message": ...}`` body in one place.
"""

from __future__ import annotations


class PinnoteError(Exception):
    """Base class. ``message`` is safe to show to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PinnoteError):
    """Missing or malformed input."""


class ConflictError(PinnoteError):
    """A unique value (the username) is already taken."""


class AuthError(PinnoteError):
    """Bad credentials, bad token, bad PIN, or a failed ownership/state filter.

    Messages are uniform across sub-causes so callers cannot tell an
    unknown user from a wrong password, or someone else's post from a
    missing one.
    """


class NotFoundError(PinnoteError):
    """Record absent."""


class InternalError(PinnoteError):
    """A store, hash or token subsystem failed. Details stay in the logs."""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
