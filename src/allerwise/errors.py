"""Errors raised by services with messages safe to show to users."""


class AllerwiseError(Exception):
    """Base error carrying a user-facing message."""


class NotFoundError(AllerwiseError):
    """Requested user, log or session does not exist."""


class InvalidInputError(AllerwiseError):
    """Request data was rejected before reaching any backend."""
