"""Exceptions raised by SessionGuard."""


class SessionGuardError(Exception):
    """Base class for all SessionGuard errors."""


class IdentifierError(SessionGuardError):
    """The transport could not mint or bind a session identifier."""
