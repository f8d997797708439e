"""Exception types raised by the scoring engine."""


class OcheError(Exception):
    """Base class for all scoring engine errors."""


class ValidationError(OcheError, ValueError):
    """Malformed input, detected before anything is written."""


class NotFoundError(OcheError, LookupError):
    """A referenced game, entry, league, or team does not exist."""


class AuthorizationError(OcheError, PermissionError):
    """Caller lacks the role or membership an operation requires."""
