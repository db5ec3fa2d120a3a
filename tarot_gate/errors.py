"""Error taxonomy shared by the services and the HTTP layer."""


class TarotGateError(Exception):
    """Base class for tarot-gate errors."""

    status_code = 500


class ValidationError(TarotGateError):
    """Raised when input is missing or malformed."""

    status_code = 400


class AuthError(TarotGateError):
    """Raised on a wrong token or admin keyword."""

    status_code = 401


class ForbiddenError(AuthError):
    """Raised when an admin-only operation is attempted without an admin session."""

    status_code = 403


class DependencyError(TarotGateError):
    """Raised when the token store or the generative model fails."""

    status_code = 500


class NotConfiguredError(DependencyError):
    """Raised when a required credential is missing."""
