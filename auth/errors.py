"""
auth/errors.py -- Error taxonomy for provisioning, login and request gating.

Every AuthError carries the HTTP status, a stable machine-readable code and a
client-safe message. The API layer renders them with one exception handler;
nothing internal (SQL, stack traces, hash material) is ever put in `message`.

TokenError and its subclasses describe *why* a token failed verification.
They are logged by the request gate and then collapsed into Unauthorized --
clients never learn which check failed.
"""

from __future__ import annotations


class AuthError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    status_code = 400
    code = "validation_error"
    default_message = "Request validation failed."


class Conflict(AuthError):
    status_code = 409
    code = "conflict"
    default_message = "Resource already exists."


class InvalidCredentials(AuthError):
    """Login failure. Same message for unknown email and wrong password."""

    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid credentials."


class Unauthorized(AuthError):
    status_code = 401
    code = "unauthorized"
    default_message = "Not authorized, token failed or expired."


class Forbidden(AuthError):
    status_code = 403
    code = "forbidden"
    default_message = "Forbidden, insufficient role permissions."


class InternalError(AuthError):
    pass


# ---------------------------------------------------------------------------
# Token verification failures (never rendered to clients)
# ---------------------------------------------------------------------------


class TokenError(Exception):
    reason = "invalid"


class InvalidSignature(TokenError):
    reason = "invalid_signature"


class Expired(TokenError):
    reason = "expired"


class Malformed(TokenError):
    reason = "malformed"
