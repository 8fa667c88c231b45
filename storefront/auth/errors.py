"""
Authorization error taxonomy.

Every error maps to one HTTP status and renders to the standard response
envelope via to_payload(). Raised by the token service, the role policy and
the guard; rendered by the app-level handler in storefront.main.
"""

from typing import Any


class AuthError(Exception):
    """Base class for authentication and authorization failures."""

    status_code: int = 403
    code: str = "forbidden"
    default_message: str = "Access denied"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        """Response body for this error; never includes resource data."""
        return {"success": False, "message": self.message, "error": self.code}


class TokenMissing(AuthError):
    status_code = 401
    code = "token_missing"
    default_message = "Access token required"


class TokenInvalid(AuthError):
    """
    Signature, expiry, malformed payload or revoked session.

    reason is for logs only; clients always get the same message.
    """

    status_code = 401
    code = "token_invalid"
    default_message = "Invalid or expired token"

    def __init__(self, reason: str = "malformed") -> None:
        self.reason = reason
        super().__init__()


class PrincipalNotFound(AuthError):
    status_code = 401
    code = "user_not_found"
    default_message = "User not found"


class AccountInactive(AuthError):
    status_code = 401
    code = "account_inactive"
    default_message = "Account is deactivated"


class InvalidCredentials(AuthError):
    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class EmailUnverified(AuthError):
    """Carries needsVerification so clients can route to resend-verification."""

    status_code = 403
    code = "email_unverified"
    default_message = "Email not verified. Please check your email."

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["needsVerification"] = True
        return payload


class Forbidden(AuthError):
    status_code = 403
    code = "forbidden"
    default_message = "Access denied"


class InvalidRole(AuthError):
    status_code = 400
    code = "invalid_role"

    def __init__(self, role: object, valid_roles: list[str]) -> None:
        self.role = role
        self.valid_roles = valid_roles
        super().__init__(f"Invalid role. Valid roles: {', '.join(valid_roles)}")

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["valid_roles"] = self.valid_roles
        return payload


class NotFound(AuthError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"
