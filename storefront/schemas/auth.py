"""Request/response schemas for auth and account endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from storefront.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
# Usernames may not contain "@" or whitespace.
USERNAME_PATTERN = r"^[^@\s]+$"


class RegisterRequest(BaseModel):
    """Self-registration. Role is never accepted here; new accounts are customers."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, pattern=USERNAME_PATTERN
    )
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)


class LoginRequest(BaseModel):
    """Credentials for login: email or username plus password."""

    email: str | None = Field(default=None, max_length=255, description="Email address")
    username: str | None = Field(default=None, max_length=USERNAME_MAX_LEN, description="Username")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")

    @model_validator(mode="after")
    def require_identifier(self) -> "LoginRequest":
        if not (self.email or self.username):
            raise ValueError("email or username is required")
        return self


class UserOut(BaseModel):
    """Public view of a user (never includes hashes or one-time tokens)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str
    is_active: bool
    is_verified: bool
    created_at: datetime | None = None


class LoginData(BaseModel):
    """Payload of a successful login."""

    user: UserOut
    token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Fresh token returned after a password change."""

    token: str
    token_type: str = "bearer"


class EmailRequest(BaseModel):
    """Body for resend-verification and forgot-password."""

    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class ProfileUpdateRequest(BaseModel):
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
