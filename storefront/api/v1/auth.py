"""Registration, login, email verification, password recovery and the current user's account."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from storefront.auth.credentials import CredentialStore
from storefront.auth.guard import AuthorizedContext, Guard
from storefront.auth.tokens import TokenService, get_token_service
from storefront.core.config import get_settings
from storefront.core.database import get_db
from storefront.core.security import verify_password
from storefront.models import User
from storefront.schemas.auth import (
    ChangePasswordRequest,
    EmailRequest,
    LoginData,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenData,
    UserOut,
)
from storefront.schemas.common import ApiResponse
from storefront.services.accounts import authenticate
from storefront.services.email import EmailService, get_email_service

logger = logging.getLogger(__name__)
router = APIRouter()

# Any role. /me and /logout stay reachable while unverified.
signed_in = Guard(require_verified=False)
verified = Guard()

RESEND_MESSAGE = "If the account exists and is not verified, a new verification email has been sent"
FORGOT_MESSAGE = "If the email exists, password reset instructions have been sent"


def _current_user(ctx: AuthorizedContext, db: Session) -> User:
    user = CredentialStore(db).find_by_id(ctx.principal.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.post("/register", response_model=ApiResponse[UserOut], status_code=201)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> ApiResponse[UserOut]:
    """
    Create a customer account and send the verification email.
    The account cannot use protected routes until the email is verified.
    """
    store = CredentialStore(db)
    if store.find_by_email(body.email) is not None:
        raise HTTPException(status_code=400, detail="User with this email already exists")
    if store.find_by_username(body.username) is not None:
        raise HTTPException(status_code=400, detail="User with this username already exists")

    user = store.create(
        username=body.username,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    email_service.send_verification_email(user.email, user.email_verification_token, user.username)
    logger.info("User registered", extra={"user_id": user.id})
    return ApiResponse(
        message="User registered successfully. Please check your email for verification.",
        data=UserOut.model_validate(user),
    )


@router.post("/login", response_model=ApiResponse[LoginData])
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> ApiResponse[LoginData]:
    """
    Authenticate with email (or username) and password; returns a session token.
    Include the token in the Authorization header as: Bearer <token>
    """
    user = authenticate(
        CredentialStore(db), body.password, email=body.email, username=body.username
    )
    token = tokens.issue(user.id, version=user.token_version or 0)
    return ApiResponse(
        message="Login successful",
        data=LoginData(user=UserOut.model_validate(user), token=token),
    )


@router.get("/verify-email", response_model=ApiResponse[None])
def verify_email(
    db: Annotated[Session, Depends(get_db)],
    token: Annotated[str | None, Query(max_length=128)] = None,
) -> ApiResponse[None]:
    """Confirm an email address from the link sent at registration."""
    if not token:
        raise HTTPException(status_code=400, detail="Verification token is required")
    store = CredentialStore(db)
    user = store.find_by_verification_token(token)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")
    store.mark_verified(user)
    return ApiResponse(message="Email verified successfully. You can now login.")


@router.post("/resend-verification", response_model=ApiResponse[None])
def resend_verification(
    body: EmailRequest,
    db: Annotated[Session, Depends(get_db)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> ApiResponse[None]:
    """Issue a new verification link. The answer never reveals whether the account exists."""
    store = CredentialStore(db)
    user = store.find_by_email(body.email)
    if user is not None and not user.is_verified:
        token = store.refresh_verification_token(user)
        email_service.send_verification_email(user.email, token, user.username)
    return ApiResponse(message=RESEND_MESSAGE)


@router.post("/forgot-password", response_model=ApiResponse[None])
def forgot_password(
    body: EmailRequest,
    db: Annotated[Session, Depends(get_db)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> ApiResponse[None]:
    """Send a time-limited reset link. The answer never reveals whether the account exists."""
    store = CredentialStore(db)
    user = store.find_by_email(body.email)
    if user is not None:
        token = store.set_reset_token(user, get_settings().PASSWORD_RESET_EXPIRE_MINUTES)
        email_service.send_password_reset_email(user.email, token, user.username)
    return ApiResponse(message=FORGOT_MESSAGE)


@router.post("/reset-password", response_model=ApiResponse[None])
def reset_password(
    body: ResetPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[None]:
    """Set a new password from a reset link. Outstanding sessions are revoked."""
    store = CredentialStore(db)
    user = store.find_by_reset_token(body.token)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")
    store.reset_password(user, body.new_password)
    return ApiResponse(message="Password reset successfully")


@router.get("/me", response_model=ApiResponse[UserOut])
def get_me(
    ctx: Annotated[AuthorizedContext, Depends(signed_in)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[UserOut]:
    """Return the authenticated user's account."""
    return ApiResponse(data=UserOut.model_validate(_current_user(ctx, db)))


@router.put("/profile", response_model=ApiResponse[UserOut])
def update_profile(
    body: ProfileUpdateRequest,
    ctx: Annotated[AuthorizedContext, Depends(verified)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[UserOut]:
    store = CredentialStore(db)
    user = store.update_profile(
        _current_user(ctx, db),
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return ApiResponse(message="Profile updated successfully", data=UserOut.model_validate(user))


@router.put("/change-password", response_model=ApiResponse[TokenData])
def change_password(
    body: ChangePasswordRequest,
    ctx: Annotated[AuthorizedContext, Depends(verified)],
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> ApiResponse[TokenData]:
    """
    Change the password. Every existing token (including the one used for this
    request) is revoked; the response carries a fresh one.
    """
    user = _current_user(ctx, db)
    if not verify_password(body.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    CredentialStore(db).change_password(user, body.new_password)
    token = tokens.issue(user.id, version=user.token_version)
    return ApiResponse(message="Password changed successfully", data=TokenData(token=token))


@router.post("/logout", response_model=ApiResponse[None])
def logout(
    ctx: Annotated[AuthorizedContext, Depends(signed_in)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[None]:
    """Revoke all of the user's session tokens."""
    CredentialStore(db).revoke_sessions(_current_user(ctx, db))
    return ApiResponse(message="Logged out successfully")
