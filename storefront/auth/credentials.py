"""
Credential store: user identity, password hash, role and account flags.

Thin single-row reads and updates over a SQLAlchemy session. Storage errors
propagate to the caller; nothing here makes policy decisions.
"""

from datetime import UTC, datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.auth.roles import DEFAULT_ROLE, Role
from storefront.core.security import generate_one_time_token, hash_password
from storefront.models import User


class CredentialStore:
    """Read/update access to the users table for one request's session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # Lookups

    def find_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def find_by_email(self, email: str) -> User | None:
        return (
            self.session.query(User)
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )

    def find_by_username(self, username: str) -> User | None:
        return self.session.query(User).filter(User.username == username.strip()).first()

    def find_by_verification_token(self, token: str) -> User | None:
        return (
            self.session.query(User)
            .filter(User.email_verification_token == token)
            .first()
        )

    def find_by_reset_token(self, token: str) -> User | None:
        """Only returns the user while the reset token is unexpired."""
        return (
            self.session.query(User)
            .filter(
                User.password_reset_token == token,
                User.password_reset_expires > datetime.now(UTC),
            )
            .first()
        )

    def list_all(self) -> list[User]:
        return self.session.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    # Mutations (each commits one row)

    def create(
        self,
        username: str,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
        role: Role = DEFAULT_ROLE,
        is_verified: bool = False,
    ) -> User:
        """Insert a user; unverified accounts get a fresh verification token."""
        user = User(
            username=username.strip(),
            email=email.strip().lower(),
            password_hash=hash_password(password),
            first_name=first_name or "",
            last_name=last_name or "",
            role=role.value,
            is_active=True,
            is_verified=is_verified,
            email_verification_token=None if is_verified else generate_one_time_token(),
            token_version=0,
        )
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def mark_verified(self, user: User) -> None:
        user.is_verified = True
        user.email_verification_token = None
        self.session.commit()

    def refresh_verification_token(self, user: User) -> str:
        token = generate_one_time_token()
        user.email_verification_token = token
        self.session.commit()
        return token

    def set_reset_token(self, user: User, expire_minutes: int) -> str:
        token = generate_one_time_token()
        user.password_reset_token = token
        user.password_reset_expires = datetime.now(UTC) + timedelta(minutes=expire_minutes)
        self.session.commit()
        return token

    def reset_password(self, user: User, new_password: str) -> None:
        """Set a new password, clear the reset token and revoke outstanding sessions."""
        user.password_hash = hash_password(new_password)
        user.password_reset_token = None
        user.password_reset_expires = None
        user.token_version = (user.token_version or 0) + 1
        self.session.commit()

    def change_password(self, user: User, new_password: str) -> None:
        user.password_hash = hash_password(new_password)
        user.token_version = (user.token_version or 0) + 1
        self.session.commit()

    def revoke_sessions(self, user: User) -> None:
        """Invalidate every token issued so far for this user."""
        user.token_version = (user.token_version or 0) + 1
        self.session.commit()

    def set_role(self, user: User, role: Role) -> None:
        user.role = role.value
        self.session.commit()

    def toggle_active(self, user: User) -> bool:
        """Flip is_active and return the new value."""
        user.is_active = not bool(user.is_active)
        self.session.commit()
        return user.is_active

    def update_profile(
        self,
        user: User,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        self.session.commit()
        self.session.refresh(user)
        return user
