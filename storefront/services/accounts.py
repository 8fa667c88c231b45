"""Login and user-administration flows built on the credential store and role policy."""

import logging

from storefront.auth.credentials import CredentialStore
from storefront.auth.errors import (
    AccountInactive,
    EmailUnverified,
    InvalidCredentials,
    NotFound,
)
from storefront.auth.policy import RolePolicy
from storefront.auth.principal import Principal
from storefront.auth.roles import Role
from storefront.core.security import verify_password
from storefront.models import User

logger = logging.getLogger(__name__)


def authenticate(
    store: CredentialStore,
    password: str,
    email: str | None = None,
    username: str | None = None,
) -> User:
    """
    Check credentials for login and return the user.

    An email is only matched against emails and a username only against
    usernames; email wins when both are given.

    Order: credentials, then active flag, then email verification (admins
    are exempt). Account state is only revealed to callers who know the
    password.
    """
    if email:
        user = store.find_by_email(email)
    elif username:
        user = store.find_by_username(username)
    else:
        user = None
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Login failed: invalid credentials", extra={"auth_outcome": "invalid_credentials"})
        raise InvalidCredentials()
    if not user.is_active:
        raise AccountInactive()
    if user.role != Role.ADMIN.value and not user.is_verified:
        raise EmailUnverified()
    return user


def change_user_role(
    store: CredentialStore,
    policy: RolePolicy,
    requester: Principal,
    target_id: int,
    new_role: str,
) -> User:
    """Apply a role change after the policy accepts it. Raises NotFound, InvalidRole or Forbidden."""
    target = store.find_by_id(target_id)
    if target is None:
        raise NotFound("User not found")
    role = policy.check_role_change(requester, target.id, target.role, new_role)
    store.set_role(target, role)
    logger.info(
        "Role changed",
        extra={"requester_id": requester.id, "target_id": target.id, "new_role": role.value},
    )
    return target


def toggle_user_active(
    store: CredentialStore,
    policy: RolePolicy,
    requester: Principal,
    target_id: int,
) -> User:
    """Flip a user's active flag. Admin accounts can only toggle themselves."""
    target = store.find_by_id(target_id)
    if target is None:
        raise NotFound("User not found")
    policy.check_deactivation(requester, target.id, target.role)
    is_active = store.toggle_active(target)
    logger.info(
        "User %s", "activated" if is_active else "deactivated",
        extra={"requester_id": requester.id, "target_id": target.id},
    )
    return target
