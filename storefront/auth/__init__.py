"""
Authentication and role-based authorization.

- roles.py: the enumerated role set and static permission table
- policy.py: RolePolicy decisions (capabilities, owner-or-role, admin protection)
- tokens.py: signed session tokens
- credentials.py: user-row reads/updates
- guard.py: the per-request pipeline and the Guard dependency
"""

from storefront.auth.errors import (
    AccountInactive,
    AuthError,
    EmailUnverified,
    Forbidden,
    InvalidCredentials,
    InvalidRole,
    NotFound,
    PrincipalNotFound,
    TokenInvalid,
    TokenMissing,
)
from storefront.auth.guard import AccessRule, AuthorizedContext, Denied, Guard, authorize, owner_of
from storefront.auth.policy import RolePolicy, build_role_policy, get_role_policy
from storefront.auth.principal import Principal
from storefront.auth.roles import DEFAULT_ROLE, Role, parse_role
from storefront.auth.tokens import TokenClaims, TokenService, get_token_service

__all__ = [
    "AccessRule",
    "AccountInactive",
    "AuthError",
    "AuthorizedContext",
    "DEFAULT_ROLE",
    "Denied",
    "EmailUnverified",
    "Forbidden",
    "Guard",
    "InvalidCredentials",
    "InvalidRole",
    "NotFound",
    "Principal",
    "PrincipalNotFound",
    "Role",
    "RolePolicy",
    "TokenClaims",
    "TokenInvalid",
    "TokenMissing",
    "TokenService",
    "authorize",
    "build_role_policy",
    "get_role_policy",
    "get_token_service",
    "owner_of",
    "parse_role",
]
