"""
Authorization guard - the per-request access pipeline.

Every protected route declares one Guard:

    can_edit_product = Guard(
        {Role.ADMIN, Role.MODERATOR},
        ownership=owner_of(Product, "Product"),
    )

    @router.put("/{id}")
    def update(ctx: Annotated[AuthorizedContext, Depends(can_edit_product)]): ...

Gates run in a fixed order and each one short-circuits:
token present -> token valid -> user exists -> session not revoked ->
account active -> role known -> email verified -> role/capability/ownership.
A caller that fails an early gate learns nothing about the later ones.
"""

import logging
from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import Annotated, Union

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.auth.credentials import CredentialStore
from storefront.auth.errors import (
    AccountInactive,
    AuthError,
    EmailUnverified,
    Forbidden,
    InvalidRole,
    NotFound,
    PrincipalNotFound,
    TokenInvalid,
    TokenMissing,
)
from storefront.auth.policy import RolePolicy, get_role_policy
from storefront.auth.principal import Principal
from storefront.auth.roles import Role
from storefront.auth.tokens import TokenService, get_token_service
from storefront.core.database import get_db

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)

# (request, session) -> id of the user owning the addressed resource.
# Raises NotFound when the resource does not exist.
OwnershipExtractor = Callable[[Request, Session], Union[int, None]]


@dataclass(frozen=True)
class AccessRule:
    """
    Declarative access requirement for one route.

    required_roles=None admits every role. capability, when set, must also be
    held. ownership turns a failed role/capability check into an
    owner-or-role check.
    """

    required_roles: frozenset[Role] | None = None
    require_verified: bool = True
    capability: str | None = None
    ownership: OwnershipExtractor | None = None

    def describe_roles(self, policy: RolePolicy) -> str:
        if self.required_roles is not None:
            roles = [r for r in policy.roles_by_rank() if r in self.required_roles]
        elif self.capability is not None:
            roles = [r for r in policy.roles_by_rank() if policy.has_capability(r, self.capability)]
        else:
            roles = policy.roles_by_rank()
        return ", ".join(r.value for r in roles)


@dataclass(frozen=True)
class AuthorizedContext:
    """Successful outcome: who is acting, and the resource owner if it was resolved."""

    principal: Principal
    owner_id: int | None = None

    @property
    def is_owner(self) -> bool:
        return self.owner_id is not None and self.owner_id == self.principal.id


@dataclass(frozen=True)
class Denied:
    """Failed outcome: the error to render. No resource data is attached."""

    error: AuthError


AuthResult = Union[AuthorizedContext, Denied]


def _deny(error: AuthError, **extra: object) -> Denied:
    log_extra: dict[str, object] = {"auth_outcome": error.code}
    log_extra.update(extra)
    logger.info("Request denied: %s", error.code, extra=log_extra)
    return Denied(error)


def authorize(
    token: str | None,
    store: CredentialStore,
    tokens: TokenService,
    policy: RolePolicy,
    rule: AccessRule,
    resolve_owner: Callable[[], int | None] | None = None,
) -> AuthResult:
    """
    Run the gate sequence for one request and return a tagged result.

    Only AuthError outcomes are captured; storage errors propagate so the
    outermost handler can turn them into a generic 500.
    """
    if not token:
        return _deny(TokenMissing())

    try:
        claims = tokens.decode(token)
    except TokenInvalid as e:
        return _deny(e, reason=e.reason)

    user = store.find_by_id(claims.user_id)
    if user is None:
        return _deny(PrincipalNotFound(), user_id=claims.user_id)

    if claims.version != (user.token_version or 0):
        return _deny(TokenInvalid("revoked"), reason="revoked", user_id=user.id)

    if not user.is_active:
        return _deny(AccountInactive(), user_id=user.id)

    try:
        principal = Principal.from_user(user)
    except InvalidRole:
        logger.warning("User %s has unrecognized role %r", user.id, user.role)
        return _deny(Forbidden("Account role is not recognized"), user_id=user.id)

    if rule.require_verified and not principal.is_verified and not principal.is_admin:
        return _deny(EmailUnverified(), user_id=principal.id)

    allowed = True
    if rule.required_roles is not None:
        allowed = policy.rank_at_least(principal.role, rule.required_roles)
    if allowed and rule.capability is not None:
        allowed = policy.has_capability(principal.role, rule.capability)
    if allowed:
        return AuthorizedContext(principal=principal)

    if resolve_owner is not None:
        try:
            owner_id = resolve_owner()
        except NotFound as e:
            return _deny(e, user_id=principal.id)
        if policy.can_access_owned(principal, rule.required_roles or frozenset(), owner_id):
            return AuthorizedContext(principal=principal, owner_id=owner_id)
        message = (
            f"Access denied. Required roles: {rule.describe_roles(policy)} "
            f"(or resource owner). Your role: {principal.role.value}"
        )
    else:
        message = (
            f"Access denied. Required roles: {rule.describe_roles(policy)}. "
            f"Your role: {principal.role.value}"
        )
    return _deny(Forbidden(message), user_id=principal.id, role=principal.role.value)


class Guard:
    """
    FastAPI dependency wrapping authorize() for one declared AccessRule.

    Resolves to AuthorizedContext; on denial raises the AuthError, which the
    app-level handler renders, so the route body never runs.
    """

    def __init__(
        self,
        required_roles: Collection[Role] | None = None,
        *,
        require_verified: bool = True,
        capability: str | None = None,
        ownership: OwnershipExtractor | None = None,
    ) -> None:
        roles = frozenset(required_roles) if required_roles is not None else None
        if ownership is not None and roles is None and capability is None:
            raise ValueError("An ownership rule needs required_roles or a capability")
        self.rule = AccessRule(
            required_roles=roles,
            require_verified=require_verified,
            capability=capability,
            ownership=ownership,
        )

    def __call__(
        self,
        request: Request,
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)],
        db: Annotated[Session, Depends(get_db)],
        tokens: Annotated[TokenService, Depends(get_token_service)],
        policy: Annotated[RolePolicy, Depends(get_role_policy)],
    ) -> AuthorizedContext:
        ownership = self.rule.ownership
        resolve_owner = (lambda: ownership(request, db)) if ownership is not None else None
        result = authorize(
            credentials.credentials if credentials is not None else None,
            CredentialStore(db),
            tokens,
            policy,
            self.rule,
            resolve_owner,
        )
        if isinstance(result, Denied):
            raise result.error
        return result


def owner_of(
    model: type,
    label: str,
    owner_attr: str = "created_by",
    id_param: str = "id",
) -> OwnershipExtractor:
    """Ownership extractor reading the `{id}` path parameter and the row's owner column."""

    def extract(request: Request, db: Session) -> int | None:
        raw_id = request.path_params.get(id_param)
        try:
            resource_id = int(raw_id)
        except (TypeError, ValueError):
            raise NotFound(f"{label} not found") from None
        row = db.get(model, resource_id)
        if row is None:
            raise NotFound(f"{label} not found")
        return getattr(row, owner_attr)

    return extract
