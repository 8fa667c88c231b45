"""Permission introspection for the signed-in user and the role table."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from storefront.auth.guard import AuthorizedContext, Guard
from storefront.auth.policy import RolePolicy, get_role_policy
from storefront.auth.roles import Role
from storefront.schemas.common import ApiResponse
from storefront.schemas.permissions import (
    CheckMultipleRequest,
    CheckMultipleResult,
    CheckSummary,
    MyPermissions,
    PermissionCheck,
    PermissionResult,
    RoleInfo,
    RolesOverview,
)

router = APIRouter()

# Introspection works before email verification.
signed_in = Guard(require_verified=False)
staff_only = Guard({Role.ADMIN, Role.MODERATOR}, require_verified=False)


@router.get("/check", response_model=ApiResponse[PermissionCheck])
def check_permission(
    ctx: Annotated[AuthorizedContext, Depends(signed_in)],
    policy: Annotated[RolePolicy, Depends(get_role_policy)],
    permission: Annotated[str, Query(min_length=1, max_length=64)],
) -> ApiResponse[PermissionCheck]:
    principal = ctx.principal
    allowed = policy.has_capability(principal.role, permission)
    verdict = "has" if allowed else "does not have"
    return ApiResponse(
        data=PermissionCheck(
            user_id=principal.id,
            username=principal.username,
            role=principal.role.value,
            permission=permission,
            allowed=allowed,
            message=f"User {verdict} permission: {permission}",
        )
    )


@router.post("/check-multiple", response_model=ApiResponse[CheckMultipleResult])
def check_multiple(
    body: CheckMultipleRequest,
    ctx: Annotated[AuthorizedContext, Depends(signed_in)],
    policy: Annotated[RolePolicy, Depends(get_role_policy)],
) -> ApiResponse[CheckMultipleResult]:
    role = ctx.principal.role
    results = [
        PermissionResult(permission=p, allowed=policy.has_capability(role, p))
        for p in body.permissions
    ]
    allowed_count = sum(1 for r in results if r.allowed)
    return ApiResponse(
        data=CheckMultipleResult(
            user_id=ctx.principal.id,
            role=role.value,
            permissions=results,
            summary=CheckSummary(
                total_checked=len(results),
                allowed_count=allowed_count,
                denied_count=len(results) - allowed_count,
                all_allowed=allowed_count == len(results),
                any_allowed=allowed_count > 0,
            ),
        )
    )


@router.get("/my-permissions", response_model=ApiResponse[MyPermissions])
def my_permissions(
    ctx: Annotated[AuthorizedContext, Depends(signed_in)],
    policy: Annotated[RolePolicy, Depends(get_role_policy)],
) -> ApiResponse[MyPermissions]:
    principal = ctx.principal
    role = principal.role
    return ApiResponse(
        data=MyPermissions(
            user_id=principal.id,
            username=principal.username,
            role=role.value,
            role_description=policy.description(role),
            permissions={k: list(v) for k, v in policy.capability_groups(role).items()},
            permissions_flat=sorted(policy.capabilities(role)),
            hierarchy_level=policy.rank(role),
        )
    )


@router.get("/roles", response_model=ApiResponse[RolesOverview])
def list_roles(
    _ctx: Annotated[AuthorizedContext, Depends(staff_only)],
    policy: Annotated[RolePolicy, Depends(get_role_policy)],
) -> ApiResponse[RolesOverview]:
    """Every role with its rank and capability set, most privileged first."""
    roles = policy.roles_by_rank()
    all_capabilities: set[str] = set()
    for role in roles:
        all_capabilities |= policy.capabilities(role)
    return ApiResponse(
        data=RolesOverview(
            roles=[
                RoleInfo(
                    id=role.value,
                    name=role.value.capitalize(),
                    description=policy.description(role),
                    hierarchy_level=policy.rank(role),
                    permissions_count=len(policy.capabilities(role)),
                )
                for role in roles
            ],
            permissions_by_role={role.value: sorted(policy.capabilities(role)) for role in roles},
            total_permissions=len(all_capabilities),
        )
    )
