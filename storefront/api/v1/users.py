"""User administration: listing, activation and role changes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.auth.credentials import CredentialStore
from storefront.auth.errors import NotFound
from storefront.auth.guard import AuthorizedContext, Guard
from storefront.auth.policy import RolePolicy, get_role_policy
from storefront.core.database import get_db
from storefront.schemas.auth import UserOut
from storefront.schemas.common import ApiResponse
from storefront.schemas.users import ActiveStatus, RoleChangeRequest
from storefront.services.accounts import change_user_role, toggle_user_active

router = APIRouter()

can_view_users = Guard(capability="view_users")
can_edit_users = Guard(capability="edit_users")
can_change_roles = Guard(capability="change_user_roles")


@router.get("", response_model=ApiResponse[list[UserOut]])
def list_users(
    _ctx: Annotated[AuthorizedContext, Depends(can_view_users)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[list[UserOut]]:
    users = [UserOut.model_validate(u) for u in CredentialStore(db).list_all()]
    return ApiResponse(data=users, count=len(users))


@router.get("/{user_id}", response_model=ApiResponse[UserOut])
def get_user(
    user_id: int,
    _ctx: Annotated[AuthorizedContext, Depends(can_view_users)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[UserOut]:
    user = CredentialStore(db).find_by_id(user_id)
    if user is None:
        raise NotFound("User not found")
    return ApiResponse(data=UserOut.model_validate(user))


@router.patch("/{user_id}/toggle-active", response_model=ApiResponse[ActiveStatus])
def toggle_active(
    user_id: int,
    ctx: Annotated[AuthorizedContext, Depends(can_edit_users)],
    db: Annotated[Session, Depends(get_db)],
    policy: Annotated[RolePolicy, Depends(get_role_policy)],
) -> ApiResponse[ActiveStatus]:
    """Flip the account's active flag. Another principal's admin account is refused."""
    user = toggle_user_active(CredentialStore(db), policy, ctx.principal, user_id)
    state = "activated" if user.is_active else "deactivated"
    return ApiResponse(
        message=f"User {state} successfully",
        data=ActiveStatus(id=user.id, is_active=user.is_active),
    )


@router.put("/{user_id}/role", response_model=ApiResponse[UserOut])
def change_role(
    user_id: int,
    body: RoleChangeRequest,
    ctx: Annotated[AuthorizedContext, Depends(can_change_roles)],
    db: Annotated[Session, Depends(get_db)],
    policy: Annotated[RolePolicy, Depends(get_role_policy)],
) -> ApiResponse[UserOut]:
    """
    Assign a new role. Unknown roles are rejected with the list of valid ones;
    promotion to admin is only allowed for oneself.
    """
    user = change_user_role(CredentialStore(db), policy, ctx.principal, user_id, body.role)
    return ApiResponse(message="User role updated successfully", data=UserOut.model_validate(user))
