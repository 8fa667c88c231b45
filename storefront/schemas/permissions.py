"""Response schemas for permission introspection."""

from pydantic import BaseModel, Field


class PermissionCheck(BaseModel):
    user_id: int
    username: str
    role: str
    permission: str
    allowed: bool
    message: str


class CheckMultipleRequest(BaseModel):
    permissions: list[str] = Field(..., min_length=1, max_length=100)


class PermissionResult(BaseModel):
    permission: str
    allowed: bool


class CheckSummary(BaseModel):
    total_checked: int
    allowed_count: int
    denied_count: int
    all_allowed: bool
    any_allowed: bool


class CheckMultipleResult(BaseModel):
    user_id: int
    role: str
    permissions: list[PermissionResult]
    summary: CheckSummary


class MyPermissions(BaseModel):
    user_id: int
    username: str
    role: str
    role_description: str
    permissions: dict[str, list[str]]
    permissions_flat: list[str]
    hierarchy_level: int


class RoleInfo(BaseModel):
    id: str
    name: str
    description: str
    hierarchy_level: int
    permissions_count: int


class RolesOverview(BaseModel):
    roles: list[RoleInfo]
    permissions_by_role: dict[str, list[str]]
    total_permissions: int
