"""
Role policy: the pure decision functions over the permission table.

A RolePolicy is built once at process start from the static tables in
roles.py and handed to the guard through a FastAPI dependency. It is
immutable; nothing mutates the table at runtime.

Usage:
    policy = get_role_policy()
    policy.has_capability(Role.MODERATOR, "edit_products")       # True
    policy.can_access_owned(principal, {Role.ADMIN}, owner_id)    # owner-or-role
"""

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType

from storefront.auth.errors import Forbidden
from storefront.auth.principal import Principal
from storefront.auth.roles import (
    ROLE_CAPABILITY_GROUPS,
    ROLE_DESCRIPTIONS,
    ROLE_RANKS,
    WILDCARD,
    Role,
    parse_role,
)


@dataclass(frozen=True)
class RoleGrant:
    """Everything the policy knows about one role."""

    rank: int
    description: str
    capability_groups: Mapping[str, tuple[str, ...]]
    capabilities: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        flat = frozenset(cap for caps in self.capability_groups.values() for cap in caps)
        object.__setattr__(self, "capabilities", flat)
        object.__setattr__(self, "capability_groups", MappingProxyType(dict(self.capability_groups)))

    @property
    def is_wildcard(self) -> bool:
        return WILDCARD in self.capabilities


@dataclass(frozen=True)
class RolePolicy:
    """Read-only permission table plus the decisions made against it."""

    grants: Mapping[Role, RoleGrant]

    def __post_init__(self) -> None:
        missing = [role.value for role in Role if role not in self.grants]
        if missing:
            raise ValueError(f"RolePolicy is missing grants for roles: {missing}")
        object.__setattr__(self, "grants", MappingProxyType(dict(self.grants)))

    def rank(self, role: Role) -> int:
        return self.grants[role].rank

    def description(self, role: Role) -> str:
        return self.grants[role].description

    def capabilities(self, role: Role) -> frozenset[str]:
        return self.grants[role].capabilities

    def capability_groups(self, role: Role) -> Mapping[str, tuple[str, ...]]:
        return self.grants[role].capability_groups

    def roles_by_rank(self) -> list[Role]:
        """All roles, most privileged first."""
        return sorted(self.grants, key=self.rank)

    def has_capability(self, role: Role, capability: str) -> bool:
        """True if the role's set contains the capability or is the wildcard."""
        grant = self.grants[role]
        return grant.is_wildcard or capability in grant.capabilities

    def rank_at_least(self, role: Role, required_roles: Collection[Role]) -> bool:
        """
        Allow-list check: role is a member of required_roles.

        Not a numeric cutoff; role sets in this system are not always nested.
        """
        return role in required_roles

    def can_access_owned(
        self,
        principal: Principal,
        required_roles: Collection[Role],
        resource_owner_id: int | None,
    ) -> bool:
        """Owner-or-role: a listed role, or the principal owns the resource."""
        if self.rank_at_least(principal.role, required_roles):
            return True
        return resource_owner_id is not None and principal.id == resource_owner_id

    def check_role_change(
        self,
        requester: Principal,
        target_id: int,
        target_role: str,
        new_role: object,
    ) -> Role:
        """
        Validate a role change before any mutation and return the parsed role.

        Raises InvalidRole for unknown role strings, and Forbidden when another
        principal's admin account would be touched or someone else would be
        promoted to admin. Only self-directed changes may involve admin.
        """
        role = parse_role(new_role)
        if requester.id != target_id:
            if target_role == Role.ADMIN.value:
                raise Forbidden("Cannot change role of admin user")
            if role is Role.ADMIN:
                raise Forbidden("Only self-promotion to admin is allowed")
        return role

    def check_deactivation(
        self,
        requester: Principal,
        target_id: int,
        target_role: str,
    ) -> None:
        """Admin accounts can only be (de)activated by themselves."""
        if target_role == Role.ADMIN.value and requester.id != target_id:
            raise Forbidden("Cannot deactivate admin user")


def build_role_policy(
    capability_groups: Mapping[Role, Mapping[str, tuple[str, ...]]] = ROLE_CAPABILITY_GROUPS,
) -> RolePolicy:
    """Assemble a policy from the static tables (or an alternative capability table)."""
    return RolePolicy(
        grants={
            role: RoleGrant(
                rank=ROLE_RANKS[role],
                description=ROLE_DESCRIPTIONS[role],
                capability_groups=capability_groups.get(role, {}),
            )
            for role in Role
        }
    )


@lru_cache
def get_role_policy() -> RolePolicy:
    """Process-wide policy instance (safe to call from dependencies)."""
    return build_role_policy()
