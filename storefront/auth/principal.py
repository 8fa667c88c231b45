"""The authenticated identity attached to an authorized request."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from storefront.auth.roles import Role, parse_role

if TYPE_CHECKING:
    from storefront.models import User


@dataclass(frozen=True)
class Principal:
    """Snapshot of the live user row taken for one authorization decision."""

    id: int
    role: Role
    is_active: bool
    is_verified: bool
    username: str = ""
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @classmethod
    def from_user(cls, user: "User") -> "Principal":
        """Build from an ORM row. Raises InvalidRole if the stored role is unknown."""
        return cls(
            id=user.id,
            role=parse_role(user.role),
            is_active=bool(user.is_active),
            is_verified=bool(user.is_verified),
            username=user.username or "",
            email=user.email or "",
        )
