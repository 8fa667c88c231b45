"""Request/response schemas for user administration."""

from pydantic import BaseModel, Field


class RoleChangeRequest(BaseModel):
    """New role as a plain string; validated by the role policy, not here."""

    role: str = Field(..., min_length=1, max_length=32)


class ActiveStatus(BaseModel):
    id: int
    is_active: bool
