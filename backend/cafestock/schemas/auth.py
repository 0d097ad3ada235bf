"""Auth request/response schemas."""

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from cafestock.models.role import RoleType


# ── Login ──────────────────────────────────────────
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: UUID
    role: RoleType


# ── Role bootstrap ─────────────────────────────────
class RoleAssignment(BaseModel):
    user_id: UUID
    role: RoleType


# ── Current User ───────────────────────────────────
class CurrentUser(BaseModel):
    id: UUID
    email: str
    full_name: str
    role: RoleType
    permissions: list[str]
    is_active: bool
