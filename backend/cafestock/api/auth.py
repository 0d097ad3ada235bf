"""Authentication endpoints: login, profile, logout, role bootstrap."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.app_context import AppContextRegistry
from cafestock.core.deps import get_current_user, get_registry, require_permission
from cafestock.core.security import create_access_token, verify_password
from cafestock.db.base import get_db
from cafestock.db.seed_rbac import permissions_for
from cafestock.models.role import PermissionAction, RoleType, UserRole
from cafestock.models.user import User
from cafestock.schemas.auth import CurrentUser, LoginRequest, RoleAssignment, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


def _role_of(user: User) -> RoleType:
    # Users without a user_roles row are plain customers
    return user.role.role if user.role else RoleType.CUSTOMER


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate via email + password, return JWT."""
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    role = _role_of(user)
    token = create_access_token(
        user_id=user.id,
        role=role,
    )
    return TokenResponse(access_token=token, user_id=user.id, role=role)


@router.get("/me", response_model=CurrentUser)
async def get_me(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Return full profile of the current authenticated user."""
    user = await db.get(User, current_user.id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    role = _role_of(user)
    return CurrentUser(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=role,
        permissions=permissions_for(role),
        is_active=user.is_active,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    current_user: CurrentUser = Depends(get_current_user),
    registry: AppContextRegistry = Depends(get_registry),
):
    """Tear down the caller's context. The JWT itself stays valid until it expires."""
    registry.close(current_user.id)


@router.post("/roles", response_model=RoleAssignment)
async def assign_role(
    body: RoleAssignment,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.ROLE_MANAGE.value)),
    db: AsyncSession = Depends(get_db),
):
    """Create or replace a user's role (admin only)."""
    user = await db.get(User, body.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    result = await db.execute(select(UserRole).where(UserRole.user_id == body.user_id))
    user_role = result.scalar_one_or_none()
    if user_role:
        user_role.role = body.role
    else:
        db.add(UserRole(user_id=body.user_id, role=body.role))
    await db.commit()
    return body
