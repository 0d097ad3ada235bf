"""Unit tests for auth: security utils, dependency logic, login endpoint."""

import uuid
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from jose import JWTError, jwt

from cafestock.core.config import settings
from cafestock.core.security import (
    TOKEN_ISSUER,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from cafestock.models.role import PermissionAction, RoleType

from conftest import scalar_result


# ── Password hashing ──────────────────────────────

def test_hash_and_verify():
    plain = "SecurePass123!"
    hashed = hash_password(plain)
    assert hashed != plain
    assert verify_password(plain, hashed)
    assert not verify_password("wrong", hashed)


# ── JWT ────────────────────────────────────────────

def test_token_carries_role_permissions():
    uid = uuid.uuid4()
    token = create_access_token(user_id=uid, role=RoleType.STAFF)

    payload = decode_access_token(token)

    assert payload["sub"] == str(uid)
    assert payload["iss"] == TOKEN_ISSUER
    assert payload["role"] == "staff"
    assert "request:create" in payload["permissions"]
    assert "request:approve" not in payload["permissions"]


def test_token_from_another_issuer_rejected():
    token = jwt.encode(
        {"iss": "pos", "sub": str(uuid.uuid4()), "role": "admin"},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(JWTError):
        decode_access_token(token)


def test_expired_token():
    token = create_access_token(
        user_id=uuid.uuid4(),
        role=RoleType.STAFF,
        expires_delta=timedelta(seconds=-1),
    )
    with pytest.raises(Exception):
        decode_access_token(token)


# ── Permission matrix sanity ──────────────────────

def test_rbac_matrix():
    from cafestock.db.seed_rbac import ROLE_PERMISSIONS

    # Admin has ALL permissions
    assert set(ROLE_PERMISSIONS[RoleType.ADMIN]) == set(PermissionAction)

    customer = set(ROLE_PERMISSIONS[RoleType.CUSTOMER])
    staff = set(ROLE_PERMISSIONS[RoleType.STAFF])
    admin = set(ROLE_PERMISSIONS[RoleType.ADMIN])
    assert customer < staff < admin

    # Staff raise requests but cannot approve them
    assert PermissionAction.REQUEST_CREATE in staff
    assert PermissionAction.REQUEST_APPROVE not in staff


# ── Dependencies ──────────────────────────────────

@pytest.mark.asyncio
async def test_get_current_user_from_token():
    from cafestock.core.deps import get_current_user

    uid = uuid.uuid4()
    token = create_access_token(user_id=uid, role=RoleType.ADMIN)

    user = await get_current_user(token)

    assert user.id == uid
    assert user.role == RoleType.ADMIN
    assert "role:manage" in user.permissions


@pytest.mark.asyncio
async def test_get_current_user_rejects_unknown_role():
    from cafestock.core.deps import get_current_user

    token = jwt.encode(
        {"iss": TOKEN_ISSUER, "sub": str(uuid.uuid4()), "role": "owner"},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )

    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(token)
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_require_permission_denies_missing(customer_user):
    from cafestock.core.deps import require_permission

    checker = require_permission("inventory:read")
    with pytest.raises(HTTPException) as exc_info:
        await checker(customer_user)
    assert exc_info.value.status_code == 403
    assert "inventory:read" in exc_info.value.detail


@pytest.mark.asyncio
async def test_require_role_allows_listed(staff_user):
    from cafestock.core.deps import require_role

    checker = require_role(RoleType.STAFF, RoleType.ADMIN)
    assert await checker(staff_user) is staff_user


# ── Endpoints ─────────────────────────────────────

def _db_user(role: RoleType | None, password: str = "SecurePass123!"):
    user = MagicMock()
    user.id = uuid.uuid4()
    user.email = "barista@example.com"
    user.full_name = "Barista"
    user.hashed_password = hash_password(password)
    user.is_active = True
    user.role = MagicMock(role=role) if role else None
    return user


@pytest.mark.asyncio
async def test_login_returns_token_with_role_permissions(mock_db):
    from cafestock.api.auth import login
    from cafestock.schemas.auth import LoginRequest

    db_user = _db_user(RoleType.STAFF)
    mock_db.execute.return_value = scalar_result(db_user)

    result = await login(
        LoginRequest(email="barista@example.com", password="SecurePass123!"), db=mock_db
    )

    payload = decode_access_token(result.access_token)
    assert result.role == RoleType.STAFF
    assert payload["sub"] == str(db_user.id)
    assert "request:create" in payload["permissions"]
    assert "request:approve" not in payload["permissions"]


@pytest.mark.asyncio
async def test_login_user_without_role_is_customer(mock_db):
    from cafestock.api.auth import login
    from cafestock.schemas.auth import LoginRequest

    mock_db.execute.return_value = scalar_result(_db_user(None))

    result = await login(
        LoginRequest(email="barista@example.com", password="SecurePass123!"), db=mock_db
    )

    assert result.role == RoleType.CUSTOMER
    assert decode_access_token(result.access_token)["permissions"] == []


@pytest.mark.asyncio
async def test_login_wrong_password(mock_db):
    from cafestock.api.auth import login
    from cafestock.schemas.auth import LoginRequest

    mock_db.execute.return_value = scalar_result(_db_user(RoleType.STAFF))

    with pytest.raises(HTTPException) as exc_info:
        await login(LoginRequest(email="barista@example.com", password="not-the-one"), db=mock_db)
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_logout_closes_context(staff_user):
    from cafestock.api.auth import logout
    from cafestock.core.app_context import AppContextRegistry

    registry = AppContextRegistry()
    ctx = registry.open(staff_user)
    ctx.builder.set_request_mode(True)

    await logout(current_user=staff_user, registry=registry)

    assert registry.get(staff_user.id) is None
    # A fresh login starts from a clean context
    assert registry.open(staff_user).builder.request_mode is False


@pytest.mark.asyncio
async def test_assign_role_updates_existing_row(mock_db, admin_user):
    from cafestock.api.auth import assign_role
    from cafestock.schemas.auth import RoleAssignment

    target = uuid.uuid4()
    existing = MagicMock(role=RoleType.CUSTOMER)
    mock_db.get.return_value = MagicMock(id=target)
    mock_db.execute.return_value = scalar_result(existing)

    result = await assign_role(
        RoleAssignment(user_id=target, role=RoleType.STAFF),
        current_user=admin_user,
        db=mock_db,
    )

    assert existing.role == RoleType.STAFF
    assert result.role == RoleType.STAFF
    mock_db.add.assert_not_called()
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_assign_role_unknown_user(mock_db, admin_user):
    from cafestock.api.auth import assign_role
    from cafestock.schemas.auth import RoleAssignment

    mock_db.get.return_value = None

    with pytest.raises(HTTPException) as exc_info:
        await assign_role(
            RoleAssignment(user_id=uuid.uuid4(), role=RoleType.ADMIN),
            current_user=admin_user,
            db=mock_db,
        )
    assert exc_info.value.status_code == 404
