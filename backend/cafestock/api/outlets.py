"""Outlet endpoints: the café locations purchase orders are placed for."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.deps import require_permission
from cafestock.db.base import get_db
from cafestock.models.outlet import Outlet
from cafestock.models.role import PermissionAction
from cafestock.schemas.auth import CurrentUser
from cafestock.schemas.outlet import OutletCreate, OutletResponse

router = APIRouter(prefix="/outlets", tags=["outlets"])


@router.get("", response_model=list[OutletResponse])
async def list_outlets(
    current_user: CurrentUser = Depends(require_permission(PermissionAction.INVENTORY_READ.value)),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Outlet).order_by(Outlet.name))
    return [OutletResponse.model_validate(o) for o in result.scalars().all()]


@router.post("", response_model=OutletResponse, status_code=status.HTTP_201_CREATED)
async def create_outlet(
    body: OutletCreate,
    current_user: CurrentUser = Depends(
        require_permission(PermissionAction.PURCHASE_ORDER_MANAGE.value)
    ),
    db: AsyncSession = Depends(get_db),
):
    existing = await db.execute(select(Outlet).where(Outlet.name == body.name))
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Outlet with this name already exists",
        )

    outlet = Outlet(**body.model_dump())
    db.add(outlet)
    await db.commit()
    await db.refresh(outlet)

    return OutletResponse.model_validate(outlet)
