from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from cafestock.models.outlet import OutletStatus


class OutletCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str | None = None
    phone: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=255)
    status: OutletStatus = OutletStatus.ACTIVE


class OutletResponse(OutletCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime
