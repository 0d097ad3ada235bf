"""Notifications queued for the signed-in user since their last poll."""

from fastapi import APIRouter, Depends

from cafestock.core.app_context import AppContext
from cafestock.core.deps import get_app_context
from cafestock.services.notifications import Notification

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[Notification])
async def drain_notifications(ctx: AppContext = Depends(get_app_context)):
    """Return and clear the pending notifications."""
    return ctx.notifier.drain()
