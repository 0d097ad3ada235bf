"""Approval workflow for persisted inventory requests."""

import logging
import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.errors import FetchError, MutationError, NotFoundError, ValidationError
from cafestock.models.inventory_request import (
    InventoryRequest,
    InventoryRequestHistory,
    InventoryRequestStatus,
)
from cafestock.services.notifications import LogNotifier, Notifier, Severity
from cafestock.services.transitions import REQUEST_TRANSITIONS

logger = logging.getLogger(__name__)


def record_status_change(
    request: InventoryRequest,
    new_status: InventoryRequestStatus,
    user_id: UUID | None,
    notes: str | None = None,
    now: datetime | None = None,
) -> InventoryRequestHistory:
    """Validate and apply a status change. Returns the history row for the caller to add."""
    REQUEST_TRANSITIONS.check(request.status, new_status)
    now = now or datetime.now(timezone.utc)
    entry = InventoryRequestHistory(
        id=uuid.uuid4(),
        inventory_request_id=request.id,
        previous_status=request.status,
        new_status=new_status,
        notes=notes,
        user_id=user_id,
        created_at=now,
    )
    request.status = new_status
    request.updated_at = now
    return entry


class InventoryRequestService:
    def __init__(
        self,
        db: AsyncSession,
        notifier: Notifier | None = None,
        user_id: UUID | None = None,
    ):
        self.db = db
        self.notifier = notifier or LogNotifier()
        self.user_id = user_id

    async def list_requests(
        self, status: InventoryRequestStatus | None = None
    ) -> tuple[list[InventoryRequest], int]:
        """Newest first, with the item summary eagerly loaded."""
        query = select(InventoryRequest)
        if status:
            query = query.where(InventoryRequest.status == status)
        try:
            total_result = await self.db.execute(
                select(func.count()).select_from(query.subquery())
            )
            total = total_result.scalar_one()
            result = await self.db.execute(query.order_by(InventoryRequest.created_at.desc()))
            items = list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.error("Error fetching inventory requests: %s", exc)
            raise FetchError("Failed to fetch inventory requests") from exc
        return items, total

    async def get(self, request_id: UUID) -> InventoryRequest:
        try:
            request = await self.db.get(InventoryRequest, request_id)
        except SQLAlchemyError as exc:
            logger.error("Error fetching inventory request %s: %s", request_id, exc)
            raise FetchError("Failed to fetch inventory request") from exc
        if request is None:
            raise NotFoundError("Inventory request not found")
        return request

    async def approve(self, request_id: UUID, notes: str | None = None) -> InventoryRequest:
        request = await self.get(request_id)
        now = datetime.now(timezone.utc)
        self.db.add(
            record_status_change(request, InventoryRequestStatus.APPROVED, self.user_id, notes, now)
        )
        request.approved_at = now
        request.approved_by_user_id = self.user_id
        if notes is not None:
            request.notes = notes
        await self._commit(request, "Failed to update request status.")
        self.notifier.notify(
            "Request Approved", "The inventory request has been approved.", Severity.SUCCESS
        )
        return request

    async def reject(
        self, request_id: UUID, rejected_reason: str, notes: str | None = None
    ) -> InventoryRequest:
        if not rejected_reason.strip():
            raise ValidationError("A reason is required to reject a request")
        request = await self.get(request_id)
        self.db.add(
            record_status_change(request, InventoryRequestStatus.REJECTED, self.user_id, notes)
        )
        request.rejected_reason = rejected_reason
        if notes is not None:
            request.notes = notes
        await self._commit(request, "Failed to update request status.")
        self.notifier.notify(
            "Request Rejected", "The inventory request has been rejected.", Severity.SUCCESS
        )
        return request

    async def history(self, request_id: UUID) -> list[InventoryRequestHistory]:
        try:
            result = await self.db.execute(
                select(InventoryRequestHistory)
                .where(InventoryRequestHistory.inventory_request_id == request_id)
                .order_by(InventoryRequestHistory.created_at.asc())
            )
        except SQLAlchemyError as exc:
            logger.error("Error fetching request history for %s: %s", request_id, exc)
            raise FetchError("Failed to fetch request history") from exc
        return list(result.scalars().all())

    async def _commit(self, request: InventoryRequest, failure_message: str) -> None:
        request_id = request.id
        try:
            await self.db.commit()
            await self.db.refresh(request)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Error updating inventory request %s: %s", request_id, exc)
            self.notifier.notify("Update Failed", failure_message, Severity.ERROR)
            raise MutationError(failure_message) from exc
        logger.info("Inventory request %s is now %s", request.id, request.status.value)
