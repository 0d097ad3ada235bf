"""Turns confirmed request-builder lines into persisted InventoryRequest rows."""

import hashlib
import logging
import uuid
from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.config import settings
from cafestock.core.errors import (
    MutationError,
    PartialBatchFailure,
    QuantityCapError,
    ValidationError,
)
from cafestock.models.inventory_request import (
    InventoryRequest,
    InventoryRequestHistory,
    InventoryRequestStatus,
)
from cafestock.services.notifications import LogNotifier, Notifier, Severity
from cafestock.services.request_builder import PendingLine, RequestBuilder

logger = logging.getLogger(__name__)


def add_business_days(start: date, days: int) -> date:
    """Step forward ``days`` weekdays, skipping Saturdays and Sundays."""
    current = start
    remaining = days
    while remaining > 0:
        current += timedelta(days=1)
        if current.weekday() < 5:
            remaining -= 1
    return current


def estimated_delivery_date(now: datetime | None = None) -> date:
    """Informational only; never checked against actual deliveries."""
    now = now or datetime.now(timezone.utc)
    return add_business_days(now.date(), settings.ESTIMATED_DELIVERY_BUSINESS_DAYS)


def idempotency_key(
    user_id: UUID | None,
    item_id: UUID,
    quantity: int,
    at: datetime,
    window_seconds: int | None = None,
) -> str:
    """Same user, item and quantity inside one time bucket hash to the same key."""
    window = window_seconds or settings.IDEMPOTENCY_WINDOW_SECONDS
    bucket = int(at.timestamp()) // window
    raw = f"{user_id or '-'}|{item_id}|{quantity}|{bucket}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class RequestSubmitter:
    def __init__(
        self,
        db: AsyncSession,
        notifier: Notifier | None = None,
        user_id: UUID | None = None,
    ):
        self.db = db
        self.notifier = notifier or LogNotifier()
        self.user_id = user_id

    async def submit_all(
        self,
        lines: Sequence[PendingLine],
        notes: str | None = None,
        atomic: bool = True,
        now: datetime | None = None,
    ) -> list[InventoryRequest]:
        """Persist one pending request per line.

        ``atomic=True`` writes every row in one transaction: all or nothing.
        ``atomic=False`` commits line by line and stops at the first failure,
        raising PartialBatchFailure; rows already committed stay.
        """
        if not lines:
            raise ValidationError("No items in request")
        for line in lines:
            if line.requested_quantity < 1:
                raise ValidationError(f"Quantity for {line.name} must be at least 1")
            if line.requested_quantity > line.max_quantity:
                raise QuantityCapError(line.item_id, line.requested_quantity, line.max_quantity)

        now = now or datetime.now(timezone.utc)
        keys = {
            line.item_id: idempotency_key(self.user_id, line.item_id, line.requested_quantity, now)
            for line in lines
        }
        existing = await self._find_existing(list(keys.values()))

        if atomic:
            requests = await self._submit_atomic(lines, notes, keys, existing, now)
        else:
            requests = await self._submit_sequential(lines, notes, keys, existing, now)

        logger.info("Submitted %d inventory request(s) by user %s", len(requests), self.user_id)
        self.notifier.notify(
            "Request Submitted",
            f"Your inventory request with {len(requests)} items has been submitted.",
            Severity.SUCCESS,
        )
        return requests

    async def submit_builder(
        self,
        builder: RequestBuilder,
        notes: str | None = None,
        atomic: bool = True,
        now: datetime | None = None,
    ) -> list[InventoryRequest]:
        """Submit the builder's pending set; clear it on full success."""
        try:
            requests = await self.submit_all(builder.pending_lines(), notes, atomic=atomic, now=now)
        except PartialBatchFailure as exc:
            for item_id in exc.persisted_item_ids:
                builder.remove(item_id)
            raise
        builder.clear()
        return requests

    async def _find_existing(self, keys: list[str]) -> dict[str, InventoryRequest]:
        result = await self.db.execute(
            select(InventoryRequest).where(InventoryRequest.idempotency_key.in_(keys))
        )
        return {r.idempotency_key: r for r in result.scalars().all()}

    def _build(self, line: PendingLine, notes: str | None, key: str, now: datetime) -> InventoryRequest:
        request = InventoryRequest(
            id=uuid.uuid4(),
            inventory_item_id=line.item_id,
            staff_entered_quantity=line.on_hand,
            requested_quantity=line.requested_quantity,
            notes=notes,
            status=InventoryRequestStatus.PENDING,
            idempotency_key=key,
            requested_by_user_id=self.user_id,
        )
        request.history.append(
            InventoryRequestHistory(
                id=uuid.uuid4(),
                previous_status=None,
                new_status=InventoryRequestStatus.PENDING,
                notes=notes,
                user_id=self.user_id,
                created_at=now,
            )
        )
        return request

    async def _submit_atomic(
        self, lines, notes, keys, existing, now, retry: bool = True
    ) -> list[InventoryRequest]:
        requests = []
        for line in lines:
            key = keys[line.item_id]
            if key in existing:
                logger.info("Duplicate submission suppressed for item %s", line.item_id)
                requests.append(existing[key])
                continue
            request = self._build(line, notes, key, now)
            self.db.add(request)
            requests.append(request)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            # A concurrent submit of the same lines won the insert
            raced = await self._find_existing(list(keys.values())) if retry else {}
            if not raced:
                self._fail("Inventory request batch failed, nothing saved: %s", exc)
            logger.info("Concurrent duplicate submission; reusing %d saved request(s)", len(raced))
            return await self._submit_atomic(lines, notes, keys, raced, now, retry=False)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            self._fail("Inventory request batch failed, nothing saved: %s", exc)
        return requests

    async def _submit_sequential(self, lines, notes, keys, existing, now) -> list[InventoryRequest]:
        requests: list[InventoryRequest] = []
        # (request id, item id) per saved line; rollback expires the ORM rows
        saved: list[tuple[UUID, UUID]] = []
        for line in lines:
            key = keys[line.item_id]
            if key in existing:
                logger.info("Duplicate submission suppressed for item %s", line.item_id)
                requests.append(existing[key])
                saved.append((existing[key].id, line.item_id))
                continue
            request = self._build(line, notes, key, now)
            request_id = request.id
            self.db.add(request)
            try:
                await self.db.commit()
            except SQLAlchemyError as exc:
                await self.db.rollback()
                raced = {}
                if isinstance(exc, IntegrityError):
                    # Selecting every key also refreshes the rows the rollback expired
                    raced = await self._find_existing(list(keys.values()))
                if key in raced:
                    logger.info("Concurrent duplicate submission for item %s", line.item_id)
                    requests.append(raced[key])
                    saved.append((raced[key].id, line.item_id))
                    continue
                logger.error(
                    "Inventory request failed at item %s after %d saved: %s",
                    line.item_id,
                    len(saved),
                    exc,
                )
                self.notifier.notify(
                    "Request Failed", "Failed to submit inventory request.", Severity.ERROR
                )
                raise PartialBatchFailure(saved, line.item_id, exc) from exc
            requests.append(request)
            saved.append((request_id, line.item_id))
        return requests

    def _fail(self, message: str, exc: SQLAlchemyError):
        logger.error(message, exc)
        self.notifier.notify("Request Failed", "Failed to submit inventory request.", Severity.ERROR)
        raise MutationError("Failed to submit inventory request") from exc
