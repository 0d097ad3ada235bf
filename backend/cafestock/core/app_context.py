"""Per-user application context.

Everything that belongs to one signed-in user between login and logout: the
request builder, notifications waiting to be shown, and the local record
caches. Held in an ``AppContextRegistry`` on ``app.state``.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from cafestock.schemas.auth import CurrentUser
from cafestock.schemas.inventory import InventoryItemResponse
from cafestock.schemas.vendor import VendorProductResponse, VendorResponse
from cafestock.services.notifications import RecordingNotifier
from cafestock.services.record_cache import RecordCache
from cafestock.services.request_builder import RequestBuilder

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    user: CurrentUser
    notifier: RecordingNotifier = field(default_factory=RecordingNotifier)
    builder: RequestBuilder = field(init=False)
    inventory: RecordCache[InventoryItemResponse] = field(default_factory=RecordCache)
    vendors: RecordCache[VendorResponse] = field(default_factory=RecordCache)
    vendor_products: RecordCache[VendorProductResponse] = field(default_factory=RecordCache)
    opened_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.builder = RequestBuilder(self.notifier)


class AppContextRegistry:
    def __init__(self) -> None:
        self._contexts: dict[UUID, AppContext] = {}

    def __len__(self) -> int:
        return len(self._contexts)

    def open(self, user: CurrentUser) -> AppContext:
        """Return the user's context, creating it on first use."""
        context = self._contexts.get(user.id)
        if context is None:
            context = AppContext(user=user)
            self._contexts[user.id] = context
            logger.info("Opened context for user %s (%s)", user.id, user.role.value)
        return context

    def get(self, user_id: UUID) -> AppContext | None:
        return self._contexts.get(user_id)

    def close(self, user_id: UUID) -> bool:
        context = self._contexts.pop(user_id, None)
        if context is None:
            return False
        context.builder.clear()
        context.notifier.drain()
        logger.info("Closed context for user %s", user_id)
        return True

    def close_all(self) -> None:
        for user_id in list(self._contexts):
            self.close(user_id)
