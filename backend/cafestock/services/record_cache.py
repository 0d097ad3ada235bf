"""Client-side record cache with a server-timestamp-wins merge rule.

A local optimistic write and a re-fetched copy of the same row can arrive in
either order. ``merge`` keeps whichever copy carries the newer ``updated_at``,
so a stale read never overwrites a newer write.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Generic, Protocol, TypeVar
from uuid import UUID


class TimestampedRecord(Protocol):
    id: UUID
    updated_at: datetime


R = TypeVar("R", bound=TimestampedRecord)


class RecordCache(Generic[R]):
    def __init__(self) -> None:
        self._records: dict[UUID, R] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def get(self, record_id: UUID) -> R | None:
        return self._records.get(record_id)

    def values(self) -> list[R]:
        return list(self._records.values())

    def merge(self, record: R) -> bool:
        """Store ``record`` unless the cached copy is strictly newer. Returns True if stored."""
        current = self._records.get(record.id)
        if current is not None and current.updated_at > record.updated_at:
            return False
        self._records[record.id] = record
        return True

    def discard(self, record_id: UUID) -> None:
        self._records.pop(record_id, None)

    def sync(self, records: Iterable[R]) -> None:
        """Apply a full re-fetch: merge every row, drop rows no longer present."""
        seen: set[UUID] = set()
        for record in records:
            seen.add(record.id)
            self.merge(record)
        for record_id in list(self._records):
            if record_id not in seen:
                del self._records[record_id]

    def clear(self) -> None:
        self._records.clear()
