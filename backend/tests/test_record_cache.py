"""Unit tests for the timestamp-merged record cache."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from cafestock.services.record_cache import RecordCache

from conftest import NOW


@dataclass
class Row:
    id: UUID
    updated_at: datetime
    value: str


def test_newer_record_replaces_cached():
    cache = RecordCache()
    row_id = uuid.uuid4()
    cache.merge(Row(row_id, NOW, "old"))

    assert cache.merge(Row(row_id, NOW + timedelta(seconds=1), "new")) is True
    assert cache.get(row_id).value == "new"


def test_older_record_is_ignored():
    """A re-fetch that raced a local write must not roll it back."""
    cache = RecordCache()
    row_id = uuid.uuid4()
    cache.merge(Row(row_id, NOW, "local write"))

    assert cache.merge(Row(row_id, NOW - timedelta(seconds=1), "stale read")) is False
    assert cache.get(row_id).value == "local write"


def test_equal_timestamp_takes_incoming():
    cache = RecordCache()
    row_id = uuid.uuid4()
    cache.merge(Row(row_id, NOW, "a"))
    cache.merge(Row(row_id, NOW, "b"))
    assert cache.get(row_id).value == "b"


def test_sync_drops_missing_rows():
    cache = RecordCache()
    keep, gone = uuid.uuid4(), uuid.uuid4()
    cache.merge(Row(keep, NOW, "keep"))
    cache.merge(Row(gone, NOW, "gone"))

    cache.sync([Row(keep, NOW, "keep")])

    assert keep in cache
    assert gone not in cache
    assert len(cache) == 1


def test_discard_and_clear():
    cache = RecordCache()
    a, b = uuid.uuid4(), uuid.uuid4()
    cache.merge(Row(a, NOW, "a"))
    cache.merge(Row(b, NOW, "b"))

    cache.discard(a)
    cache.discard(uuid.uuid4())
    assert [r.value for r in cache.values()] == ["b"]

    cache.clear()
    assert len(cache) == 0
