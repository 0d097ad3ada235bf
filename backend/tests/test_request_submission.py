"""Unit tests for request submission: batching, partial failure, idempotency."""

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cafestock.core.errors import (
    MutationError,
    PartialBatchFailure,
    QuantityCapError,
    ValidationError,
)
from cafestock.models.inventory_request import InventoryRequest, InventoryRequestStatus
from cafestock.services.notifications import RecordingNotifier, Severity
from cafestock.services.request_builder import RequestBuilder
from cafestock.services.request_submission import (
    RequestSubmitter,
    add_business_days,
    estimated_delivery_date,
    idempotency_key,
)

from conftest import NOW, scalars_result


@pytest.fixture
def builder(make_item):
    b = RequestBuilder(RecordingNotifier())
    b.items = [make_item(name=name) for name in ("Milk", "Beans", "Cups")]
    for item in b.items:
        b.confirm(item, 2)
    return b


def added_requests(mock_db) -> list[InventoryRequest]:
    return [c.args[0] for c in mock_db.add.call_args_list]


# ── Business days ─────────────────────────────────

@pytest.mark.parametrize(
    "start, expected",
    [
        (date(2024, 3, 11), date(2024, 3, 13)),  # Mon -> Wed
        (date(2024, 3, 14), date(2024, 3, 18)),  # Thu -> Mon
        (date(2024, 3, 15), date(2024, 3, 19)),  # Fri -> Tue
        (date(2024, 3, 16), date(2024, 3, 19)),  # Sat -> Tue
    ],
)
def test_add_business_days_skips_weekends(start, expected):
    assert add_business_days(start, 2) == expected


def test_estimated_delivery_date_is_two_business_days():
    assert estimated_delivery_date(datetime(2024, 3, 15, 17, tzinfo=timezone.utc)) == date(2024, 3, 19)


# ── Idempotency key ───────────────────────────────

def test_idempotency_key_stable_within_window():
    user, item = uuid.uuid4(), uuid.uuid4()
    at = datetime(2024, 3, 14, 9, 30, 0, tzinfo=timezone.utc)

    key = idempotency_key(user, item, 4, at)

    assert key == idempotency_key(user, item, 4, at + timedelta(seconds=5))
    assert key != idempotency_key(user, item, 4, at + timedelta(seconds=10))
    assert key != idempotency_key(user, item, 5, at)
    assert key != idempotency_key(uuid.uuid4(), item, 4, at)
    assert len(key) == 64


# ── Atomic submission ─────────────────────────────

@pytest.mark.asyncio
async def test_submit_builder_persists_one_request_per_line(mock_db, builder):
    mock_db.execute.return_value = scalars_result([])
    user_id = uuid.uuid4()
    submitter = RequestSubmitter(mock_db, builder.notifier, user_id)

    requests = await submitter.submit_builder(builder, notes="Weekend rush", now=NOW)

    assert len(requests) == 3
    assert added_requests(mock_db) == requests
    assert all(r.status == InventoryRequestStatus.PENDING for r in requests)
    assert all(r.notes == "Weekend rush" for r in requests)
    assert all(r.requested_by_user_id == user_id for r in requests)
    assert [r.staff_entered_quantity for r in requests] == [10, 10, 10]
    # One transaction for the whole batch
    mock_db.commit.assert_awaited_once()
    assert len(builder) == 0

    notice = builder.notifier.items[-1]
    assert notice.description == "Your inventory request with 3 items has been submitted."
    assert notice.severity == Severity.SUCCESS


@pytest.mark.asyncio
async def test_submitted_request_carries_initial_history(mock_db, builder):
    mock_db.execute.return_value = scalars_result([])

    requests = await RequestSubmitter(mock_db).submit_all(builder.pending_lines()[:1], now=NOW)

    [entry] = requests[0].history
    assert entry.previous_status is None
    assert entry.new_status == InventoryRequestStatus.PENDING


@pytest.mark.asyncio
async def test_atomic_failure_saves_nothing_and_keeps_builder(mock_db, builder):
    mock_db.execute.return_value = scalars_result([])
    mock_db.commit.side_effect = SQLAlchemyError("connection lost")

    with pytest.raises(MutationError) as exc_info:
        await RequestSubmitter(mock_db, builder.notifier).submit_builder(builder, now=NOW)

    assert not isinstance(exc_info.value, PartialBatchFailure)
    mock_db.rollback.assert_awaited_once()
    assert len(builder) == 3
    assert builder.notifier.items[-1].severity == Severity.ERROR


# ── Sequential submission ─────────────────────────

@pytest.mark.asyncio
async def test_sequential_failure_on_second_line_reports_partial_batch(mock_db, builder):
    mock_db.execute.return_value = scalars_result([])
    mock_db.commit.side_effect = [None, IntegrityError("INSERT", {}, Exception("dup"))]
    lines = builder.pending_lines()

    with pytest.raises(PartialBatchFailure) as exc_info:
        await RequestSubmitter(mock_db, builder.notifier).submit_builder(
            builder, atomic=False, now=NOW
        )

    failure = exc_info.value
    first = added_requests(mock_db)[0]
    assert failure.persisted_ids == [first.id]
    assert failure.failed_item_id == lines[1].item_id
    assert mock_db.commit.await_count == 2
    mock_db.rollback.assert_awaited_once()
    # Saved line leaves the builder; the failed and untried lines stay for retry
    assert [line.item_id for line in builder.pending_lines()] == [
        lines[1].item_id,
        lines[2].item_id,
    ]


@pytest.mark.asyncio
async def test_sequential_success_commits_per_line(mock_db, builder):
    mock_db.execute.return_value = scalars_result([])

    requests = await RequestSubmitter(mock_db).submit_builder(builder, atomic=False, now=NOW)

    assert len(requests) == 3
    assert mock_db.commit.await_count == 3


# ── Validation & duplicates ───────────────────────

@pytest.mark.asyncio
async def test_empty_submission_rejected(mock_db):
    with pytest.raises(ValidationError):
        await RequestSubmitter(mock_db).submit_all([])
    mock_db.execute.assert_not_called()


@pytest.mark.asyncio
async def test_over_cap_line_rejected_before_any_write(mock_db, builder):
    line = builder.pending_lines()[0]
    line.requested_quantity = line.max_quantity + 1

    with pytest.raises(QuantityCapError) as exc_info:
        await RequestSubmitter(mock_db).submit_all([line])

    assert exc_info.value.max_quantity == 15
    mock_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_duplicate_submission_returns_existing_row(mock_db, builder):
    user_id = uuid.uuid4()
    line = builder.pending_lines()[0]
    key = idempotency_key(user_id, line.item_id, line.requested_quantity, NOW)
    existing = InventoryRequest(
        id=uuid.uuid4(),
        inventory_item_id=line.item_id,
        requested_quantity=line.requested_quantity,
        status=InventoryRequestStatus.PENDING,
        idempotency_key=key,
    )
    mock_db.execute.return_value = scalars_result([existing])

    requests = await RequestSubmitter(mock_db, user_id=user_id).submit_all([line], now=NOW)

    assert requests == [existing]
    mock_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_unique_key_conflict_on_commit_returns_winning_rows(mock_db, builder):
    user_id = uuid.uuid4()
    line = builder.pending_lines()[0]
    winner = InventoryRequest(
        id=uuid.uuid4(),
        inventory_item_id=line.item_id,
        requested_quantity=line.requested_quantity,
        status=InventoryRequestStatus.PENDING,
        idempotency_key=idempotency_key(user_id, line.item_id, line.requested_quantity, NOW),
    )
    # Nothing found before the insert; the other submit commits first
    mock_db.execute.side_effect = [scalars_result([]), scalars_result([winner])]
    mock_db.commit.side_effect = [IntegrityError("INSERT", {}, Exception("unique")), None]
    submitter = RequestSubmitter(mock_db, builder.notifier, user_id)

    requests = await submitter.submit_all([line], now=NOW)

    assert requests == [winner]
    mock_db.rollback.assert_awaited_once()
    assert builder.notifier.items[-1].severity == Severity.SUCCESS


@pytest.mark.asyncio
async def test_integrity_error_without_winning_rows_is_a_mutation_error(mock_db, builder):
    mock_db.execute.return_value = scalars_result([])
    mock_db.commit.side_effect = IntegrityError("INSERT", {}, Exception("fk"))

    with pytest.raises(MutationError):
        await RequestSubmitter(mock_db, builder.notifier).submit_builder(builder, now=NOW)

    assert len(builder) == 3
    assert builder.notifier.items[-1].severity == Severity.ERROR
