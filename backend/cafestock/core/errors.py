"""Workflow error taxonomy.

Services raise these; ``cafestock.main`` maps them onto HTTP responses so the
API stays usable after any failure.
"""

from uuid import UUID


class WorkflowError(Exception):
    """Base class for every error raised by the replenishment workflow."""

    status_code: int = 400
    title: str = "Request failed"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FetchError(WorkflowError):
    """Reading from the backing store failed. Not retried."""

    status_code = 503
    title = "Fetch failed"


class MutationError(WorkflowError):
    """Writing to the backing store failed."""

    status_code = 502
    title = "Update failed"


class ValidationError(WorkflowError):
    """Rejected before any write was attempted."""

    status_code = 422
    title = "Invalid input"


class QuantityCapError(ValidationError):
    """Requested quantity exceeds ``reorder_level * REQUEST_CAP_MULTIPLIER``."""

    title = "Maximum quantity reached"

    def __init__(self, item_id: UUID, requested: int, max_quantity: int):
        super().__init__(
            f"Requested {requested} exceeds maximum {max_quantity} for item {item_id}"
        )
        self.item_id = item_id
        self.requested = requested
        self.max_quantity = max_quantity


class NotFoundError(WorkflowError):
    status_code = 404
    title = "Not found"


class InvalidTransitionError(WorkflowError):
    status_code = 409
    title = "Invalid status change"

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(f"{entity} cannot move from '{current}' to '{target}'")
        self.entity = entity
        self.current = current
        self.target = target


class PartialBatchFailure(MutationError):
    """A sequential multi-item submission failed part-way through.

    Rows already written are NOT rolled back; ``persisted_ids`` lists them and
    ``persisted_item_ids`` the inventory items they were for, in the same order.
    Both are plain values captured at commit time so they stay readable after
    the session rolls back.
    """

    title = "Request partially submitted"

    def __init__(
        self,
        persisted: list[tuple[UUID, UUID]],
        failed_item_id: UUID | None,
        cause: Exception,
    ):
        super().__init__(
            f"Submission failed at item {failed_item_id} after "
            f"{len(persisted)} request(s) were saved: {cause}"
        )
        self.persisted_ids: list[UUID] = [request_id for request_id, _ in persisted]
        self.persisted_item_ids: list[UUID] = [item_id for _, item_id in persisted]
        self.failed_item_id = failed_item_id
        self.cause = cause
