"""In-memory stand-ins for the review API and notification backends."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any

from review_queue.api.client import ApiError
from review_queue.api.models import (
    AssignedItem,
    FeedbackRecord,
    ProjectFilter,
    ProjectRef,
    SubmissionRequest,
)

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


def make_request(
    request_id: str = "900",
    project_ids: tuple[str, ...] = ("145",),
    *,
    languages: tuple[str, ...] = ("en-us",),
    closed_at: datetime | None = NOW + timedelta(hours=1),
) -> SubmissionRequest:
    return SubmissionRequest(
        id=request_id,
        project_filters=tuple(
            ProjectFilter(project_id=project_id, language=language)
            for language in languages
            for project_id in project_ids
        ),
        closed_at=closed_at,
    )


def make_item(
    item_id: str,
    *,
    assigned_at: datetime,
    project_id: str = "145",
    project_name: str = "Dog Breed Classifier",
) -> AssignedItem:
    return AssignedItem(
        id=item_id,
        assigned_at=assigned_at,
        project=ProjectRef(id=project_id, name=project_name),
    )


def make_feedback(
    feedback_id: str,
    *,
    rating: int = 5,
    read_at: datetime | None = None,
    submission_id: str | None = None,
) -> FeedbackRecord:
    return FeedbackRecord(
        id=feedback_id,
        rating=rating,
        project=ProjectRef(id="145", name="Dog Breed Classifier"),
        read_at=read_at,
        submission_id=submission_id or f"s-{feedback_id}",
    )


class FakeQueueApi:
    """Scriptable review API that records every call it receives."""

    def __init__(
        self,
        *,
        assigned_count: int = 0,
        request: SubmissionRequest | None = None,
        assigned: list[AssignedItem] | None = None,
        positions: Any = None,
        unread_count: int = 0,
        feedbacks: list[FeedbackRecord] | None = None,
        now: datetime = NOW,
    ) -> None:
        self.assigned_count = assigned_count
        self.request = request
        self.assigned_items = list(assigned or [])
        self.positions_payload = positions if positions is not None else []
        self.unread_count = unread_count
        self.feedback_records = list(feedbacks or [])
        self.now = now
        self.calls: list[tuple[Any, ...]] = []
        self.failures: dict[str, ApiError] = {}
        self.closed = False
        self.create_delay = 0.0
        self._next_id = 1000

    def fail(self, operation: str, code: str = "HTTP 503") -> None:
        self.failures[operation] = ApiError(f"{operation} failed", code=code)

    def operations(self) -> list[str]:
        return [call[0] for call in self.calls]

    def count_of(self, operation: str) -> int:
        return self.operations().count(operation)

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, *args))
        if operation in self.failures:
            raise self.failures[operation]

    async def count(self) -> int:
        self._record("count")
        return self.assigned_count

    async def get(self) -> SubmissionRequest | None:
        self._record("get")
        return self.request

    async def create(self, filters: tuple[ProjectFilter, ...]) -> SubmissionRequest:
        self._record("create", tuple(filters))
        self._next_id += 1
        self.request = SubmissionRequest(
            id=str(self._next_id),
            project_filters=tuple(filters),
            closed_at=self.now + timedelta(hours=1),
        )
        created = self.request
        if self.create_delay:
            # Committed on the server, response still on its way.
            await asyncio.sleep(self.create_delay)
        return created

    async def update(
        self,
        request_id: str,
        filters: tuple[ProjectFilter, ...],
    ) -> SubmissionRequest:
        self._record("update", request_id, tuple(filters))
        self.request = SubmissionRequest(
            id=request_id,
            project_filters=tuple(filters),
            closed_at=self.now + timedelta(hours=1),
        )
        return self.request

    async def refresh(self, request_id: str) -> None:
        self._record("refresh", request_id)

    async def delete(self, request_id: str) -> None:
        self._record("delete", request_id)
        self.request = None

    async def assigned(self) -> list[AssignedItem]:
        self._record("assigned")
        return list(self.assigned_items)

    async def position(self, request_id: str) -> Any:
        self._record("position", request_id)
        return self.positions_payload

    async def feedback_stats(self) -> int:
        self._record("feedback_stats")
        return self.unread_count

    async def feedbacks(self) -> list[FeedbackRecord]:
        self._record("feedbacks")
        return list(self.feedback_records)

    async def aclose(self) -> None:
        self.closed = True


class RecordingNotifier:
    """Notification port that keeps what it was asked to deliver."""

    def __init__(self) -> None:
        self.assignments: list[tuple[AssignedItem, int]] = []
        self.feedbacks: list[FeedbackRecord] = []

    async def notify_assignment(self, item: AssignedItem, *, assigned_count: int) -> None:
        self.assignments.append((item, assigned_count))

    async def notify_feedback(self, record: FeedbackRecord) -> None:
        self.feedbacks.append(record)


class RecordingDesktop:
    """Desktop notifier replacement that records instead of spawning processes."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str | None]] = []

    def notify(
        self,
        *,
        title: str,
        message: str,
        sound: str | None = None,
        link: str | None = None,
    ) -> None:
        self.sent.append({"title": title, "message": message, "sound": sound, "link": link})
