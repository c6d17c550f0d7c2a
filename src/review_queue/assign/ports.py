"""Interfaces the reconciliation core depends on."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol

from review_queue.api.models import (
    AssignedItem,
    FeedbackRecord,
    ProjectFilter,
    SubmissionRequest,
)


class QueueApi(Protocol):
    """Remote queue operations; implemented by ``ReviewApiClient``."""

    async def count(self) -> int: ...

    async def get(self) -> SubmissionRequest | None: ...

    async def create(self, filters: Iterable[ProjectFilter]) -> SubmissionRequest: ...

    async def update(
        self,
        request_id: str,
        filters: Iterable[ProjectFilter],
    ) -> SubmissionRequest: ...

    async def refresh(self, request_id: str) -> None: ...

    async def delete(self, request_id: str) -> None: ...

    async def assigned(self) -> list[AssignedItem]: ...

    async def position(self, request_id: str) -> Any: ...

    async def feedback_stats(self) -> int: ...

    async def feedbacks(self) -> list[FeedbackRecord]: ...
