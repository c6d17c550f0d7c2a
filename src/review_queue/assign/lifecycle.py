"""Create, update or refresh the single outstanding submission request."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from review_queue.api.models import ProjectFilter, SubmissionRequest
from review_queue.assign.ports import QueueApi
from review_queue.assign.state import LoopState, utc_now

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_WINDOW = timedelta(minutes=5)


class LifecycleAction(str, Enum):
    """What reconcile did to the outstanding request."""

    CREATED = "created"
    UPDATED = "updated"
    REFRESHED = "refreshed"
    UNCHANGED = "unchanged"

    @property
    def changed_request(self) -> bool:
        return self in (LifecycleAction.CREATED, LifecycleAction.UPDATED)


@dataclass(slots=True, frozen=True)
class ReconcileResult:
    request: SubmissionRequest
    action: LifecycleAction


def build_filters(
    languages: Iterable[str],
    project_ids: Iterable[str],
) -> tuple[ProjectFilter, ...]:
    """Every language paired with every project id, languages outermost."""

    ids = tuple(str(project_id) for project_id in project_ids)
    return tuple(
        ProjectFilter(project_id=project_id, language=language)
        for language in languages
        for project_id in ids
    )


def needs_update(current: SubmissionRequest, desired: Iterable[ProjectFilter]) -> bool:
    """True when the project id sets differ; order and languages are ignored."""

    desired_ids = {item.project_id for item in desired}
    return current.project_ids != desired_ids


class RequestLifecycleManager:
    """Owns the identity of the outstanding request.

    Remote failures propagate as ``ApiError``; the next scheduler cycle is the
    retry. Deleting the request is left to the exit path.
    """

    def __init__(
        self,
        *,
        client: QueueApi,
        refresh_window: timedelta = DEFAULT_REFRESH_WINDOW,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.client = client
        self.refresh_window = refresh_window
        self._clock = clock
        self.request: SubmissionRequest | None = None

    @property
    def request_id(self) -> str | None:
        return self.request.id if self.request is not None else None

    async def reconcile(
        self,
        current: SubmissionRequest | None,
        desired: tuple[ProjectFilter, ...],
        *,
        state: LoopState,
    ) -> ReconcileResult:
        """Bring the server-side request in line with the desired filters."""

        if current is None:
            created = await self.client.create(desired)
            self.request = created
            state.reset_tick()
            logger.info("Created submission request %s", created.id)
            return ReconcileResult(request=created, action=LifecycleAction.CREATED)

        self.request = current
        if needs_update(current, desired):
            updated = await self.client.update(current.id, desired)
            self.request = updated
            state.reset_tick()
            logger.info(
                "Updated submission request %s -> %s (projects %s)",
                current.id,
                updated.id,
                ",".join(sorted(updated.project_ids)),
            )
            return ReconcileResult(request=updated, action=LifecycleAction.UPDATED)

        if self.expires_soon(current):
            await self.client.refresh(current.id)
            logger.info("Refreshed submission request %s", current.id)
            return ReconcileResult(request=current, action=LifecycleAction.REFRESHED)

        return ReconcileResult(request=current, action=LifecycleAction.UNCHANGED)

    def expires_soon(self, request: SubmissionRequest) -> bool:
        if request.closed_at is None:
            return False
        return request.closed_at - self._clock() < self.refresh_window
