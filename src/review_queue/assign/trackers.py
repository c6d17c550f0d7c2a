"""Diff polled collections against what this process has already seen."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from review_queue.api.models import AssignedItem, FeedbackRecord
from review_queue.assign.ports import QueueApi
from review_queue.assign.state import LoopState
from review_queue.notify.sink import NotificationPort

logger = logging.getLogger(__name__)


class AssignmentTracker:
    """Tracks assigned submission ids for the life of the process."""

    def __init__(self, *, client: QueueApi, notifier: NotificationPort) -> None:
        self.client = client
        self.notifier = notifier
        self._seen_ids: set[str] = set()

    @property
    def seen_ids(self) -> frozenset[str]:
        return frozenset(self._seen_ids)

    async def check(self, state: LoopState) -> list[AssignedItem]:
        """Fetch the assigned list and process it."""

        items = await self.client.assigned()
        return await self.update(items, state=state)

    async def update(self, items: Iterable[AssignedItem], *, state: LoopState) -> list[AssignedItem]:
        """Record and announce items not seen before, in server order.

        Items assigned before the process started are recorded so they are
        never announced again, but they do not count towards the total.
        """

        new_items: list[AssignedItem] = []
        for item in items:
            if item.id in self._seen_ids:
                continue
            if item.assigned_at > state.started_at:
                state.assigned_total += 1
            self._seen_ids.add(item.id)
            new_items.append(item)

        for item in new_items:
            await self.notifier.notify_assignment(item, assigned_count=state.assigned_count)
        if new_items:
            logger.info(
                "New assignments: %s (total since start: %d)",
                ",".join(item.id for item in new_items),
                state.assigned_total,
            )
        return new_items


class FeedbackTracker:
    """Tracks the unread feedback subset by count delta."""

    def __init__(self, *, client: QueueApi, notifier: NotificationPort) -> None:
        self.client = client
        self.notifier = notifier
        self.unread: list[FeedbackRecord] = []

    async def check(self) -> list[FeedbackRecord]:
        """Fetch the unread count and process it."""

        unread_count = await self.client.feedback_stats()
        return await self.update(unread_count)

    async def update(self, unread_count: int) -> list[FeedbackRecord]:
        delta = unread_count - len(self.unread)
        if delta > 0:
            records = await self.client.feedbacks()
            self.unread = [record for record in records if record.is_unread]
            # Assumes the server returns feedbacks oldest first.
            new_records = self.unread[-delta:]
            for record in new_records:
                await self.notifier.notify_feedback(record)
            logger.info("New unread feedbacks: %d (unread now %d)", len(new_records), unread_count)
            return new_records
        if delta < 0:
            # Approximation: reading feedbacks on the web dashboard marks all of
            # them read, so any drop is taken to mean zero unread. A partial
            # read would be misreported until the next increase.
            logger.info("Unread feedback count dropped to %d; clearing cache", unread_count)
            self.unread = []
        return []
