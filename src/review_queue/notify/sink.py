"""Notification sink used by the trackers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from review_queue.api.models import AssignedItem, FeedbackRecord
from review_queue.notify.desktop import DesktopNotifier
from review_queue.notify.push import PushbulletClient, PushError

logger = logging.getLogger(__name__)

ASSIGNED_SOUND = "Ping"
FEEDBACK_SOUND = "Pop"


class NotificationPort(Protocol):
    """What the trackers need from a notification backend."""

    async def notify_assignment(self, item: AssignedItem, *, assigned_count: int) -> None: ...

    async def notify_feedback(self, record: FeedbackRecord) -> None: ...


class NotificationSink:
    """Delivers tracker events as desktop notifications and optional pushes."""

    def __init__(
        self,
        *,
        desktop: DesktopNotifier,
        review_site_url: str,
        push: PushbulletClient | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.desktop = desktop
        self.push = push
        self.review_site_url = review_site_url.rstrip("/")
        self._clock = clock

    def submission_link(self, submission_id: str) -> str:
        return f"{self.review_site_url}/#!/submissions/{submission_id}"

    def review_link(self, submission_id: str) -> str:
        return f"{self.review_site_url}/#!/reviews/{submission_id}"

    async def notify_assignment(self, item: AssignedItem, *, assigned_count: int) -> None:
        title = f"New Review Assigned! ({assigned_count})"
        message = f"{self._clock().strftime('%H:%M')} - {item.project.name} ({item.project.id})"
        link = self.submission_link(item.id)
        self.desktop.notify(title=title, message=message, sound=ASSIGNED_SOUND, link=link)
        logger.info("Assignment notification: submission=%s project=%s", item.id, item.project.id)
        if self.push is not None:
            try:
                await self.push.push_link(title, link)
            except PushError as error:
                logger.warning("Push notification failed: %s", error)

    async def notify_feedback(self, record: FeedbackRecord) -> None:
        title = f"New {record.rating}-star Feedback!"
        message = f"Project: {record.project.name}"
        link = self.review_link(record.submission_id)
        self.desktop.notify(title=title, message=message, sound=FEEDBACK_SOUND, link=link)
        logger.info("Feedback notification: feedback=%s rating=%s", record.id, record.rating)
