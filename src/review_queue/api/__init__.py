"""Remote review queue API client and wire models."""

from review_queue.api.client import ApiError, ReviewApiClient
from review_queue.api.models import (
    AssignedItem,
    FeedbackRecord,
    ProjectFilter,
    ProjectRef,
    QueuePosition,
    SubmissionRequest,
)

__all__ = [
    "ApiError",
    "AssignedItem",
    "FeedbackRecord",
    "ProjectFilter",
    "ProjectRef",
    "QueuePosition",
    "ReviewApiClient",
    "SubmissionRequest",
]
