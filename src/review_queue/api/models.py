"""Wire models for the review queue API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


def parse_timestamp(value: str) -> datetime:
    """Parse ISO datetime and ensure timezone-aware UTC fallback."""

    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def _optional_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    return parse_timestamp(str(value))


@dataclass(slots=True, frozen=True)
class ProjectFilter:
    """One (project, language) pair a submission request is queued for."""

    project_id: str
    language: str

    def to_payload(self) -> dict[str, str]:
        return {"project_id": self.project_id, "language": self.language}


@dataclass(slots=True, frozen=True)
class ProjectRef:
    """Project descriptor embedded in submissions and feedbacks."""

    id: str
    name: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> ProjectRef:
        data = payload or {}
        return cls(id=str(data.get("id", "")), name=str(data.get("name", "")))


@dataclass(slots=True)
class SubmissionRequest:
    """The single outstanding queue registration."""

    id: str
    project_filters: tuple[ProjectFilter, ...]
    closed_at: datetime | None

    @property
    def project_ids(self) -> frozenset[str]:
        """Project ids the request covers, ignoring language."""

        return frozenset(item.project_id for item in self.project_filters)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> SubmissionRequest:
        filters = tuple(
            ProjectFilter(
                project_id=str(item["project_id"]),
                language=str(item.get("language", "")),
            )
            for item in payload.get("submission_request_projects") or ()
        )
        return cls(
            id=str(payload["id"]),
            project_filters=filters,
            closed_at=_optional_timestamp(payload.get("closed_at")),
        )


@dataclass(slots=True, frozen=True)
class AssignedItem:
    """A submission currently assigned to the reviewer."""

    id: str
    assigned_at: datetime
    project: ProjectRef

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> AssignedItem:
        return cls(
            id=str(payload["id"]),
            assigned_at=parse_timestamp(str(payload["assigned_at"])),
            project=ProjectRef.from_payload(payload.get("project")),
        )


@dataclass(slots=True, frozen=True)
class FeedbackRecord:
    """Student feedback left on one of the reviewer's reviews."""

    id: str
    rating: int
    project: ProjectRef
    read_at: datetime | None
    submission_id: str

    @property
    def is_unread(self) -> bool:
        return self.read_at is None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> FeedbackRecord:
        return cls(
            id=str(payload["id"]),
            rating=int(payload.get("rating") or 0),
            project=ProjectRef.from_payload(payload.get("project")),
            read_at=_optional_timestamp(payload.get("read_at")),
            submission_id=str(payload.get("submission_id", "")),
        )


@dataclass(slots=True, frozen=True)
class QueuePosition:
    """Rank of the request in one project/language queue (lower is sooner)."""

    project_id: str
    position: int
    language: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> QueuePosition:
        return cls(
            project_id=str(payload["project_id"]),
            position=int(payload["position"]),
            language=str(payload.get("language", "")),
        )
