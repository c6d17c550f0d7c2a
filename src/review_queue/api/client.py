"""Async HTTP client for the review queue API."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from review_queue import __version__
from review_queue.api.models import (
    AssignedItem,
    FeedbackRecord,
    ProjectFilter,
    SubmissionRequest,
)

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = f"review-queue/{__version__}"


@dataclass(slots=True)
class ApiError(Exception):
    """Remote call failure; recoverable by the next reconciliation cycle."""

    message: str
    code: str = "api_error"

    def __str__(self) -> str:
        return self.message


class ReviewApiClient:
    """One method per remote operation, one round trip each."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        retries: int = 0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=self._timeout,
            headers={
                "Authorization": token,
                "Content-Type": "application/json",
                "User-Agent": DEFAULT_USER_AGENT,
            },
            transport=transport or httpx.AsyncHTTPTransport(retries=retries),
        )

    async def count(self) -> int:
        """Number of submissions currently assigned to the reviewer."""

        payload = await self._request("GET", "me/submissions/assigned_count.json")
        return self._parse(lambda: int(payload["assigned_count"]), operation="count")

    async def get(self) -> SubmissionRequest | None:
        """Current submission request, if one exists."""

        payload = await self._request("GET", "me/submission_requests.json")
        if not payload:
            return None
        return self._parse(lambda: SubmissionRequest.from_payload(payload[0]), operation="get")

    async def create(self, filters: Iterable[ProjectFilter]) -> SubmissionRequest:
        payload = await self._request(
            "POST",
            "submission_requests.json",
            json=_request_body(filters),
        )
        return self._parse(lambda: SubmissionRequest.from_payload(payload), operation="create")

    async def update(self, request_id: str, filters: Iterable[ProjectFilter]) -> SubmissionRequest:
        payload = await self._request(
            "PUT",
            f"submission_requests/{request_id}.json",
            json=_request_body(filters),
        )
        return self._parse(lambda: SubmissionRequest.from_payload(payload), operation="update")

    async def refresh(self, request_id: str) -> None:
        """Extend the request expiry without changing its identity."""

        await self._request("PUT", f"submission_requests/{request_id}/refresh.json")

    async def delete(self, request_id: str) -> None:
        await self._request("DELETE", f"submission_requests/{request_id}.json")

    async def assigned(self) -> list[AssignedItem]:
        payload = await self._request("GET", "me/submissions/assigned.json")
        return self._parse(
            lambda: [AssignedItem.from_payload(item) for item in payload or ()],
            operation="assigned",
        )

    async def position(self, request_id: str) -> Any:
        """Raw queue position payload: a list of positions or an ``{"error": ...}`` object."""

        return await self._request("GET", f"submission_requests/{request_id}/waits.json")

    async def feedback_stats(self) -> int:
        """Number of unread student feedbacks."""

        payload = await self._request("GET", "me/student_feedbacks/stats.json")
        return self._parse(lambda: int(payload["unread_count"]), operation="feedback_stats")

    async def feedbacks(self) -> list[FeedbackRecord]:
        payload = await self._request("GET", "me/student_feedbacks.json")
        return self._parse(
            lambda: [FeedbackRecord.from_payload(item) for item in payload or ()],
            operation="feedbacks",
        )

    async def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.TimeoutException as error:
            logger.warning("Timeout calling %s %s", method, path)
            raise ApiError(f"Timeout calling {method} {path}", code="timeout") from error
        except httpx.HTTPError as error:
            logger.warning("HTTP error calling %s %s: %s", method, path, error)
            raise ApiError(str(error) or type(error).__name__, code=type(error).__name__) from error

        if not response.is_success:
            logger.warning("%s %s returned HTTP %s", method, path, response.status_code)
            raise ApiError(
                f"{method} {path} returned HTTP {response.status_code}",
                code=f"HTTP {response.status_code}",
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as error:
            raise ApiError(
                f"{method} {path} returned invalid JSON",
                code="malformed_response",
            ) from error

    @staticmethod
    def _parse(build: Callable[[], _T], *, operation: str) -> _T:
        try:
            return build()
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as error:
            raise ApiError(
                f"Malformed {operation} response: {error}",
                code="malformed_response",
            ) from error

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ReviewApiClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()


def _request_body(filters: Iterable[ProjectFilter]) -> dict[str, list[dict[str, str]]]:
    return {"projects": [item.to_payload() for item in filters]}
