"""Current queue positions of the outstanding request."""

from __future__ import annotations

import logging
from typing import Any

from review_queue.api.models import QueuePosition
from review_queue.assign.ports import QueueApi

logger = logging.getLogger(__name__)


def parse_positions(payload: Any) -> list[QueuePosition]:
    """Positions sorted by rank; error objects and malformed payloads yield none."""

    if not isinstance(payload, list):
        return []
    try:
        positions = [QueuePosition.from_payload(item) for item in payload]
    except (KeyError, TypeError, ValueError):
        logger.warning("Malformed queue position payload; treating as no known positions")
        return []
    return sorted(positions, key=lambda item: item.position)


class QueuePositionView:
    """Holds the latest positions poll for rendering."""

    def __init__(self, *, client: QueueApi) -> None:
        self.client = client
        self.positions: list[QueuePosition] = []

    async def refresh(self, request_id: str) -> list[QueuePosition]:
        payload = await self.client.position(request_id)
        self.positions = parse_positions(payload)
        return self.positions
