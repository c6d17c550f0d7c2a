from __future__ import annotations

import asyncio

import allure
from fakes import FakeQueueApi

from review_queue.api.models import QueuePosition
from review_queue.assign.positions import QueuePositionView, parse_positions

pytestmark = [
    allure.epic("Review Queue"),
    allure.feature("Queue Positions"),
]


def test_parse_positions_sorts_by_rank() -> None:
    positions = parse_positions(
        [
            {"project_id": 276, "position": 12, "language": "en-us"},
            {"project_id": "145", "position": 3, "language": "pt-br"},
        ],
    )

    assert positions == [
        QueuePosition(project_id="145", position=3, language="pt-br"),
        QueuePosition(project_id="276", position=12, language="en-us"),
    ]


def test_parse_positions_treats_error_object_as_no_positions() -> None:
    assert parse_positions({"error": "Submission request not found"}) == []
    assert parse_positions(None) == []


def test_parse_positions_treats_malformed_entries_as_no_positions() -> None:
    assert parse_positions([{"project_id": "145"}]) == []
    assert parse_positions([{"project_id": "145", "position": "first"}]) == []


def test_view_keeps_latest_poll() -> None:
    client = FakeQueueApi(positions=[{"project_id": "145", "position": 1, "language": "en-us"}])
    view = QueuePositionView(client=client)

    asyncio.run(view.refresh("42"))
    assert [item.position for item in view.positions] == [1]

    client.positions_payload = {"error": "gone"}
    asyncio.run(view.refresh("42"))
    assert view.positions == []
    assert client.calls == [("position", "42"), ("position", "42")]
