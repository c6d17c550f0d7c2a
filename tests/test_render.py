from __future__ import annotations

import io
from datetime import timedelta

import allure
import pytest
from fakes import NOW
from rich.console import Console

from review_queue.api.models import QueuePosition
from review_queue.assign.render import (
    DashboardRenderer,
    DashboardView,
    build_dashboard,
    describe_duration,
    describe_relative,
)
from review_queue.assign.state import LoopState

pytestmark = [
    allure.epic("Review Queue"),
    allure.feature("Dashboard"),
]


def _text(view: DashboardView) -> str:
    console = Console(record=True, width=120, file=io.StringIO(), color_system=None)
    console.print(build_dashboard(view))
    return console.export_text()


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(seconds=10), "a few seconds"),
        (timedelta(seconds=60), "a minute"),
        (timedelta(minutes=4), "4 minutes"),
        (timedelta(minutes=60), "an hour"),
        (timedelta(hours=5), "5 hours"),
        (timedelta(hours=30), "a day"),
        (timedelta(days=12), "12 days"),
    ],
)
def test_describe_duration(delta: timedelta, expected: str) -> None:
    assert describe_duration(delta) == expected


def test_describe_relative_direction() -> None:
    assert describe_relative(NOW + timedelta(hours=2), NOW) == "in 2 hours"
    assert describe_relative(NOW - timedelta(hours=2), NOW) == "2 hours ago"


def test_dashboard_lists_positions_in_rank_order() -> None:
    view = DashboardView(
        state=LoopState(started_at=NOW - timedelta(minutes=10), tick=0),
        now=NOW,
        positions=[
            QueuePosition(project_id="276", position=9, language="en-us"),
            QueuePosition(project_id="145", position=2, language="en-us"),
        ],
        certified_projects={"145": "Dog Breed Classifier", "276": "Boston Housing"},
        token_expiry=NOW + timedelta(days=20),
    )

    text = _text(view)

    assert text.index("Dog Breed Classifier") < text.index("Boston Housing")
    assert "Token expires in 20 days" in text
    assert "Uptime: 10 minutes" in text
    assert "Checked the queue a few seconds ago..." in text
    assert "ctrl+c" in text
    assert "ESC" in text


def test_dashboard_without_positions_shows_capacity_line() -> None:
    view = DashboardView(
        state=LoopState(started_at=NOW, assigned_count=2, assigned_total=3, tick=6),
        now=NOW,
        feedbacks_enabled=True,
    )

    text = _text(view)

    assert "You have 2 (max) submissions assigned." in text
    assert "Token expiry unknown" in text
    assert "Checking feedbacks in 2 minutes" in text
    assert "Updating queue information in 2 minutes" in text
    assert "Currently assigned: 2" in text
    assert "Total assigned: 3 since" in text


def test_dashboard_shows_last_error() -> None:
    view = DashboardView(
        state=LoopState(started_at=NOW, last_error="HTTP 503"),
        now=NOW,
    )

    text = _text(view)

    assert "The API is currently not responding" in text
    assert "Error Code: HTTP 503" in text


def test_renderer_prints_to_console() -> None:
    output = io.StringIO()
    renderer = DashboardRenderer(Console(file=output, width=120, color_system=None))

    renderer.render(DashboardView(state=LoopState(started_at=NOW), now=NOW))

    assert "You are queued up for:" in output.getvalue()
