"""Console dashboard redrawn once per cycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from rich.console import Console, Group, RenderableType
from rich.table import Table
from rich.text import Text

from review_queue.api.models import QueuePosition
from review_queue.assign.state import LoopState

TOKEN_WARNING_DAYS = 5


@dataclass(slots=True)
class DashboardView:
    """Everything the dashboard shows, captured at render time."""

    state: LoopState
    now: datetime
    positions: list[QueuePosition] = field(default_factory=list)
    certified_projects: dict[str, str] = field(default_factory=dict)
    token_expiry: datetime | None = None
    tick_seconds: float = 30.0
    info_interval: int = 10
    feedbacks_enabled: bool = False


def describe_duration(delta: timedelta) -> str:
    """Coarse human wording for a duration ("a few seconds", "3 hours")."""

    seconds = abs(delta.total_seconds())
    if seconds < 45:
        return "a few seconds"
    if seconds < 90:
        return "a minute"
    minutes = round(seconds / 60)
    if minutes < 45:
        return f"{minutes} minutes"
    if minutes < 90:
        return "an hour"
    hours = round(seconds / 3600)
    if hours < 22:
        return f"{hours} hours"
    if hours < 36:
        return "a day"
    return f"{round(seconds / 86400)} days"


def describe_relative(target: datetime, now: datetime) -> str:
    delta = target - now
    wording = describe_duration(delta)
    return f"in {wording}" if delta.total_seconds() >= 0 else f"{wording} ago"


def build_positions_table(
    positions: list[QueuePosition],
    certified_projects: dict[str, str],
) -> Table:
    table = Table()
    table.add_column("pos", justify="center", width=5)
    table.add_column("id", justify="center", width=7)
    table.add_column("name", justify="left", width=40)
    table.add_column("lang", justify="center", width=7)
    for item in sorted(positions, key=lambda position: position.position):
        table.add_row(
            str(item.position),
            item.project_id,
            certified_projects.get(item.project_id, item.project_id),
            item.language,
        )
    return table


def build_dashboard(view: DashboardView) -> RenderableType:
    state = view.state
    parts: list[RenderableType] = []

    if state.last_error:
        parts.append(Text("The API is currently not responding, or very slow to respond.", "red"))
        parts.append(Text("The script will continue to run and try to get a connection.", "red"))
        parts.append(Text(f"Error Code: {state.last_error}", "red"))

    if view.token_expiry is None:
        parts.append(Text("Token expiry unknown", "yellow"))
    else:
        expiring = view.token_expiry - view.now < timedelta(days=TOKEN_WARNING_DAYS)
        parts.append(
            Text(
                f"Token expires {describe_relative(view.token_expiry, view.now)}",
                "red" if expiring else "green",
            ),
        )

    parts.append(
        Text.assemble(("Uptime: ", "green"), describe_duration(view.now - state.started_at), "\n"),
    )
    parts.append(Text("You are queued up for:\n", "blue"))

    if view.positions:
        parts.append(build_positions_table(view.positions, view.certified_projects))
        parts.append(Text(""))
    else:
        parts.append(
            Text.assemble(
                ("    You have ", "yellow"),
                str(state.assigned_count),
                (" (max) submissions assigned.\n", "yellow"),
            ),
        )

    if state.tick % view.info_interval == 0:
        if view.feedbacks_enabled:
            parts.append(Text("Checked for new feedbacks a few seconds ago...", "blue"))
        parts.append(Text("Checked the queue a few seconds ago...\n", "blue"))
    else:
        remaining = (view.info_interval - state.tick % view.info_interval) * view.tick_seconds
        when = describe_relative(view.now + timedelta(seconds=remaining), view.now)
        if view.feedbacks_enabled:
            parts.append(Text(f"Checking feedbacks {when}", "blue"))
        parts.append(Text(f"Updating queue information {when}\n", "blue"))

    started = state.started_at.astimezone().strftime("%A, %B %d %Y, %H:%M")
    parts.append(Text.assemble(("Currently assigned: ", "green"), str(state.assigned_count)))
    parts.append(
        Text.assemble(
            ("Total assigned: ", "green"),
            str(state.assigned_total),
            (f" since {started}\n", "green"),
        ),
    )
    parts.append(
        Text.assemble(
            ("Press ", "dim green"),
            "ctrl+c",
            (" to exit the queue cleanly by deleting the submission_request.", "dim green"),
        ),
    )
    parts.append(
        Text.assemble(
            ("Press ", "dim green"),
            "ESC",
            (" to suspend the script without deleting the submission_request.\n", "dim green"),
        ),
    )
    return Group(*parts)


class DashboardRenderer:
    """Clears the terminal and prints the dashboard."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render(self, view: DashboardView) -> None:
        self.console.clear()
        self.console.print(build_dashboard(view))
