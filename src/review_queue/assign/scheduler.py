"""Tick-driven reconciliation loop."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from enum import Enum
from typing import Any

from review_queue.api.client import ApiError
from review_queue.api.models import ProjectFilter
from review_queue.assign.lifecycle import LifecycleAction, RequestLifecycleManager
from review_queue.assign.ports import QueueApi
from review_queue.assign.positions import QueuePositionView
from review_queue.assign.state import LoopState
from review_queue.assign.trackers import AssignmentTracker, FeedbackTracker

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 30.0
DEFAULT_INFO_INTERVAL = 10
DEFAULT_CAPACITY = 2


class SchedulerPhase(str, Enum):
    """Where the loop currently is within a cycle."""

    IDLE = "idle"
    COUNTING = "counting"
    UNDER_CAPACITY = "under_capacity"
    AT_CAPACITY = "at_capacity"
    SLEEPING = "sleeping"


@dataclass(slots=True)
class CycleOutcome:
    """What a single cycle did, for logging and tests."""

    assigned_count: int | None = None
    assignment_check_spawned: bool = False
    action: LifecycleAction | None = None
    positions_refreshed: bool = False
    feedback_checked: bool = False
    error: str | None = None


class ReconciliationScheduler:
    """Sequences the lifecycle manager, trackers and position view once per tick.

    Cycles never overlap. The assignment check is the only work spawned in
    the background; its completion is not awaited by the cycle, so tests and
    callers that need its result must ``drain()`` first. A failed remote call
    ends the cycle early and the next tick is the retry.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        client: QueueApi,
        lifecycle: RequestLifecycleManager,
        assignments: AssignmentTracker,
        positions: QueuePositionView,
        desired_filters: tuple[ProjectFilter, ...],
        state: LoopState,
        feedbacks: FeedbackTracker | None = None,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
        info_interval: int = DEFAULT_INFO_INTERVAL,
        capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self.client = client
        self.lifecycle = lifecycle
        self.assignments = assignments
        self.positions = positions
        self.feedbacks = feedbacks
        self.desired_filters = desired_filters
        self.state = state
        self.tick_seconds = tick_seconds
        self.info_interval = info_interval
        self.capacity = capacity
        self.phase = SchedulerPhase.IDLE
        self._stop = asyncio.Event()
        self._background: set[asyncio.Task[Any]] = set()
        self._cycle_idle = asyncio.Event()
        self._cycle_idle.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def request_stop(self) -> None:
        """Finish the current cycle, if any, and start no new one."""

        self._stop.set()

    async def wait_cycle(self) -> None:
        """Return once no cycle is in flight."""

        await self._cycle_idle.wait()

    async def run_cycle(self) -> CycleOutcome:
        self._cycle_idle.clear()
        try:
            return await self._run_cycle()
        finally:
            self._cycle_idle.set()

    async def _run_cycle(self) -> CycleOutcome:
        outcome = CycleOutcome()
        state = self.state
        try:
            self.phase = SchedulerPhase.COUNTING
            assigned_count = await self.client.count()
            outcome.assigned_count = assigned_count
            increased = assigned_count > state.assigned_count
            state.assigned_count = assigned_count
            if increased:
                self.spawn(self.assignments.check(state), name="assignment-check")
                outcome.assignment_check_spawned = True

            if assigned_count >= self.capacity:
                self.phase = SchedulerPhase.AT_CAPACITY
                return outcome

            self.phase = SchedulerPhase.UNDER_CAPACITY
            current = await self.client.get()
            result = await self.lifecycle.reconcile(current, self.desired_filters, state=state)
            outcome.action = result.action
            if result.action.changed_request:
                await self.positions.refresh(result.request.id)
                outcome.positions_refreshed = True
            elif state.tick % self.info_interval == 0:
                await self.positions.refresh(result.request.id)
                outcome.positions_refreshed = True
                if self.feedbacks is not None:
                    await self.feedbacks.check()
                    outcome.feedback_checked = True
        except ApiError as error:
            state.last_error = error.code
            outcome.error = error.code
            logger.warning("Cycle at tick %d failed: %s (%s)", state.tick, error, error.code)
        return outcome

    async def run_loop(
        self,
        *,
        render: Callable[[], None] | None = None,
        max_cycles: int | None = None,
    ) -> int:
        """Run cycles at a fixed interval until stopped; returns the number of cycles."""

        cycles = 0
        while not self.stop_requested:
            await self.run_cycle()
            cycles += 1
            # The exit path owns the terminal once a stop was requested.
            if self.stop_requested:
                break
            if render is not None:
                render()
            self.state.last_error = None
            if max_cycles is not None and cycles >= max_cycles:
                break

            self.phase = SchedulerPhase.SLEEPING
            await self._sleep_with_stop(self.tick_seconds)
            if self.stop_requested:
                break
            self.state.advance_tick()
        self.phase = SchedulerPhase.IDLE
        return cycles

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        """Start background work whose result only matters for its side effects."""

        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding background work (bounded by ``timeout``)."""

        pending = set(self._background)
        if pending:
            await asyncio.wait(pending, timeout=timeout)

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            return
        if isinstance(error, ApiError):
            self.state.last_error = error.code
            logger.warning("Background %s failed: %s (%s)", task.get_name(), error, error.code)
            return
        logger.error("Background %s crashed", task.get_name(), exc_info=error)

    async def _sleep_with_stop(self, seconds: float) -> None:
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
