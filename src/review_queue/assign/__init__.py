"""Keep one submission request alive and reconcile it every tick."""

from review_queue.assign.exit import ExitController, ExitTrigger
from review_queue.assign.lifecycle import (
    LifecycleAction,
    ReconcileResult,
    RequestLifecycleManager,
    build_filters,
)
from review_queue.assign.positions import QueuePositionView
from review_queue.assign.scheduler import CycleOutcome, ReconciliationScheduler, SchedulerPhase
from review_queue.assign.state import LoopState
from review_queue.assign.trackers import AssignmentTracker, FeedbackTracker

__all__ = [
    "AssignmentTracker",
    "CycleOutcome",
    "ExitController",
    "ExitTrigger",
    "FeedbackTracker",
    "LifecycleAction",
    "LoopState",
    "QueuePositionView",
    "ReconcileResult",
    "ReconciliationScheduler",
    "RequestLifecycleManager",
    "SchedulerPhase",
    "build_filters",
]
