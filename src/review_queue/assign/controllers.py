"""Controller for the assign CLI command."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from rich.console import Console

from review_queue.api.client import ReviewApiClient
from review_queue.assign.exit import ExitController, ExitTrigger, exit_signal_handlers
from review_queue.assign.keyboard import escape_key_listener
from review_queue.assign.lifecycle import RequestLifecycleManager, build_filters
from review_queue.assign.positions import QueuePositionView
from review_queue.assign.render import DashboardRenderer, DashboardView
from review_queue.assign.scheduler import ReconciliationScheduler
from review_queue.assign.state import LoopState, utc_now
from review_queue.assign.trackers import AssignmentTracker, FeedbackTracker
from review_queue.config import AssignConfig, Settings, build_assign_config
from review_queue.logging_setup import configure_logging
from review_queue.notify.desktop import DesktopNotifier
from review_queue.notify.push import PushbulletClient
from review_queue.notify.sink import NotificationSink

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AssignCommand:
    """CLI input for the assign loop."""

    project_ids: tuple[str, ...]
    push_access_token: str | None = None
    feedbacks: bool = False
    config_path: Path | None = None


class AssignSession:
    """Composition root: wires one assign session and runs it to exit."""

    def __init__(
        self,
        config: AssignConfig,
        *,
        client: ReviewApiClient | None = None,
        push: PushbulletClient | None = None,
        console: Console | None = None,
    ) -> None:
        settings = config.settings
        self.config = config
        self.console = console or Console()
        self.client = client or ReviewApiClient(
            token=settings.token,
            base_url=settings.api.base_url,
            timeout_seconds=settings.api.request_timeout_seconds,
            retries=settings.api.transport_retries,
        )
        if push is None and config.push_access_token:
            push = PushbulletClient(
                config.push_access_token,
                base_url=settings.api.pushbullet_url,
            )
        self.push = push
        self.state = LoopState()
        self.desktop = DesktopNotifier(enabled=settings.desktop_notifications)
        notifier = NotificationSink(
            desktop=self.desktop,
            review_site_url=settings.api.review_site_url,
            push=self.push,
        )
        self.lifecycle = RequestLifecycleManager(
            client=self.client,
            refresh_window=timedelta(seconds=settings.loop.refresh_window_seconds),
        )
        self.positions = QueuePositionView(client=self.client)
        self.scheduler = ReconciliationScheduler(
            client=self.client,
            lifecycle=self.lifecycle,
            assignments=AssignmentTracker(client=self.client, notifier=notifier),
            positions=self.positions,
            feedbacks=(
                FeedbackTracker(client=self.client, notifier=notifier)
                if config.feedbacks_enabled
                else None
            ),
            desired_filters=build_filters(settings.languages, config.project_ids),
            state=self.state,
            tick_seconds=settings.loop.tick_seconds,
            info_interval=settings.loop.info_interval,
            capacity=settings.loop.capacity,
        )
        self.exit_controller = ExitController(
            client=self.client,
            lifecycle=self.lifecycle,
            scheduler=self.scheduler,
            console=self.console,
        )
        self.renderer = DashboardRenderer(self.console)

    def render(self) -> None:
        settings = self.config.settings
        self.renderer.render(
            DashboardView(
                state=self.state,
                now=utc_now(),
                positions=list(self.positions.positions),
                certified_projects=settings.certified_projects,
                token_expiry=settings.token_expiry,
                tick_seconds=settings.loop.tick_seconds,
                info_interval=settings.loop.info_interval,
                feedbacks_enabled=self.config.feedbacks_enabled,
            ),
        )

    async def run(self) -> int:
        """Validate the push target, then loop until an exit trigger resolves."""

        try:
            if self.push is not None:
                await self.push.ensure_devices()
            return await self._run_until_exit()
        finally:
            await self.scheduler.drain(timeout=self.config.settings.loop.exit_grace_seconds)
            await self.client.aclose()
            if self.push is not None:
                await self.push.aclose()
            self.desktop.reap()

    async def _run_until_exit(self) -> int:
        loop = asyncio.get_running_loop()
        logger.info(
            "Starting assign loop for projects %s in %s",
            ",".join(self.config.project_ids),
            ",".join(self.config.settings.languages),
        )
        with (
            exit_signal_handlers(self.exit_controller, loop),
            escape_key_listener(
                loop,
                lambda: self.exit_controller.request_exit(ExitTrigger.ESCAPE),
            ),
        ):
            self.render()
            loop_task = asyncio.create_task(
                self.scheduler.run_loop(render=self.render),
                name="reconciliation-loop",
            )
            exit_task = asyncio.create_task(self.exit_controller.wait(), name="exit-wait")
            try:
                await asyncio.wait({loop_task, exit_task}, return_when=asyncio.FIRST_COMPLETED)
                # A requested stop ends the loop before the terminal action resolves.
                if exit_task.done() or self.exit_controller.trigger is not None:
                    return await exit_task
                loop_task.result()
                return 0
            finally:
                for task in (loop_task, exit_task):
                    if not task.done():
                        task.cancel()
                        with contextlib.suppress(asyncio.CancelledError):
                            await task


class AssignCliController:
    """Loads configuration and runs the assign session."""

    def assign(self, command: AssignCommand) -> int:
        settings = Settings.from_env(config_path=command.config_path)
        config = build_assign_config(
            settings,
            requested_ids=command.project_ids,
            push_access_token=command.push_access_token,
            feedbacks_enabled=command.feedbacks,
        )
        configure_logging(log_path=settings.log_path, level=settings.log_level)
        return asyncio.run(AssignSession(config).run())
