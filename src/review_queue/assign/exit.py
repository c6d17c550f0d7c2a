"""Two ways out: delete the request, or leave it to expire."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from rich.console import Console

from review_queue.api.client import ApiError
from review_queue.assign.lifecycle import RequestLifecycleManager
from review_queue.assign.ports import QueueApi
from review_queue.assign.scheduler import ReconciliationScheduler

logger = logging.getLogger(__name__)


class ExitTrigger(str, Enum):
    """Termination events; the first one received decides the cleanup."""

    INTERRUPT = "interrupt"
    ESCAPE = "escape"


class ExitController:
    """Runs exactly one terminal action and reports the process exit status.

    ``INTERRUPT`` waits for an in-flight cycle, deletes the outstanding request
    (asking the server for it when its id is still unknown) and fails
    (status 1) when the delete cannot be confirmed. ``ESCAPE`` fires a refresh without waiting for
    it and exits successfully, leaving the request to expire on its own.
    """

    def __init__(
        self,
        *,
        client: QueueApi,
        lifecycle: RequestLifecycleManager,
        scheduler: ReconciliationScheduler,
        console: Console | None = None,
    ) -> None:
        self.client = client
        self.lifecycle = lifecycle
        self.scheduler = scheduler
        self.console = console or Console()
        self.trigger: ExitTrigger | None = None
        self._requested = asyncio.Event()
        self._task: asyncio.Task[int] | None = None

    def request_exit(self, trigger: ExitTrigger) -> bool:
        """Claim the exit path. Must be called on the event loop thread.

        Returns False when another trigger already won.
        """

        if self.trigger is not None:
            logger.info(
                "Ignoring %s: exit via %s already in progress",
                trigger.value,
                self.trigger.value,
            )
            return False
        self.trigger = trigger
        logger.info("Exit requested via %s", trigger.value)
        self.scheduler.request_stop()
        self._task = asyncio.get_running_loop().create_task(
            self._run(trigger),
            name=f"exit-{trigger.value}",
        )
        self._requested.set()
        return True

    async def wait(self) -> int:
        """Block until an exit was requested and its terminal action resolved."""

        await self._requested.wait()
        if self._task is None:
            raise RuntimeError("Exit was requested without a terminal action.")
        return await self._task

    async def _run(self, trigger: ExitTrigger) -> int:
        if trigger is ExitTrigger.INTERRUPT:
            return await self._terminate_and_clean()
        return self._suspend_without_clean()

    async def _terminate_and_clean(self) -> int:
        await self.scheduler.wait_cycle()
        request_id = self.lifecycle.request_id
        try:
            if request_id is None:
                # Never fetched, e.g. every cycle so far ran at capacity.
                current = await self.client.get()
                if current is None:
                    self.console.print(
                        "[green]No submission_request to delete, exited..[/green]",
                    )
                    return 0
                request_id = current.id
            await self.client.delete(request_id)
        except ApiError as error:
            logger.error("Delete of submission request %s failed: %s", request_id, error)
            self.console.print("[red]Was unable to exit cleanly.[/red]")
            self.console.print(f"[red]{error} (Error Code: {error.code})[/red]")
            return 1
        logger.info("Deleted submission request %s", request_id)
        self.console.print("[green]Successfully deleted request and exited..[/green]")
        return 0

    def _suspend_without_clean(self) -> int:
        request_id = self.lifecycle.request_id
        if request_id is not None:
            self.scheduler.spawn(self._best_effort_refresh(request_id), name="exit-refresh")
        self.console.print("[green]Exited without deleting the submission_request...[/green]")
        self.console.print("[green]The current submission_request will expire in an hour.[/green]")
        return 0

    async def _best_effort_refresh(self, request_id: str) -> None:
        try:
            await self.client.refresh(request_id)
        except ApiError as error:
            logger.info("Ignoring failed refresh on suspend: %s", error)


@contextmanager
def exit_signal_handlers(
    controller: ExitController,
    loop: asyncio.AbstractEventLoop,
) -> Iterator[None]:
    """Route SIGINT and SIGTERM to the terminate-and-clean exit path."""

    signums = [
        getattr(signal, name) for name in ("SIGINT", "SIGTERM") if hasattr(signal, name)
    ]
    on_loop: list[int] = []
    originals: dict[int, object] = {}

    def _handler(signum: int, _: object | None) -> None:
        loop.call_soon_threadsafe(controller.request_exit, ExitTrigger.INTERRUPT)

    for signum in signums:
        original = signal.getsignal(signum)
        try:
            loop.add_signal_handler(signum, controller.request_exit, ExitTrigger.INTERRUPT)
            on_loop.append(signum)
        except NotImplementedError:
            try:
                signal.signal(signum, _handler)
            except ValueError:
                # Signal handlers can only be installed in main thread.
                continue
        except (RuntimeError, ValueError):
            logger.debug("Cannot install handler for signal %s", signum)
            continue
        if original is not None:
            originals[signum] = original

    try:
        yield
    finally:
        for signum in on_loop:
            loop.remove_signal_handler(signum)
        for signum, original in originals.items():
            try:
                signal.signal(signum, original)  # type: ignore[arg-type]
            except ValueError:
                pass
