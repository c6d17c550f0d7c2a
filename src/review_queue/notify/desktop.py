"""Local OS notifications."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys

logger = logging.getLogger(__name__)


def _applescript_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


class DesktopNotifier:
    """Fire-and-forget desktop notifications via the platform notifier binary."""

    def __init__(self, *, enabled: bool = True, platform: str | None = None) -> None:
        self.enabled = enabled
        self.platform = platform or sys.platform
        self._children: list[subprocess.Popen[bytes]] = []

    @property
    def running(self) -> int:
        """Notifier processes spawned and not reaped yet."""

        return len(self._children)

    def reap(self) -> None:
        """Collect notifier processes that have exited."""

        self._children = [child for child in self._children if child.poll() is None]

    def build_command(
        self,
        *,
        title: str,
        message: str,
        sound: str | None = None,
        link: str | None = None,
    ) -> list[str] | None:
        """Command line for the current platform, or None when unsupported."""

        if self.platform == "darwin":
            body = f"{message}\n{link}" if link else message
            script = (
                f'display notification "{_applescript_escape(body)}" '
                f'with title "{_applescript_escape(title)}"'
            )
            if sound:
                script += f' sound name "{_applescript_escape(sound)}"'
            return ["/usr/bin/osascript", "-e", script]
        if self.platform.startswith("linux"):
            binary = shutil.which("notify-send")
            if binary is None:
                return None
            body = f"{message}\n{link}" if link else message
            return [binary, "--app-name=review-queue", title, body]
        return None

    def notify(
        self,
        *,
        title: str,
        message: str,
        sound: str | None = None,
        link: str | None = None,
    ) -> None:
        if not self.enabled:
            return
        command = self.build_command(title=title, message=message, sound=sound, link=link)
        if command is None:
            logger.info("Notification (no desktop notifier available): %s - %s", title, message)
            return
        self.reap()
        try:
            child = subprocess.Popen(  # noqa: S603
                command,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            logger.warning("Desktop notification failed: %s", exc)
            return
        self._children.append(child)
