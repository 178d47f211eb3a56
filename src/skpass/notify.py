"""
Notification sinks -- where the store reports what it is doing.

The store never talks to a UI directly. It is handed a sink and
calls it for status lines, critical errors, reconciliation lifecycle
markers, decrypted output and finished background processes.
"""

from __future__ import annotations

import logging
from typing import Optional

from .models import ProcessResult

logger = logging.getLogger("skpass.notify")

DECRYPT_FAILED = "Could not decrypt"


class NotificationSink:
    """Receives store events. Every hook is a no-op by default."""

    def status(self, message: str, timeout_ms: int = 2000) -> None:
        """A transient status line, shown for roughly timeout_ms."""

    def critical(self, title: str, message: str) -> None:
        """A blocking error the user has to see."""

    def start_reencrypt(self) -> None:
        """A reconciliation pass has started."""

    def end_reencrypt(self) -> None:
        """A reconciliation pass has finished (or was aborted)."""

    def last_decrypt(self, text: str) -> None:
        """Most recent decrypted output (or the failure marker)."""

    def process_finished(self, result: ProcessResult) -> None:
        """A fire-and-forget process has exited."""


class LoggingSink(NotificationSink):
    """Sink that writes everything to the skpass logger."""

    def status(self, message: str, timeout_ms: int = 2000) -> None:
        logger.info("%s", message)

    def critical(self, title: str, message: str) -> None:
        logger.error("%s: %s", title, message)

    def start_reencrypt(self) -> None:
        logger.info("Re-encryption started")

    def end_reencrypt(self) -> None:
        logger.info("Re-encryption finished")

    def process_finished(self, result: ProcessResult) -> None:
        tag = result.tag.value if result.tag else result.program
        if result.ok:
            logger.info("%s finished", tag)
        else:
            logger.warning("%s failed (%d): %s", tag, result.exit_code, result.stderr.strip())


class RecordingSink(NotificationSink):
    """Sink that keeps every event in memory.

    Handy for callers that want to inspect what happened after the
    fact, e.g. the CLI deciding its exit status.
    """

    def __init__(self, forward: Optional[NotificationSink] = None):
        self.forward = forward
        self.statuses: list[str] = []
        self.criticals: list[tuple[str, str]] = []
        self.decrypts: list[str] = []
        self.results: list[ProcessResult] = []
        self.events: list[str] = []

    def status(self, message: str, timeout_ms: int = 2000) -> None:
        self.statuses.append(message)
        if self.forward:
            self.forward.status(message, timeout_ms)

    def critical(self, title: str, message: str) -> None:
        self.criticals.append((title, message))
        if self.forward:
            self.forward.critical(title, message)

    def start_reencrypt(self) -> None:
        self.events.append("start")
        if self.forward:
            self.forward.start_reencrypt()

    def end_reencrypt(self) -> None:
        self.events.append("end")
        if self.forward:
            self.forward.end_reencrypt()

    def last_decrypt(self, text: str) -> None:
        self.decrypts.append(text)
        if self.forward:
            self.forward.last_decrypt(text)

    def process_finished(self, result: ProcessResult) -> None:
        self.results.append(result)
        if self.forward:
            self.forward.process_finished(result)
