"""
Notifier sink: fire-and-forget user-facing messages.

The host decides how to show them (toasts, a console, nothing). Services only
call ``notify``; a notifier must never raise back into the caller.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol, runtime_checkable

from estate_kernel.logging_config import get_logger

logger = get_logger("services.notifier")


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@runtime_checkable
class Notifier(Protocol):
    def notify(
        self,
        kind: NotificationKind,
        title: str,
        message: str,
        duration_ms: int | None = None,
    ) -> None:
        ...


_LEVELS = {
    NotificationKind.SUCCESS: logging.INFO,
    NotificationKind.INFO: logging.INFO,
    NotificationKind.WARNING: logging.WARNING,
    NotificationKind.ERROR: logging.ERROR,
}


class LoggingNotifier:
    """Default sink: every notification becomes one structured log line."""

    def notify(
        self,
        kind: NotificationKind,
        title: str,
        message: str,
        duration_ms: int | None = None,
    ) -> None:
        kind = NotificationKind(kind)
        logger.log(
            _LEVELS[kind],
            "notification",
            extra={"kind": kind.value, "title": title, "body": message, "duration_ms": duration_ms},
        )
