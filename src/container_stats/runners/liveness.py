"""Liveness notifications for a service supervisor.

The collection loop reports its state through a LivenessNotifier and never
checks which supervisor (if any) is listening. States use the systemd
``sd_notify`` vocabulary (``READY=1``, ``WATCHDOG=1``, ``STATUS=...``,
``STOPPING=1``).
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod

import sdnotify

logger = logging.getLogger(__name__)


class LivenessNotifier(ABC):
    """Receiver of supervisor state notifications."""

    @abstractmethod
    def notify(self, state: str) -> None:
        """Send one notification (newline-separated assignments)."""
        pass


class NullNotifier(LivenessNotifier):
    """Notifier used when no supervisor is listening."""

    def notify(self, state: str) -> None:
        pass


class SystemdNotifier(LivenessNotifier):
    """Notifier writing to the systemd notification socket."""

    def __init__(self) -> None:
        self._notifier = sdnotify.SystemdNotifier()

    def notify(self, state: str) -> None:
        logger.debug(f"sd_notify {state!r}")
        self._notifier.notify(state)


def default_notifier() -> LivenessNotifier:
    """Pick the systemd notifier when ``NOTIFY_SOCKET`` is set, else a no-op one."""
    if os.environ.get("NOTIFY_SOCKET"):
        return SystemdNotifier()
    return NullNotifier()
