"""Runners module - collection loop and supervisor notifications."""

from __future__ import annotations

from container_stats.runners.collection_loop import (
    CollectionLoop,
    IntervalWindow,
    install_signal_handlers,
    next_boundary,
)
from container_stats.runners.liveness import (
    LivenessNotifier,
    NullNotifier,
    SystemdNotifier,
    default_notifier,
)

__all__ = [
    "CollectionLoop",
    "IntervalWindow",
    "LivenessNotifier",
    "NullNotifier",
    "SystemdNotifier",
    "default_notifier",
    "install_signal_handlers",
    "next_boundary",
]
