"""Poll loop and per-interval publishing worker.

The loop polls the stats source, normalizes each poll into the current
IntervalWindow and, once the window's boundary has passed, hands the window to
a worker thread that aggregates and publishes it. The loop keeps polling into
a fresh window meanwhile.

At most one publish is in flight: the previous worker is joined before the
next one starts. A window is never touched by the loop after hand-off.

Shutdown: a stop event is checked once per iteration. The in-flight worker is
joined before ``run`` returns; a hung flush therefore blocks shutdown.
"""

from __future__ import annotations

import logging
import math
import signal
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from container_stats.core.schemas import CollectorConfig
from container_stats.monitoring.aggregator import aggregate
from container_stats.monitoring.base import BaseStatsSource, Snapshot
from container_stats.monitoring.normalizer import normalize_all
from container_stats.publishing.publisher import StatsPublisher
from container_stats.publishing.sink import PublishError
from container_stats.runners.liveness import LivenessNotifier, NullNotifier

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_boundary(now: datetime, interval_minutes: int) -> datetime:
    """Round ``now`` up to the next multiple of the interval since the epoch.

    A time already on a boundary is returned unchanged.
    """
    step = interval_minutes * 60
    return datetime.fromtimestamp(math.ceil(now.timestamp() / step) * step, tz=timezone.utc)


@dataclass
class IntervalWindow:
    """Snapshots gathered for one publish interval ending at ``boundary``."""

    boundary: datetime
    snapshots: list[Snapshot] = field(default_factory=list)


class CollectionLoop:
    """Long-lived collector: poll, accumulate, hand off, publish.

    Example:
        ```python
        loop = CollectionLoop(config, DockerStatsSource(), StatsPublisher(config))
        stop = threading.Event()
        install_signal_handlers(stop)
        loop.run(stop)
        ```
    """

    def __init__(
        self,
        config: CollectorConfig,
        source: BaseStatsSource,
        publisher: StatsPublisher,
        notifier: LivenessNotifier | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._config = config
        self._source = source
        self._publisher = publisher
        self._notifier = notifier if notifier is not None else NullNotifier()
        self._clock = clock
        self._window = IntervalWindow(next_boundary(clock(), config.interval_minutes))
        self._worker: threading.Thread | None = None

    @property
    def window(self) -> IntervalWindow:
        """The window currently being filled."""
        return self._window

    @property
    def worker(self) -> threading.Thread | None:
        """The most recently started publishing worker."""
        return self._worker

    def run(self, stop_event: threading.Event) -> None:
        """Poll until ``stop_event`` is set, then wait for the last publish."""
        host = self._config.host
        self._notifier.notify("READY=1")
        logger.info(f"Publishing stats at {self._window.boundary.isoformat()} for {host}")

        try:
            while not stop_event.is_set():
                self.step()
                if self._config.poll_pause_seconds > 0:
                    stop_event.wait(self._config.poll_pause_seconds)
        finally:
            self._notifier.notify("STOPPING=1")
            self.shutdown()
        logger.info(f"Stopped collecting statistics for {host}")

    def step(self) -> None:
        """Run one poll and rotate the window if its boundary has passed.

        Raises:
            MeasurementParseError: On a malformed record when ``fail_fast`` is set
        """
        records = self._source.poll()
        self._window.snapshots.extend(normalize_all(records, fail_fast=self._config.fail_fast))
        logger.debug(
            f"Gathered {len(self._window.snapshots)} statistics for {self._config.host}"
        )
        self._notifier.notify(
            f"WATCHDOG=1\nSTATUS=Gathered statistics for {self._config.host}"
        )

        if self._clock() > self._window.boundary:
            self._rotate()

    def shutdown(self) -> None:
        """Wait for the in-flight publish, if any."""
        if self._worker is not None and self._worker.is_alive():
            logger.info("Waiting for in-flight publish to finish")
        self._join_worker()

    def _rotate(self) -> None:
        window = self._window
        self._window = IntervalWindow(next_boundary(self._clock(), self._config.interval_minutes))
        logger.info(
            f"Publishing stats at {self._window.boundary.isoformat()} for {self._config.host}"
        )

        if not window.snapshots:
            logger.info(f"No statistics gathered for {window.boundary.isoformat()}, nothing to publish")
            return

        self._join_worker()
        self._worker = threading.Thread(
            target=self._publish_window,
            args=(window,),
            name=f"publish-{window.boundary:%H%M}",
        )
        self._worker.start()

    def _join_worker(self) -> None:
        if self._worker is not None:
            self._worker.join()

    def _publish_window(self, window: IntervalWindow) -> None:
        logger.info(
            f"Aggregating {len(window.snapshots)} container statistics for {self._config.host}"
        )
        try:
            stats = aggregate(self._config.mode, window.snapshots)
            self._publisher.publish(stats, window.boundary)
        except PublishError:
            logger.exception(
                f"Failed to publish statistics for {window.boundary.isoformat()}; interval dropped"
            )
        except Exception:
            logger.exception(
                f"Unexpected error publishing {window.boundary.isoformat()}; interval dropped"
            )


def install_signal_handlers(stop_event: threading.Event) -> None:
    """Set ``stop_event`` on SIGTERM or SIGINT."""

    def _handler(signum: int, frame: object) -> None:
        logger.info(f"Received {signal.Signals(signum).name}, stopping after current poll")
        stop_event.set()

    signal.signal(signal.SIGTERM, _handler)
    signal.signal(signal.SIGINT, _handler)
