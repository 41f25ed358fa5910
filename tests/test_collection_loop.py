"""Tests for the poll loop, window hand-off and publishing worker."""

import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from container_stats.core.schemas import CollectorConfig, RawStats
from container_stats.monitoring.base import BaseStatsSource
from container_stats.monitoring.measurement import MeasurementParseError
from container_stats.publishing.publisher import StatsPublisher
from container_stats.publishing.sink import BaseSink, PublishError
from container_stats.runners.collection_loop import CollectionLoop, next_boundary
from container_stats.runners.liveness import LivenessNotifier

START = datetime(2026, 10, 19, 12, 1, tzinfo=timezone.utc)


def raw(name: str, cpu: str = "10%", pids: str = "1") -> RawStats:
    return RawStats.model_validate(
        {
            "ID": f"{name}-id",
            "Container": name,
            "Name": name,
            "CPUPerc": cpu,
            "MemPerc": "1%",
            "MemUsage": "10MiB / 1GiB",
            "BlockIO": "0B / 0B",
            "NetIO": "1kB / 2kB",
            "PIDs": pids,
        }
    )


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class ScriptedSource(BaseStatsSource):
    """Source returning one scripted batch per poll, then nothing."""

    def __init__(self, batches) -> None:
        self._batches = list(batches)

    @property
    def name(self) -> str:
        return "scripted"

    def is_available(self) -> bool:
        return True

    def poll(self):
        return self._batches.pop(0) if self._batches else []


class RecordingSink(BaseSink):
    """Sink recording rows and the start/end order of every write."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.writes = []
        self.events = []
        self._lock = threading.Lock()

    def write(self, rows):
        stamp = rows[0].timestamp
        with self._lock:
            self.events.append(("start", stamp))
        time.sleep(self.delay)
        with self._lock:
            self.writes.append(list(rows))
            self.events.append(("end", stamp))


class RecordingNotifier(LivenessNotifier):
    def __init__(self) -> None:
        self.states = []

    def notify(self, state: str) -> None:
        self.states.append(state)


def make_loop(batches, sink=None, clock=None, notifier=None, **config):
    config = CollectorConfig(host="docker-01", interval_minutes=5, **config)
    sink = sink if sink is not None else RecordingSink()
    clock = clock if clock is not None else FakeClock(START)
    publisher = StatsPublisher(config, sink=sink, disk_inspector=MagicMock())
    loop = CollectionLoop(
        config, ScriptedSource(batches), publisher, notifier=notifier, clock=clock
    )
    return loop, sink, clock


class TestNextBoundary:
    """Tests for interval boundary rounding."""

    def test_rounds_up(self):
        now = datetime(2026, 10, 19, 12, 3, 10, tzinfo=timezone.utc)
        assert next_boundary(now, 5) == datetime(2026, 10, 19, 12, 5, tzinfo=timezone.utc)

    def test_on_boundary_is_unchanged(self):
        now = datetime(2026, 10, 19, 12, 15, tzinfo=timezone.utc)
        assert next_boundary(now, 5) == now

    def test_fifteen_minutes(self):
        now = datetime(2026, 10, 19, 12, 0, 1, tzinfo=timezone.utc)
        assert next_boundary(now, 15) == datetime(2026, 10, 19, 12, 15, tzinfo=timezone.utc)


class TestCollectionLoop:
    """Tests for CollectionLoop."""

    def test_end_to_end_average(self):
        """Two polls of "db" inside one interval publish their mean CPU."""
        loop, sink, clock = make_loop([[raw("db", "12.5%")], [raw("db", "17.5%")], []])
        boundary = loop.window.boundary
        assert boundary == datetime(2026, 10, 19, 12, 5, tzinfo=timezone.utc)

        clock.now = START + timedelta(minutes=1)
        loop.step()
        clock.now = START + timedelta(minutes=3)
        loop.step()
        clock.now = START + timedelta(minutes=5)
        loop.step()
        loop.shutdown()

        assert len(sink.writes) == 1
        (row,) = sink.writes[0]
        assert row.symbols["name"] == "db"
        assert row.columns["cpu"] == 15.0
        assert row.timestamp == boundary
        assert loop.window.boundary == datetime(2026, 10, 19, 12, 10, tzinfo=timezone.utc)
        assert loop.window.snapshots == []

    def test_no_publish_before_boundary(self):
        loop, sink, clock = make_loop([[raw("web")], [raw("web")]])

        loop.step()
        clock.now = START + timedelta(minutes=2)
        loop.step()
        loop.shutdown()

        assert sink.writes == []
        assert len(loop.window.snapshots) == 2

    def test_empty_window_advances_without_publish(self):
        loop, sink, clock = make_loop([])

        clock.now = START + timedelta(minutes=6)
        loop.step()
        loop.shutdown()

        assert sink.writes == []
        assert loop.worker is None
        assert loop.window.boundary == datetime(2026, 10, 19, 12, 10, tzinfo=timezone.utc)

    def test_window_is_handed_off(self):
        loop, sink, clock = make_loop([[raw("web")], [raw("web")]])

        loop.step()
        first_window = loop.window
        clock.now = START + timedelta(minutes=5)
        loop.step()

        assert loop.window is not first_window
        assert loop.window.snapshots == []
        loop.shutdown()
        assert len(sink.writes[0]) == 1

    def test_at_most_one_publish_in_flight(self):
        """Publishes of consecutive intervals never interleave."""
        sink = RecordingSink(delay=0.05)
        batches = [[raw("web"), raw("db")] for _ in range(4)]
        loop, sink, clock = make_loop(batches, sink=sink)

        for minutes in (5, 10, 15, 20):
            clock.now = START + timedelta(minutes=minutes)
            loop.step()
        loop.shutdown()

        assert len(sink.writes) == 4
        kinds = [kind for kind, _ in sink.events]
        assert kinds == ["start", "end"] * 4
        stamps = [stamp for _, stamp in sink.events]
        assert stamps[0::2] == stamps[1::2]
        assert stamps[0::2] == sorted(stamps[0::2])

    def test_publish_failure_is_logged_and_loop_continues(self, caplog):
        sink = MagicMock(spec=BaseSink)
        sink.write.side_effect = PublishError("connection refused")
        loop, _, clock = make_loop([[raw("web")], [raw("web")]], sink=sink)

        with caplog.at_level(logging.ERROR):
            clock.now = START + timedelta(minutes=5)
            loop.step()
            loop.shutdown()

        assert "interval dropped" in caplog.text
        clock.now = START + timedelta(minutes=10)
        loop.step()
        loop.shutdown()
        assert sink.write.call_count == 2

    def test_unexpected_worker_error_is_logged(self, caplog):
        """Errors other than PublishError still reach the configured logging."""
        config = CollectorConfig(host="h", disks=["/dev/sda1"])
        inspector = MagicMock()
        inspector.collect.side_effect = RuntimeError("disk counters unavailable")
        publisher = StatsPublisher(config, sink=RecordingSink(), disk_inspector=inspector)
        clock = FakeClock(START)
        loop = CollectionLoop(config, ScriptedSource([[raw("web")]]), publisher, clock=clock)

        with caplog.at_level(logging.ERROR):
            clock.now = START + timedelta(minutes=5)
            loop.step()
            loop.shutdown()

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "interval dropped" in errors[0].getMessage()
        assert "disk counters unavailable" in caplog.text
        assert errors[0].exc_info is not None

    def test_rejected_record_is_dropped(self):
        loop, _, _ = make_loop([[raw("web"), raw("db", cpu="--")]])
        loop.step()
        assert [s.name for s in loop.window.snapshots] == ["web"]

    def test_fail_fast_aborts_poll(self):
        loop, _, _ = make_loop([[raw("db", pids="x")]], fail_fast=True)
        with pytest.raises(MeasurementParseError):
            loop.step()

    def test_run_until_stopped(self):
        stop_event = threading.Event()
        notifier = RecordingNotifier()
        clock = FakeClock(START)

        class StoppingSource(ScriptedSource):
            def poll(self):
                clock.now += timedelta(minutes=3)
                if clock.now > START + timedelta(minutes=5):
                    stop_event.set()
                return [raw("web")]

        config = CollectorConfig(host="docker-01")
        sink = RecordingSink()
        loop = CollectionLoop(
            config,
            StoppingSource([]),
            StatsPublisher(config, sink=sink, disk_inspector=MagicMock()),
            notifier=notifier,
            clock=clock,
        )

        loop.run(stop_event)

        assert notifier.states[0] == "READY=1"
        assert notifier.states[-1] == "STOPPING=1"
        assert any(s.startswith("WATCHDOG=1") for s in notifier.states)
        assert len(sink.writes) == 1
        assert sink.writes[0][0].columns["cpu"] == 10.0
        assert not loop.worker.is_alive()
