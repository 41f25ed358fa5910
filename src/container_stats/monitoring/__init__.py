"""Monitoring module - container stats collection and reduction.

Pipeline pieces:
- measurement: unit-suffixed field parsers
- normalizer: raw record -> Snapshot
- aggregator: interval Snapshots -> AggregatedStats

Collaborators:
- DockerStatsSource: ``docker stats`` poller
- DiskInspector: host disk usage via psutil
"""

from __future__ import annotations

from container_stats.monitoring.aggregator import aggregate, reduce_pids, reduce_values
from container_stats.monitoring.base import (
    AggregatedStat,
    BaseStatsSource,
    DiskStat,
    IOPair,
    Measurement,
    Snapshot,
    Unit,
)
from container_stats.monitoring.disks import DiskInspector, get_device_kind
from container_stats.monitoring.docker_source import DockerStatsSource
from container_stats.monitoring.measurement import (
    MeasurementParseError,
    parse_byte_measurement,
    parse_io_pair,
    parse_memory_measurement,
    parse_memory_usage,
    parse_percentage,
    parse_pids,
)
from container_stats.monitoring.normalizer import normalize, normalize_all

__all__ = [
    "AggregatedStat",
    "BaseStatsSource",
    "DiskInspector",
    "DiskStat",
    "DockerStatsSource",
    "IOPair",
    "Measurement",
    "MeasurementParseError",
    "Snapshot",
    "Unit",
    "aggregate",
    "get_device_kind",
    "normalize",
    "normalize_all",
    "parse_byte_measurement",
    "parse_io_pair",
    "parse_memory_measurement",
    "parse_memory_usage",
    "parse_percentage",
    "parse_pids",
    "reduce_pids",
    "reduce_values",
]
