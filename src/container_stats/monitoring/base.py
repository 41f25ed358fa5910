"""Typed measurement model shared by the collection pipeline.

The normalizer produces Snapshots, the aggregator reduces them to
AggregatedStats, and the publisher encodes those. Stats sources implement
BaseStatsSource so the collection loop can be driven by docker or by a fake in
tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from container_stats.core.schemas import RawStats


class Unit(str, Enum):
    """Unit tag attached to a Measurement."""

    B = "B"
    KB = "KB"
    MB = "MB"
    GB = "GB"
    KIB = "KiB"
    MIB = "MiB"
    GIB = "GiB"
    BYTES = "bytes"  # Zero-valued memory token ("0B" or too short)
    NONE = ""  # Unknown/unparsed

    def __str__(self) -> str:
        return self.value


# Byte-count family as printed for block and network I/O (docker writes "kB").
BYTE_UNITS = (Unit.B, Unit.KB, Unit.MB, Unit.GB)
# Binary family as printed for memory usage.
MEMORY_UNITS = (Unit.B, Unit.KIB, Unit.MIB, Unit.GIB)


@dataclass(frozen=True)
class Measurement:
    """A numeric value with its unit tag.

    An empty Measurement (``Measurement()``) has value 0 and no unit.
    """

    value: float = 0.0
    unit: Unit = Unit.NONE

    def __str__(self) -> str:
        return f"{self.value}{self.unit.value}"

    @property
    def is_empty(self) -> bool:
        return self.unit is Unit.NONE


@dataclass(frozen=True)
class IOPair:
    """One bidirectional counter (block I/O or network I/O) from a single poll."""

    incoming: Measurement = field(default_factory=Measurement)
    outgoing: Measurement = field(default_factory=Measurement)


@dataclass
class Snapshot:
    """One container's normalized metrics from a single poll.

    ``name`` is the aggregation key; ids can change within a window when a
    container is re-created under the same name.
    """

    id: str
    container_group: str
    name: str
    cpu_percent: float = 0.0
    memory_percent: float = 0.0
    memory_usage: Measurement = field(default_factory=Measurement)
    memory_limit: Measurement = field(default_factory=Measurement)
    block_io: IOPair = field(default_factory=IOPair)
    net_io: IOPair = field(default_factory=IOPair)
    pids: int = 0


@dataclass
class AggregatedStat:
    """One container's reduced metrics for one publish interval.

    Same shape as Snapshot. Identity fields, memory limit and every unit tag
    come from the first snapshot seen for the container in the interval.
    """

    id: str
    container_group: str
    name: str
    cpu_percent: float = 0.0
    memory_percent: float = 0.0
    memory_usage: Measurement = field(default_factory=Measurement)
    memory_limit: Measurement = field(default_factory=Measurement)
    block_io: IOPair = field(default_factory=IOPair)
    net_io: IOPair = field(default_factory=IOPair)
    pids: int = 0
    sample_count: int = 0


@dataclass(frozen=True)
class DiskStat:
    """Usage counters for one host disk at publish time."""

    name: str
    file_system: str
    mount_point: str
    kind: str
    total_space: int = 0
    available_space: int = 0
    read_bytes: int = 0
    written_bytes: int = 0

    @property
    def available_percent(self) -> float:
        """Available space as a percentage of total space (0.0 for an empty device)."""
        if self.total_space <= 0:
            return 0.0
        return self.available_space / self.total_space * 100.0


class BaseStatsSource(ABC):
    """Abstract base class for container stats sources.

    Implementations:
    - DockerStatsSource: ``docker stats --no-stream`` output
    """

    @abstractmethod
    def poll(self) -> list[RawStats]:
        """Take one status report and return one raw record per container line."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this source can run on the current system.

        Returns:
            True if the source's prerequisites are met
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this source."""
        pass
