"""Encode aggregated stats and disk usage as typed ILP rows.

Every Measurement is converted to bytes before it becomes a column. A
Measurement whose unit is not part of its family contributes 0.0; the row is
still emitted.

Container row layout (``table`` from configuration):
    symbols: host, container, name
    columns: id (string), cpu, memory_percentage, block_io_in, block_io_out,
             net_io_in, net_io_out, memory_use, total_memory (double), pids (long)

Disk row layout (``disk_table`` from configuration):
    symbols: host, name, file_system, mount_point, type
    columns: available_space, read_bytes, write_bytes (long), percentage_use (double)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from container_stats.core.constants import KIBI
from container_stats.core.schemas import validate_identifier
from container_stats.monitoring.base import AggregatedStat, DiskStat, Measurement, Unit
from container_stats.publishing.sink import PublishError

_BYTE_SCALE: dict[Unit, int] = {
    Unit.B: 1,
    Unit.KB: KIBI,
    Unit.MB: KIBI**2,
    Unit.GB: KIBI**3,
}

_MEMORY_SCALE: dict[Unit, int] = {
    Unit.B: 1,
    Unit.KIB: KIBI,
    Unit.MIB: KIBI**2,
    Unit.GIB: KIBI**3,
}


@dataclass(frozen=True)
class Row:
    """One ILP row. Column value types select the wire type (str, float, int)."""

    table: str
    symbols: dict[str, str]
    columns: dict[str, str | float | int]
    timestamp: datetime


def to_bytes(measurement: Measurement) -> float:
    """Convert a byte-count family Measurement (B/KB/MB/GB) to bytes."""
    scale = _BYTE_SCALE.get(measurement.unit)
    if scale is None:
        return 0.0
    return measurement.value * scale


def memory_to_bytes(measurement: Measurement) -> float:
    """Convert a memory family Measurement (B/KiB/MiB/GiB) to bytes."""
    scale = _MEMORY_SCALE.get(measurement.unit)
    if scale is None:
        return 0.0
    return measurement.value * scale


def _checked(table: str) -> str:
    try:
        return validate_identifier(table)
    except ValueError as e:
        raise PublishError(str(e)) from e


def encode_container_rows(
    table: str,
    host: str,
    stats: Iterable[AggregatedStat],
    timestamp: datetime,
) -> list[Row]:
    """Build one row per container, all sharing ``timestamp``.

    Raises:
        PublishError: If ``table`` is not a valid table name
    """
    table = _checked(table)
    return [
        Row(
            table=table,
            symbols={
                "host": host,
                "container": stat.container_group,
                "name": stat.name,
            },
            columns={
                "id": stat.id,
                "cpu": float(stat.cpu_percent),
                "memory_percentage": float(stat.memory_percent),
                "pids": int(stat.pids),
                "block_io_in": to_bytes(stat.block_io.incoming),
                "block_io_out": to_bytes(stat.block_io.outgoing),
                "net_io_in": to_bytes(stat.net_io.incoming),
                "net_io_out": to_bytes(stat.net_io.outgoing),
                "memory_use": memory_to_bytes(stat.memory_usage),
                "total_memory": memory_to_bytes(stat.memory_limit),
            },
            timestamp=timestamp,
        )
        for stat in stats
    ]


def encode_disk_rows(
    table: str,
    host: str,
    disks: Iterable[DiskStat],
    timestamp: datetime,
) -> list[Row]:
    """Build one row per disk, all sharing ``timestamp``.

    Raises:
        PublishError: If ``table`` is not a valid table name
    """
    table = _checked(table)
    return [
        Row(
            table=table,
            symbols={
                "host": host,
                "name": disk.name,
                "file_system": disk.file_system,
                "mount_point": disk.mount_point,
                "type": disk.kind,
            },
            columns={
                "available_space": int(disk.available_space),
                "percentage_use": disk.available_percent,
                "read_bytes": int(disk.read_bytes),
                "write_bytes": int(disk.written_bytes),
            },
            timestamp=timestamp,
        )
        for disk in disks
    ]
