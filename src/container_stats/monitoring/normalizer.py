"""Turn raw status records into typed Snapshots.

CPU%, memory% and the process count are critical: a record where any of them
fails to parse is rejected. I/O and memory usage are often malformed for paused
or stopped containers, so their failures degrade to zero Measurements and the
record is kept.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from container_stats.core.schemas import RawStats
from container_stats.monitoring.base import IOPair, Measurement, Snapshot
from container_stats.monitoring.measurement import (
    MeasurementParseError,
    parse_io_pair,
    parse_memory_usage,
    parse_percentage,
    parse_pids,
)

logger = logging.getLogger(__name__)


def _soft_io_pair(raw: RawStats, token: str, field: str) -> IOPair:
    try:
        return parse_io_pair(token, field)
    except MeasurementParseError as e:
        logger.warning(f"{raw.name}: {e}; using zero {field}")
        return IOPair()


def _soft_memory_usage(raw: RawStats) -> tuple[Measurement, Measurement]:
    try:
        return parse_memory_usage(raw.memory_usage)
    except MeasurementParseError as e:
        logger.warning(f"{raw.name}: {e}; using zero MemUsage")
        return Measurement(), Measurement()


def normalize(raw: RawStats) -> Snapshot:
    """Build a Snapshot from one raw record.

    Args:
        raw: Decoded status line

    Returns:
        Fully typed Snapshot

    Raises:
        MeasurementParseError: If CPUPerc, MemPerc or PIDs is malformed
    """
    cpu_percent = parse_percentage(raw.cpu_percent, "CPUPerc")
    memory_percent = parse_percentage(raw.memory_percent, "MemPerc")
    pids = parse_pids(raw.pids)
    memory_usage, memory_limit = _soft_memory_usage(raw)

    return Snapshot(
        id=raw.id,
        container_group=raw.container,
        name=raw.name,
        cpu_percent=cpu_percent,
        memory_percent=memory_percent,
        memory_usage=memory_usage,
        memory_limit=memory_limit,
        block_io=_soft_io_pair(raw, raw.block_io, "BlockIO"),
        net_io=_soft_io_pair(raw, raw.net_io, "NetIO"),
        pids=pids,
    )


def normalize_all(records: Iterable[RawStats], fail_fast: bool = False) -> list[Snapshot]:
    """Normalize one poll's records.

    Args:
        records: Raw records from a single poll
        fail_fast: Propagate the first rejected record instead of dropping it

    Returns:
        Snapshots for every accepted record, in input order

    Raises:
        MeasurementParseError: Only when ``fail_fast`` is set
    """
    snapshots: list[Snapshot] = []
    for raw in records:
        try:
            snapshots.append(normalize(raw))
        except MeasurementParseError as e:
            if fail_fast:
                raise
            logger.error(f"Dropping record for container {raw.name!r} ({raw.id}): {e}")
    return snapshots
