"""Reduce one interval's Snapshots to one AggregatedStat per container.

Snapshots are grouped by container name. Each group keeps one list per metric
and the first snapshot seen for the name, which supplies the id, the container
group, the memory limit and every unit tag of the result.

Reduction modes:
- AVERAGE: arithmetic mean of the float metrics; pids use integer division
  (``sum // count``), so ``[1, 2]`` averages to ``1``.
- MAXIMUM: largest value. Floats are sorted with NaN ordered below every
  number, so NaN only wins when a container reported nothing but NaN.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from container_stats.core.schemas import ReductionMode
from container_stats.monitoring.base import AggregatedStat, IOPair, Measurement, Snapshot

logger = logging.getLogger(__name__)


def _nan_first(value: float) -> tuple[bool, float]:
    """Sort key giving floats a total order with NaN below everything."""
    if math.isnan(value):
        return (False, 0.0)
    return (True, value)


def reduce_values(mode: ReductionMode, values: list[float]) -> float:
    """Reduce a non-empty list of floats."""
    if mode is ReductionMode.AVERAGE:
        return sum(values) / len(values)
    return sorted(values, key=_nan_first)[-1]


def reduce_pids(mode: ReductionMode, values: list[int]) -> int:
    """Reduce a non-empty list of process counts with integer arithmetic."""
    if mode is ReductionMode.AVERAGE:
        return sum(values) // len(values)
    return max(values)


@dataclass
class _ContainerSamples:
    """Per-metric sample lists for one container name."""

    first: Snapshot
    cpu_percent: list[float] = field(default_factory=list)
    memory_percent: list[float] = field(default_factory=list)
    memory_usage: list[float] = field(default_factory=list)
    block_in: list[float] = field(default_factory=list)
    block_out: list[float] = field(default_factory=list)
    net_in: list[float] = field(default_factory=list)
    net_out: list[float] = field(default_factory=list)
    pids: list[int] = field(default_factory=list)

    def add(self, snapshot: Snapshot) -> None:
        self.cpu_percent.append(snapshot.cpu_percent)
        self.memory_percent.append(snapshot.memory_percent)
        self.memory_usage.append(snapshot.memory_usage.value)
        self.block_in.append(snapshot.block_io.incoming.value)
        self.block_out.append(snapshot.block_io.outgoing.value)
        self.net_in.append(snapshot.net_io.incoming.value)
        self.net_out.append(snapshot.net_io.outgoing.value)
        self.pids.append(snapshot.pids)

    def reduce(self, mode: ReductionMode) -> AggregatedStat:
        first = self.first

        def measured(template: Measurement, values: list[float]) -> Measurement:
            return Measurement(reduce_values(mode, values), template.unit)

        return AggregatedStat(
            id=first.id,
            container_group=first.container_group,
            name=first.name,
            cpu_percent=reduce_values(mode, self.cpu_percent),
            memory_percent=reduce_values(mode, self.memory_percent),
            memory_usage=measured(first.memory_usage, self.memory_usage),
            memory_limit=first.memory_limit,
            block_io=IOPair(
                incoming=measured(first.block_io.incoming, self.block_in),
                outgoing=measured(first.block_io.outgoing, self.block_out),
            ),
            net_io=IOPair(
                incoming=measured(first.net_io.incoming, self.net_in),
                outgoing=measured(first.net_io.outgoing, self.net_out),
            ),
            pids=reduce_pids(mode, self.pids),
            sample_count=len(self.pids),
        )


def aggregate(mode: ReductionMode, snapshots: Iterable[Snapshot]) -> list[AggregatedStat]:
    """Group snapshots by container name and reduce each group.

    Args:
        mode: Reduction policy
        snapshots: Every snapshot gathered during one interval

    Returns:
        One AggregatedStat per distinct container name (empty for empty input).
        Output order is not part of the contract.
    """
    groups: dict[str, _ContainerSamples] = {}
    total = 0
    for snapshot in snapshots:
        group = groups.get(snapshot.name)
        if group is None:
            group = groups[snapshot.name] = _ContainerSamples(first=snapshot)
        group.add(snapshot)
        total += 1

    logger.debug(f"Aggregating {total} snapshots for {len(groups)} containers ({mode.value})")
    return [group.reduce(mode) for group in groups.values()]
