"""container-stats - docker container statistics collector for QuestDB."""

from __future__ import annotations

from container_stats.core.schemas import CollectorConfig, RawStats, ReductionMode
from container_stats.monitoring.aggregator import aggregate
from container_stats.monitoring.base import AggregatedStat, IOPair, Measurement, Snapshot, Unit
from container_stats.monitoring.normalizer import normalize

__version__ = "0.1.0"

__all__ = [
    "AggregatedStat",
    "CollectorConfig",
    "IOPair",
    "Measurement",
    "RawStats",
    "ReductionMode",
    "Snapshot",
    "Unit",
    "aggregate",
    "normalize",
    "__version__",
]
