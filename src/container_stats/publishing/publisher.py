"""Publish one interval's aggregates (and optional disk usage) to the sink."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from container_stats.core.schemas import CollectorConfig
from container_stats.monitoring.base import AggregatedStat
from container_stats.monitoring.disks import DiskInspector
from container_stats.publishing.encoder import encode_container_rows, encode_disk_rows
from container_stats.publishing.sink import BaseSink, QuestDBSink

logger = logging.getLogger(__name__)


class StatsPublisher:
    """Encode and flush one interval's rows.

    Container rows come first, then one row per configured disk that is
    present. Every row carries the interval's timestamp and everything goes out
    in a single sink write.
    """

    def __init__(
        self,
        config: CollectorConfig,
        sink: BaseSink | None = None,
        disk_inspector: DiskInspector | None = None,
    ) -> None:
        self._config = config
        self._sink = sink if sink is not None else QuestDBSink(config.ingress_conf)
        self._disk_inspector = disk_inspector if disk_inspector is not None else DiskInspector()

    def publish(self, stats: Sequence[AggregatedStat], timestamp: datetime) -> int:
        """Publish the rows for one interval.

        Args:
            stats: Aggregated container stats
            timestamp: Interval boundary shared by every row

        Returns:
            Number of rows written

        Raises:
            PublishError: If encoding or delivery fails
        """
        config = self._config
        logger.info(
            f"Publishing {len(stats)} container statistics for {config.host} at {timestamp.isoformat()}"
        )

        rows = encode_container_rows(config.table, config.host, stats, timestamp)
        if config.disks:
            disks = self._disk_inspector.collect(config.disks)
            rows.extend(encode_disk_rows(config.disk_table, config.host, disks, timestamp))
            for disk in disks:
                logger.info(f"Added disk statistics for {disk.name} on {config.host}")

        self._sink.write(rows)
        logger.info(f"Published {len(rows)} rows for {config.host}")
        return len(rows)
