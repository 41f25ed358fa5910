"""Publishing module - ILP encoding and delivery to QuestDB."""

from __future__ import annotations

from container_stats.publishing.encoder import (
    Row,
    encode_container_rows,
    encode_disk_rows,
    memory_to_bytes,
    to_bytes,
)
from container_stats.publishing.publisher import StatsPublisher
from container_stats.publishing.sink import BaseSink, PublishError, QuestDBSink

__all__ = [
    "BaseSink",
    "PublishError",
    "QuestDBSink",
    "Row",
    "StatsPublisher",
    "encode_container_rows",
    "encode_disk_rows",
    "memory_to_bytes",
    "to_bytes",
]
