"""Row sinks.

QuestDBSink sends rows through the QuestDB ILP client: one sender and one fresh
buffer per write, a single flush, no retry.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

from questdb.ingress import IngressError, Sender, TimestampNanos

if TYPE_CHECKING:
    from container_stats.publishing.encoder import Row

logger = logging.getLogger(__name__)


class PublishError(RuntimeError):
    """Rows could not be encoded or delivered; the interval's data is dropped."""


class BaseSink(ABC):
    """Abstract destination for encoded rows."""

    @abstractmethod
    def write(self, rows: Sequence[Row]) -> None:
        """Deliver all rows in one operation.

        Raises:
            PublishError: If the rows could not be delivered
        """
        pass


class QuestDBSink(BaseSink):
    """Sink writing to QuestDB over ILP.

    Example:
        ```python
        sink = QuestDBSink("tcp::addr=localhost:9009;")
        sink.write(rows)
        ```
    """

    def __init__(self, conf: str) -> None:
        """Initialize the sink.

        Args:
            conf: QuestDB client configuration string
        """
        self._conf = conf

    @property
    def conf(self) -> str:
        return self._conf

    def write(self, rows: Sequence[Row]) -> None:
        if not rows:
            logger.debug("No rows to publish")
            return

        try:
            with Sender.from_conf(self._conf) as sender:
                buffer = sender.new_buffer()
                for row in rows:
                    buffer.row(
                        row.table,
                        symbols=row.symbols,
                        columns=row.columns,
                        at=TimestampNanos.from_datetime(row.timestamp),
                    )
                sender.flush(buffer)
        except IngressError as e:
            raise PublishError(f"Failed to publish {len(rows)} rows to {self._conf}: {e}") from e
