"""Pydantic schemas for container-stats.

This module defines the configuration contract of the collector and the raw
record decoded from each line of the container runtime's status report.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from container_stats.core.constants import (
    DEFAULT_CONTAINER_TABLE,
    DEFAULT_DISK_TABLE,
    DEFAULT_INTERVAL_MINUTES,
    DEFAULT_QUESTDB_HOST,
    DEFAULT_QUESTDB_PORT,
    ILLEGAL_IDENTIFIER_CHARS,
    MAX_INTERVAL_MINUTES,
    MIN_INTERVAL_MINUTES,
)


class ReductionMode(str, Enum):
    """Policy used to collapse one interval's samples into a single value."""

    AVERAGE = "average"  # Arithmetic mean (pids use integer division)
    MAXIMUM = "maximum"  # Largest observed value


MODE_ALIASES = {"avg": ReductionMode.AVERAGE, "max": ReductionMode.MAXIMUM}


class IngressProtocol(str, Enum):
    """Transports supported by the QuestDB ingestion client."""

    TCP = "tcp"
    TCPS = "tcps"
    HTTP = "http"
    HTTPS = "https"


def validate_identifier(value: str) -> str:
    """Check a table name against the QuestDB naming rules.

    Raises:
        ValueError: If the name is empty, padded, holds an illegal character or
            has a leading, trailing or doubled dot
    """
    if not value or value != value.strip():
        raise ValueError(f"Invalid identifier {value!r}: must be non-empty and unpadded")
    illegal = sorted({c for c in value if c in ILLEGAL_IDENTIFIER_CHARS})
    if illegal:
        raise ValueError(f"Invalid identifier {value!r}: illegal characters {illegal}")
    if value.startswith(".") or value.endswith(".") or ".." in value:
        raise ValueError(f"Invalid identifier {value!r}: misplaced dot")
    return value


class CollectorConfig(BaseModel):
    """Top-level collector configuration.

    Loaded from YAML/JSON files and/or built from command-line options.

    Attributes:
        host: Label added to every row, generally the docker host's name
        mode: Reduction applied to each interval's samples
        questdb_host: QuestDB host to publish to
        questdb_port: QuestDB ILP port
        protocol: ILP transport
        table: Table receiving container rows
        disk_table: Table receiving disk rows
        interval_minutes: Length of the publish window
        disks: Device names whose usage is published alongside container rows
        poll_pause_seconds: Pause between two polls of the runtime
        docker_command: Container runtime binary
        fail_fast: Abort the poll cycle on a malformed record instead of dropping it
    """

    host: str = Field(..., min_length=1, description="Host label for published rows")
    mode: ReductionMode = Field(default=ReductionMode.AVERAGE)
    questdb_host: str = Field(default=DEFAULT_QUESTDB_HOST, min_length=1)
    questdb_port: int = Field(default=DEFAULT_QUESTDB_PORT, ge=1, le=65535)
    protocol: IngressProtocol = Field(default=IngressProtocol.TCP)
    table: str = Field(default=DEFAULT_CONTAINER_TABLE, description="Container metrics table")
    disk_table: str = Field(default=DEFAULT_DISK_TABLE, description="Disk metrics table")
    interval_minutes: int = Field(
        default=DEFAULT_INTERVAL_MINUTES,
        ge=MIN_INTERVAL_MINUTES,
        le=MAX_INTERVAL_MINUTES,
        description="Publish interval in minutes",
    )
    disks: list[str] = Field(default_factory=list, description="Disk device names to report")
    poll_pause_seconds: float = Field(default=0.0, ge=0, le=60)
    docker_command: str = Field(default="docker", min_length=1)
    fail_fast: bool = Field(default=False)

    @field_validator("mode", mode="before")
    @classmethod
    def resolve_mode_alias(cls, v: Any) -> Any:
        """Accept the short ``avg``/``max`` spellings."""
        if isinstance(v, str):
            return MODE_ALIASES.get(v.lower(), v.lower())
        return v

    @field_validator("table", "disk_table")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        """Reject table names QuestDB would refuse at publish time."""
        return validate_identifier(v)

    @property
    def ingress_conf(self) -> str:
        """QuestDB client configuration string, e.g. ``tcp::addr=localhost:9009;``."""
        return f"{self.protocol.value}::addr={self.questdb_host}:{self.questdb_port};"


class RawStats(BaseModel):
    """One line of ``docker stats --format '{{json .}}'`` output.

    All values are kept as the runtime printed them; unit parsing happens in the
    normalizer.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(..., alias="ID")
    container: str = Field(default="", alias="Container")
    name: str = Field(..., alias="Name")
    cpu_percent: str = Field(..., alias="CPUPerc")
    memory_percent: str = Field(..., alias="MemPerc")
    memory_usage: str = Field(default="", alias="MemUsage")
    block_io: str = Field(default="", alias="BlockIO")
    net_io: str = Field(default="", alias="NetIO")
    pids: str = Field(..., alias="PIDs")
