"""Core module - configuration and schemas."""

from __future__ import annotations

from container_stats.core.config import load_config, read_config_file
from container_stats.core.constants import KIBI, PAIR_SEPARATOR
from container_stats.core.schemas import (
    CollectorConfig,
    IngressProtocol,
    RawStats,
    ReductionMode,
    validate_identifier,
)

__all__ = [
    "CollectorConfig",
    "IngressProtocol",
    "KIBI",
    "load_config",
    "PAIR_SEPARATOR",
    "RawStats",
    "read_config_file",
    "ReductionMode",
    "validate_identifier",
]
