"""Shared constants for container-stats.

Centralized constants to avoid duplication and ensure consistency across modules.
"""

from __future__ import annotations

# Binary multiplier used for every unit family (docker reports kB/MB/GB but
# the values are scaled by 1024, same as KiB/MiB/GiB).
KIBI = 1024

# Separator between the two halves of an I/O or memory usage field ("IN / OUT").
PAIR_SEPARATOR = " / "

# Memory tokens shorter than this are treated as zero bytes.
MIN_MEMORY_TOKEN_LENGTH = 3

# Interval bounds (minutes) for the publish window.
MIN_INTERVAL_MINUTES = 1
MAX_INTERVAL_MINUTES = 15
DEFAULT_INTERVAL_MINUTES = 5

# Default QuestDB ILP endpoint and tables.
DEFAULT_QUESTDB_HOST = "localhost"
DEFAULT_QUESTDB_PORT = 9009
DEFAULT_CONTAINER_TABLE = "containerStats"
DEFAULT_DISK_TABLE = "diskStats"

# Characters QuestDB rejects in table names. Dots are allowed except at either
# end or doubled.
ILLEGAL_IDENTIFIER_CHARS = frozenset("?,'\"\\/:()+*%~\r\n\t\x00")
