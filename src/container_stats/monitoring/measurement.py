"""Parsers for the unit-suffixed fields of the runtime's status report.

Docker prints sizes as human-readable strings: block and network I/O in the
byte-count family (``"12.3MB / 4kB"``), memory usage in the binary family
(``"128MiB / 1GiB"``) and utilization as percentages (``"45.2%"``). The
functions here turn them into Measurements. Numeric failures raise
MeasurementParseError; the normalizer decides which of those are fatal.
"""

from __future__ import annotations

import logging
import re

from container_stats.core.constants import MIN_MEMORY_TOKEN_LENGTH, PAIR_SEPARATOR
from container_stats.monitoring.base import IOPair, Measurement, Unit

logger = logging.getLogger(__name__)

# Checked in order, so the longest suffix wins over the bare "B".
_BYTE_SUFFIXES: tuple[tuple[str, Unit], ...] = (
    ("GB", Unit.GB),
    ("gB", Unit.GB),
    ("MB", Unit.MB),
    ("mB", Unit.MB),
    ("KB", Unit.KB),
    ("kB", Unit.KB),
    ("B", Unit.B),
)

_MEMORY_SUFFIX = re.compile(r"[A-Za-z]{1,3}$")

_MAX_PIDS = 2**32 - 1


class MeasurementParseError(ValueError):
    """A numeric field of a status record could not be parsed.

    Attributes:
        field: Name of the raw field (e.g. ``CPUPerc``)
        value: The raw text that failed to parse
    """

    def __init__(self, field: str, value: str, reason: str = "not a number") -> None:
        self.field = field
        self.value = value
        super().__init__(f"Failed to parse {field} {value!r}: {reason}")


def _parse_float(text: str, field: str, raw: str) -> float:
    try:
        return float(text)
    except ValueError as e:
        raise MeasurementParseError(field, raw) from e


def parse_byte_measurement(token: str, field: str = "IO") -> Measurement:
    """Parse a byte-count token such as ``"12.3MB"`` or ``"4kB"``.

    Returns an empty Measurement when the token carries no recognized suffix.

    Raises:
        MeasurementParseError: If the part before the suffix is not a number
    """
    token = token.strip()
    for suffix, unit in _BYTE_SUFFIXES:
        if token.endswith(suffix):
            return Measurement(_parse_float(token[: -len(suffix)], field, token), unit)
    return Measurement()


def parse_memory_measurement(token: str, field: str = "MemUsage") -> Measurement:
    """Parse one half of a memory usage field such as ``"128MiB"``.

    ``"0B"`` and tokens shorter than three characters are zero bytes. Otherwise
    the trailing letters (up to three) are the unit and everything before them
    is the value. An unknown unit yields an empty Measurement.

    Raises:
        MeasurementParseError: If the part before the unit is not a number
    """
    token = token.strip()
    if token == "0B" or len(token) < MIN_MEMORY_TOKEN_LENGTH:
        return Measurement(0.0, Unit.BYTES)

    match = _MEMORY_SUFFIX.search(token)
    if match is None:
        logger.warning(f"No unit in {field} token {token!r}")
        return Measurement()

    try:
        unit = Unit(match.group())
    except ValueError:
        logger.warning(f"Unknown unit {match.group()!r} in {field} token {token!r}")
        return Measurement()

    return Measurement(_parse_float(token[: match.start()], field, token), unit)


def parse_percentage(token: str, field: str) -> float:
    """Parse ``"45.2%"`` into ``45.2``.

    Raises:
        MeasurementParseError: If the token is not a number once ``%`` is removed
    """
    return _parse_float(token.strip().removesuffix("%"), field, token)


def parse_pids(token: str, field: str = "PIDs") -> int:
    """Parse the process count as an unsigned 32-bit integer.

    Raises:
        MeasurementParseError: If the token is not an integer or out of range
    """
    try:
        value = int(token.strip())
    except ValueError as e:
        raise MeasurementParseError(field, token) from e
    if not 0 <= value <= _MAX_PIDS:
        raise MeasurementParseError(field, token, "not an unsigned 32-bit integer")
    return value


def parse_io_pair(token: str, field: str) -> IOPair:
    """Parse an ``"IN / OUT"`` I/O field.

    A token that does not split into exactly two parts yields a zero IOPair.

    Raises:
        MeasurementParseError: If either side has a non-numeric value
    """
    parts = token.split(PAIR_SEPARATOR)
    if len(parts) != 2:
        return IOPair()
    return IOPair(
        incoming=parse_byte_measurement(parts[0], field),
        outgoing=parse_byte_measurement(parts[1], field),
    )


def split_memory_usage(token: str) -> list[str]:
    """Split ``"USED / LIMIT"`` (or ``"USED/LIMIT"``); empty list if there is no separator."""
    parts = token.split(PAIR_SEPARATOR)
    if len(parts) > 1:
        return parts
    parts = token.split("/")
    if len(parts) > 1:
        return parts
    return []


def parse_memory_usage(token: str, field: str = "MemUsage") -> tuple[Measurement, Measurement]:
    """Parse a memory usage field into ``(usage, limit)``.

    Returns two empty Measurements when the field has no separator.

    Raises:
        MeasurementParseError: If either side has a non-numeric value
    """
    parts = split_memory_usage(token)
    if len(parts) < 2:
        return Measurement(), Measurement()
    return parse_memory_measurement(parts[0], field), parse_memory_measurement(parts[1], field)
