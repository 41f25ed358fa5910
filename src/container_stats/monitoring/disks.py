"""Host disk usage lookup backed by psutil.

Given device names from the configuration (``/dev/sda1`` or just ``sda1``),
returns space and cumulative I/O counters for every mounted partition of that
device. Devices that are not present are simply not returned.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import psutil

from container_stats.monitoring.base import DiskStat

logger = logging.getLogger(__name__)


def get_device_kind(device: str, sys_class_block: Path = Path("/sys/class/block")) -> str:
    """Classify a block device as ``SSD`` or ``HDD`` from its rotational flag.

    Partitions carry no queue attributes of their own, so the parent device's
    ``queue/rotational`` is used for them.

    Returns:
        ``"SSD"``, ``"HDD"`` or ``"Unknown"`` if the flag cannot be read
    """
    entry = sys_class_block / Path(device).name
    candidates = [
        entry / "queue" / "rotational",
        entry.resolve().parent / "queue" / "rotational",
    ]

    for rotational in candidates:
        if not rotational.exists():
            continue
        try:
            flag = rotational.read_text().strip()
        except (PermissionError, OSError):
            continue
        if flag == "0":
            return "SSD"
        if flag == "1":
            return "HDD"

    logger.debug(f"Could not detect kind of {device}")
    return "Unknown"


def _matches(device: str, name: str) -> bool:
    return device == name or Path(device).name == name


class DiskInspector:
    """Look up usage counters for named host disks.

    Example:
        ```python
        inspector = DiskInspector()
        for disk in inspector.collect(["/dev/sda1"]):
            print(disk.mount_point, disk.available_percent)
        ```
    """

    def __init__(self, sys_class_block: Path = Path("/sys/class/block")) -> None:
        self._sys_class_block = sys_class_block

    def list_disks(self) -> list[DiskStat]:
        """Return every mounted physical partition psutil can see."""
        counters = psutil.disk_io_counters(perdisk=True) or {}
        disks: list[DiskStat] = []
        for partition in psutil.disk_partitions(all=False):
            stat = self._stat(partition, counters)
            if stat is not None:
                disks.append(stat)
        return disks

    def collect(self, names: Iterable[str]) -> list[DiskStat]:
        """Return a DiskStat per mounted partition matching one of ``names``.

        Names that match nothing are skipped. A partition named more than once
        is reported once.
        """
        wanted = [n for n in names if n]
        if not wanted:
            return []

        counters = psutil.disk_io_counters(perdisk=True) or {}
        disks: list[DiskStat] = []
        found: set[str] = set()
        for partition in psutil.disk_partitions(all=False):
            names = [n for n in wanted if _matches(partition.device, n)]
            if not names:
                continue
            stat = self._stat(partition, counters)
            if stat is not None:
                disks.append(stat)
                found.update(names)

        for name in wanted:
            if name not in found:
                logger.debug(f"Disk {name} not present, skipping")
        return disks

    def find(self, name: str) -> DiskStat | None:
        """Return the first mounted partition of device ``name``, if any."""
        disks = self.collect([name])
        return disks[0] if disks else None

    def _stat(self, partition, counters: dict) -> DiskStat | None:
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except (PermissionError, OSError) as e:
            logger.debug(f"Cannot read usage of {partition.mountpoint}: {e}")
            return None

        io = counters.get(Path(partition.device).name)
        return DiskStat(
            name=partition.device,
            file_system=partition.fstype,
            mount_point=partition.mountpoint,
            kind=get_device_kind(partition.device, self._sys_class_block),
            total_space=usage.total,
            available_space=usage.free,
            read_bytes=io.read_bytes if io is not None else 0,
            written_bytes=io.write_bytes if io is not None else 0,
        )
