"""DockerStatsSource - BaseStatsSource implementation using ``docker stats``.

Each poll runs ``docker stats --no-stream`` with a JSON line format and decodes
one RawStats per container line. The CLI's human-readable sizes are kept as
text; the normalizer parses them.
"""

from __future__ import annotations

import logging
import subprocess

import docker
from pydantic import ValidationError

from container_stats.core.schemas import RawStats
from container_stats.monitoring.base import BaseStatsSource

logger = logging.getLogger(__name__)


class DockerStatsSource(BaseStatsSource):
    """Stats source running the docker CLI once per poll.

    Example:
        ```python
        source = DockerStatsSource()
        if source.is_available():
            for record in source.poll():
                print(record.name, record.cpu_percent)
        ```
    """

    def __init__(self, docker_command: str = "docker", fail_fast: bool = False) -> None:
        """Initialize the source.

        Args:
            docker_command: Docker CLI binary
            fail_fast: Raise on an undecodable line instead of skipping it
        """
        self._command = [docker_command, "stats", "--no-stream", "--format", "{{json .}}"]
        self._fail_fast = fail_fast

    @property
    def name(self) -> str:
        return "docker_stats"

    def is_available(self) -> bool:
        """Check if the Docker daemon answers."""
        try:
            client = docker.from_env()
            client.ping()
            return True
        except Exception:
            return False

    def poll(self) -> list[RawStats]:
        """Run one ``docker stats`` report.

        A failed command is logged and yields no records, so the loop keeps
        polling.

        Raises:
            pydantic.ValidationError: On an undecodable line when ``fail_fast`` is set
        """
        try:
            result = subprocess.run(self._command, capture_output=True, text=True, check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            stderr = getattr(e, "stderr", None) or ""
            logger.warning(f"docker stats failed: {e} {stderr.strip()}")
            return []

        return self.parse_output(result.stdout)

    def parse_output(self, output: str) -> list[RawStats]:
        """Decode every non-blank line of a ``docker stats`` report."""
        records: list[RawStats] = []
        for line in output.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                records.append(RawStats.model_validate_json(line))
            except ValidationError as e:
                if self._fail_fast:
                    raise
                logger.error(f"Dropping undecodable stats line {line!r}: {e}")
        return records
