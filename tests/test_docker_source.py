"""Tests for DockerStatsSource."""

import logging
import subprocess
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from container_stats.monitoring.docker_source import DockerStatsSource

WEB_LINE = (
    '{"BlockIO":"0B / 0B","CPUPerc":"0.50%","Container":"web","ID":"aaa",'
    '"MemPerc":"1.00%","MemUsage":"10MiB / 1GiB","Name":"web","NetIO":"1kB / 2kB","PIDs":"3"}'
)
DB_LINE = (
    '{"BlockIO":"1MB / 2MB","CPUPerc":"12.50%","Container":"db","ID":"bbb",'
    '"MemPerc":"5.00%","MemUsage":"50MiB / 1GiB","Name":"db","NetIO":"0B / 0B","PIDs":"30"}'
)


class TestParseOutput:
    """Tests for DockerStatsSource.parse_output()."""

    def test_one_record_per_line(self):
        records = DockerStatsSource().parse_output(f"{WEB_LINE}\n\n{DB_LINE}\n")
        assert [r.name for r in records] == ["web", "db"]
        assert records[1].cpu_percent == "12.50%"

    def test_empty_output(self):
        assert DockerStatsSource().parse_output("") == []

    def test_bad_line_dropped(self, caplog):
        with caplog.at_level(logging.ERROR):
            records = DockerStatsSource().parse_output(f"{WEB_LINE}\nnot json\n{DB_LINE}")
        assert [r.name for r in records] == ["web", "db"]
        assert "not json" in caplog.text

    def test_bad_line_fail_fast(self):
        source = DockerStatsSource(fail_fast=True)
        with pytest.raises(ValidationError):
            source.parse_output('{"Name": "web"}')


class TestPoll:
    """Tests for DockerStatsSource.poll()."""

    @patch("container_stats.monitoring.docker_source.subprocess.run")
    def test_runs_stats_command(self, mock_run):
        mock_run.return_value = MagicMock(stdout=WEB_LINE + "\n")

        records = DockerStatsSource(docker_command="podman").poll()

        assert [r.id for r in records] == ["aaa"]
        args = mock_run.call_args.args[0]
        assert args == ["podman", "stats", "--no-stream", "--format", "{{json .}}"]

    @patch("container_stats.monitoring.docker_source.subprocess.run")
    def test_failed_command_yields_nothing(self, mock_run, caplog):
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["docker", "stats"], stderr="Cannot connect to the Docker daemon"
        )
        with caplog.at_level(logging.WARNING):
            assert DockerStatsSource().poll() == []
        assert "Cannot connect" in caplog.text

    @patch("container_stats.monitoring.docker_source.subprocess.run")
    def test_missing_binary_yields_nothing(self, mock_run):
        mock_run.side_effect = FileNotFoundError("docker")
        assert DockerStatsSource().poll() == []


class TestAvailability:
    """Tests for DockerStatsSource.is_available()."""

    @patch("container_stats.monitoring.docker_source.docker.from_env")
    def test_available(self, mock_from_env):
        mock_from_env.return_value.ping.return_value = True
        assert DockerStatsSource().is_available() is True

    @patch("container_stats.monitoring.docker_source.docker.from_env")
    def test_unavailable(self, mock_from_env):
        mock_from_env.side_effect = Exception("Docker not available")
        assert DockerStatsSource().is_available() is False

    def test_name(self):
        assert DockerStatsSource().name == "docker_stats"
