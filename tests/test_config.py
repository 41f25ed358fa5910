"""Tests for configuration loading."""

import json

import pytest
from pydantic import ValidationError

from container_stats.core.config import load_config, read_config_file
from container_stats.core.schemas import ReductionMode


class TestLoadConfig:
    """Tests for load_config()."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "collector.yaml"
        path.write_text("host: docker-01\nmode: max\ndisks:\n  - /dev/sda1\n")

        config = load_config(path)

        assert config.host == "docker-01"
        assert config.mode == ReductionMode.MAXIMUM
        assert config.disks == ["/dev/sda1"]

    def test_json(self, tmp_path):
        path = tmp_path / "collector.json"
        path.write_text(json.dumps({"host": "docker-02", "interval_minutes": 10}))

        config = load_config(path)

        assert config.host == "docker-02"
        assert config.interval_minutes == 10

    def test_overrides_take_precedence(self, tmp_path):
        path = tmp_path / "collector.yml"
        path.write_text("host: from-file\nquestdb_port: 9009\n")

        config = load_config(path, {"host": "from-cli", "questdb_port": None})

        assert config.host == "from-cli"
        assert config.questdb_port == 9009

    def test_overrides_without_file(self):
        config = load_config(overrides={"host": "docker-03", "mode": "avg"})
        assert config.host == "docker-03"

    def test_missing_host(self, tmp_path):
        path = tmp_path / "collector.yaml"
        path.write_text("mode: avg\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "collector.toml"
        path.write_text('host = "h"\n')
        with pytest.raises(ValueError, match="Unsupported config format"):
            load_config(path)


class TestReadConfigFile:
    """Tests for read_config_file()."""

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert read_config_file(path) == {}

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            read_config_file(path)
