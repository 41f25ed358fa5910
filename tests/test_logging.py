"""Tests for logging setup."""

import json
import logging

from container_stats.utils import logging as log_utils
from container_stats.utils.logging import JsonFormatter, setup_logging


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_fields(self):
        record = logging.LogRecord(
            "container_stats.runners", logging.ERROR, __file__, 1, "interval dropped", None, None
        )
        record.threadName = "publish-1205"

        data = json.loads(JsonFormatter().format(record))

        assert data["level"] == "ERROR"
        assert data["logger"] == "container_stats.runners"
        assert data["thread"] == "publish-1205"
        assert data["message"] == "interval dropped"
        assert "exception" not in data


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_json_handler_and_file(self, tmp_path):
        log_file = tmp_path / "logs" / "collector.log"
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            setup_logging(level="debug", log_file=log_file, json_format=True)

            assert root.level == logging.DEBUG
            assert isinstance(root.handlers[0].formatter, JsonFormatter)
            assert log_file.parent.is_dir()
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers, root.level = saved[0], saved[1]

    def test_modules_use_standard_loggers(self):
        assert not hasattr(log_utils, "get_logger")
