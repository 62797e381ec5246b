"""Tests for configuration loading, logging setup and the CLI."""

import json
import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from tilde.__main__ import main
from tilde.config import (
    CONFIG_ENV_VAR,
    LOG_LEVEL_ENV_VAR,
    EditorConfig,
    default_config_path,
    load_config,
    validate_setting,
)
from tilde.constants import EditorConstants
from tilde.logs import configure_logging
from tilde.version import get_version, get_version_string


class TestLoadConfig(unittest.TestCase):
    """Test reading the JSON config file."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = Path(self.temp_dir.name) / "config.json"
        env = {k: v for k, v in os.environ.items()
               if k not in (CONFIG_ENV_VAR, LOG_LEVEL_ENV_VAR)}
        self.env_patch = patch.dict(os.environ, env, clear=True)
        self.env_patch.start()

    def tearDown(self):
        self.env_patch.stop()
        self.temp_dir.cleanup()

    def write(self, data):
        with open(self.path, "w", encoding="utf-8") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)

    def test_missing_file_gives_defaults(self):
        self.assertEqual(load_config(self.path), EditorConfig())

    def test_defaults(self):
        config = EditorConfig()
        self.assertEqual(config.quit_times, EditorConstants.DEFAULT_QUIT_TIMES)
        self.assertEqual(config.message_duration, EditorConstants.DEFAULT_MESSAGE_DURATION)
        self.assertEqual(config.log_level, "WARNING")
        self.assertIsNone(config.log_file)

    def test_values_are_read(self):
        self.write({"quit_times": 5, "message_duration": 2.5,
                    "log_level": "debug", "log_file": "/tmp/tilde-test.log"})
        config = load_config(self.path)
        self.assertEqual(config.quit_times, 5)
        self.assertEqual(config.message_duration, 2.5)
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.log_file, "/tmp/tilde-test.log")

    def test_invalid_values_fall_back_to_defaults(self):
        self.write({"quit_times": 0, "message_duration": "long", "colour": "red"})
        with self.assertLogs("tilde.config", level="WARNING") as logs:
            config = load_config(self.path)
        self.assertEqual(config, EditorConfig())
        self.assertEqual(len(logs.records), 3)

    def test_invalid_json_is_ignored(self):
        self.write("{not json")
        with self.assertLogs("tilde.config", level="WARNING"):
            config = load_config(self.path)
        self.assertEqual(config, EditorConfig())

    def test_non_object_is_ignored(self):
        self.write([1, 2, 3])
        with self.assertLogs("tilde.config", level="WARNING"):
            config = load_config(self.path)
        self.assertEqual(config, EditorConfig())

    def test_config_path_from_environment(self):
        os.environ[CONFIG_ENV_VAR] = str(self.path)
        self.assertEqual(default_config_path(), self.path)
        self.write({"quit_times": 7})
        self.assertEqual(load_config().quit_times, 7)

    def test_default_config_path(self):
        path = default_config_path()
        self.assertEqual(path.name, "config.json")
        self.assertIn("tilde", str(path))

    def test_log_level_from_environment(self):
        os.environ[LOG_LEVEL_ENV_VAR] = "info"
        self.assertEqual(load_config(self.path).log_level, "INFO")

    def test_invalid_log_level_from_environment(self):
        os.environ[LOG_LEVEL_ENV_VAR] = "chatty"
        with self.assertLogs("tilde.config", level="WARNING"):
            config = load_config(self.path)
        self.assertEqual(config.log_level, "WARNING")


def test_validate_setting():
    assert validate_setting("quit_times", 1)
    assert not validate_setting("quit_times", True)
    assert not validate_setting("quit_times", 2.0)
    assert validate_setting("message_duration", 0)
    assert not validate_setting("message_duration", -1)
    assert validate_setting("log_level", "error")
    assert not validate_setting("log_level", 3)
    assert validate_setting("log_file", None)
    assert not validate_setting("unknown", 1)


def test_configure_logging_writes_to_file():
    with tempfile.TemporaryDirectory() as temp_dir:
        log_file = os.path.join(temp_dir, "logs", "tilde.log")
        config = EditorConfig(log_level="INFO", log_file=log_file)
        package_logger = logging.getLogger("tilde")
        old_level = package_logger.level

        handler = configure_logging(config)
        try:
            logging.getLogger("tilde.buffer").info("hello from the buffer")
            handler.flush()
        finally:
            package_logger.removeHandler(handler)
            handler.close()
            package_logger.setLevel(old_level)

        with open(log_file, encoding="utf-8") as f:
            content = f.read()
        assert "INFO tilde.buffer: hello from the buffer" in content


def test_version_string():
    assert get_version_string() == f"tilde {get_version()}"


def test_main_prints_version(capsys):
    main(["--version"])
    assert capsys.readouterr().out.strip() == get_version_string()
