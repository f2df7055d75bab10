"""Unit tests for drivethru logging configuration."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import drivethru
from drivethru.logging_config import LOGGER_NAME, _get_level, _get_logger


class TestSilentByDefault:
    def test_logger_has_null_handler(self):
        logger = logging.getLogger(LOGGER_NAME)
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_running_a_step_is_silent(self, capfd):
        sim = drivethru.Simulation(seed=1)
        sim.start()
        sim.tick()
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == ""


class TestEnableConsoleLogging:
    def test_outputs_to_stderr(self, capfd):
        drivethru.enable_console_logging(level="INFO")
        logging.getLogger(f"{LOGGER_NAME}.test").info("test message")
        assert "test message" in capfd.readouterr().err

    def test_engine_events_are_logged(self, capfd):
        drivethru.enable_console_logging(level="INFO", format="[DT] %(message)s")
        sim = drivethru.Simulation(seed=1)
        sim.start()
        sim.pause()
        sim.reset()
        err = capfd.readouterr().err
        assert "[DT] simulation started" in err
        assert "[DT] simulation paused" in err
        assert "[DT] simulation reset" in err

    def test_sets_level(self):
        drivethru.enable_console_logging(level="DEBUG")
        assert _get_logger().level == logging.DEBUG


class TestFileLogging:
    def test_writes_to_file(self, tmp_path):
        path = tmp_path / "logs" / "dt.log"
        handler = drivethru.enable_file_logging(path, level="INFO")
        assert isinstance(handler, RotatingFileHandler)
        logging.getLogger(f"{LOGGER_NAME}.test").info("to file")
        handler.flush()
        assert "to file" in path.read_text()


class TestLevelsAndEnv:
    def test_get_level(self):
        assert _get_level("debug") == logging.DEBUG
        assert _get_level(logging.WARNING) == logging.WARNING
        assert _get_level("nonsense") == logging.INFO

    def test_set_level_updates_handlers(self):
        handler = drivethru.enable_console_logging(level="INFO")
        drivethru.set_level("ERROR")
        assert _get_logger().level == logging.ERROR
        assert handler.level == logging.ERROR

    def test_disable_logging(self):
        drivethru.enable_console_logging()
        drivethru.disable_logging()
        logger = _get_logger()
        assert all(isinstance(h, logging.NullHandler) for h in logger.handlers)
        assert logger.level == logging.NOTSET

    def test_configure_from_env_console(self, monkeypatch):
        monkeypatch.setenv("DT_LOGGING", "WARNING")
        monkeypatch.delenv("DT_LOG_FILE", raising=False)
        drivethru.configure_from_env()
        logger = _get_logger()
        assert logger.level == logging.WARNING
        assert any(type(h) is logging.StreamHandler for h in logger.handlers)

    def test_configure_from_env_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DT_LOGGING", "DEBUG")
        monkeypatch.setenv("DT_LOG_FILE", str(tmp_path / "env.log"))
        drivethru.configure_from_env()
        assert any(isinstance(h, RotatingFileHandler) for h in _get_logger().handlers)

    def test_configure_from_env_replaces_earlier_handlers(self, monkeypatch):
        drivethru.enable_console_logging(level="DEBUG")
        monkeypatch.setenv("DT_LOGGING", "ERROR")
        monkeypatch.delenv("DT_LOG_FILE", raising=False)
        drivethru.configure_from_env()
        real = [h for h in _get_logger().handlers if not isinstance(h, logging.NullHandler)]
        assert len(real) == 1
        assert real[0].level == logging.ERROR

    def test_configure_from_env_unset_is_noop(self, monkeypatch):
        monkeypatch.delenv("DT_LOGGING", raising=False)
        drivethru.configure_from_env()
        assert _get_logger().level == logging.NOTSET
