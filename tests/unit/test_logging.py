"""Unit tests for structured logging setup."""

from __future__ import annotations

import json
import logging

import pytest

from boqrecon.core.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    def test_level_from_argument(self):
        configure_logging(level="warning", json_logs=False)
        assert logging.getLogger().level == logging.WARNING

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        configure_logging(json_logs=False)
        assert logging.getLogger().level == logging.ERROR

    def test_json_records(self, capsys):
        configure_logging(level="INFO", json_logs=True)

        logging.getLogger("boqrecon.test").info("Reconciled %s: %d conflicts", "boq-1", 2)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Reconciled boq-1: 2 conflicts"
        assert record["level"] == "info"
        assert record["logger"] == "boqrecon.test"

    def test_json_from_env(self, monkeypatch, capsys):
        monkeypatch.setenv("JSON_LOGS", "true")
        configure_logging(level="INFO")

        logging.getLogger("boqrecon.test").warning("unit missing")

        assert json.loads(capsys.readouterr().err.strip().splitlines()[-1])["event"] == (
            "unit missing"
        )
