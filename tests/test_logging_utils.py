from __future__ import annotations

import json
import logging

import pytest

from nova_exporter.utils.logging_utils import _JsonFormatter, setup_logging


@pytest.fixture()
def restore_root():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def test_json_formatter_includes_event():
    record = logging.LogRecord("nova_exporter.x", logging.INFO, __file__, 1, "filtered %s", ("3",), None)
    record.event = "metrics.catalog.filtered"
    payload = json.loads(_JsonFormatter().format(record))
    assert payload["msg"] == "filtered 3"
    assert payload["level"] == "INFO"
    assert payload["event"] == "metrics.catalog.filtered"


def test_setup_logging_file_and_json_switch(tmp_path, monkeypatch, restore_root):
    monkeypatch.setenv("NOVA_EXPORTER_JSON_LOGS", "1")
    log_file = tmp_path / "logs" / "exporter.log"
    root = setup_logging("debug", str(log_file))
    assert root.level == logging.DEBUG
    assert isinstance(root.handlers[0].formatter, _JsonFormatter)
    assert isinstance(root.handlers[1], logging.FileHandler)
    assert logging.getLogger("urllib3").level == logging.WARNING
    logging.getLogger("nova_exporter.test").info("hello file")
    root.handlers[1].flush()
    assert "hello file" in log_file.read_text(encoding="utf-8")
