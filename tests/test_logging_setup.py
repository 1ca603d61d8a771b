# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

from vita_companion.logging_setup import _ConsoleNoiseFilter, level_from_name, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_level_from_name() -> None:
    assert level_from_name("debug") == logging.DEBUG
    assert level_from_name(" WARNING ") == logging.WARNING
    assert level_from_name("loud") == logging.INFO
    assert level_from_name(None, logging.ERROR) == logging.ERROR


def test_console_filter() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("vita_companion.core.chat", logging.INFO))
    assert not f.filter(_record("vita_companion.connectors.matrix_connector", logging.INFO))
    assert f.filter(_record("vita_companion.connectors.matrix_connector", logging.WARNING))
    assert not f.filter(_record("vita_companion.analysis.replies", logging.INFO))
    assert not f.filter(_record("nio.rooms", logging.WARNING))
    assert f.filter(_record("nio.rooms", logging.ERROR))


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs")
        logging.getLogger("vita_companion.test").debug("hello file")
        for h in root.handlers:
            h.flush()
        assert log_file == tmp_path / "logs" / "vita.log"
        assert "hello file" in log_file.read_text("utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
