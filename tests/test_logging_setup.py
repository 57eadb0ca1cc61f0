from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest

from statement_ingest.logging_setup import (
    LOG_LEVEL_ENV,
    configure_logging,
    get_logger,
    resolve_level,
)


def test_resolve_level_prefers_argument_then_env(monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_level() == logging.INFO
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Warning ") == logging.WARNING
    assert resolve_level("15") == 15
    assert resolve_level("chatty") == logging.INFO

    monkeypatch.setenv(LOG_LEVEL_ENV, "error")
    assert resolve_level() == logging.ERROR
    assert resolve_level("debug") == logging.DEBUG


def test_configure_logging_writes_to_stream() -> None:
    buf = io.StringIO()
    configure_logging("warning", stream=buf)

    log = get_logger("statement_ingest.tests")
    log.info("hidden")
    log.warning("shown %d", 1)

    lines = buf.getvalue().splitlines()
    assert len(lines) == 1
    assert lines[0].endswith("statement_ingest.tests WARNING shown 1")


def test_reconfiguring_replaces_previous_handler(tmp_path: Path) -> None:
    first = io.StringIO()
    configure_logging("info", stream=first)
    log_file = tmp_path / "ingest.log"
    configure_logging("debug", log_file=log_file)

    get_logger("statement_ingest.tests").debug("to the file")

    pkg = logging.getLogger("statement_ingest")
    assert len(pkg.handlers) == 1
    assert isinstance(pkg.handlers[0], logging.FileHandler)
    assert first.getvalue() == ""
    assert "DEBUG to the file" in log_file.read_text(encoding="utf-8")
