"""Pytest configuration for test isolation.

The CLI loads ``.env`` from the current working directory, reads
``STATEMENT_INGEST_LOG_LEVEL`` and installs a handler on the package logger.
Autouse fixtures run every test from its own temporary directory with that
variable unset, and drop any installed handler afterwards so a developer's
local environment or an earlier CLI run cannot leak into assertions.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make sure the workspace `packages/` dir is on sys.path so `statement_ingest`
# is importable without an install; the repo root makes `tests.helpers` work.
_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("STATEMENT_INGEST_LOG_LEVEL", raising=False)


@pytest.fixture(autouse=True)
def _reset_package_logging() -> Iterator[None]:
    from statement_ingest import logging_setup

    yield
    logger = logging.getLogger("statement_ingest")
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    logging_setup._handler = None
