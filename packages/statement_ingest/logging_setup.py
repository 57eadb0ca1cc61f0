"""Logging for the ``statement_ingest`` package.

Library modules only call ``get_logger("statement_ingest.<module>")`` and
stay silent (``NullHandler``) until an entrypoint calls
:func:`configure_logging`. The CLI does so once per invocation from its root
callback, passing ``--log-level`` / ``--log-file``; each call replaces the
handler installed by the previous one.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import IO

LOG_LEVEL_ENV = "STATEMENT_INGEST_LOG_LEVEL"

_PKG_LOGGER_NAME = "statement_ingest"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# Handler installed by the last configure_logging() call.
_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Numeric level from ``level``, else ``$STATEMENT_INGEST_LOG_LEVEL``, else INFO.

    Names are case-insensitive; digits are accepted as-is. Unrecognized names
    fall back to INFO.
    """

    if level is None or level == "":
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelNamesMapping().get(name)
    return numeric if numeric is not None else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    log_file: str | Path | None = None,
    stream: IO[str] = sys.stderr,
) -> logging.Handler:
    """Attach one handler to the package logger and return it.

    Records go to ``log_file`` (appended, UTF-8) when given, otherwise to
    ``stream``. A handler from an earlier call is removed and closed first.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler) or h is _handler:
            logger.removeHandler(h)
    if _handler is not None:
        _handler.close()

    resolved = resolve_level(level)
    handler: logging.Handler
    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    _handler = handler
    return handler


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["LOG_LEVEL_ENV", "configure_logging", "get_logger", "resolve_level"]
