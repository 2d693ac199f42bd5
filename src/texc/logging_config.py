"""Logging setup for texc.

The editor owns the terminal while it runs, so records go to a rotating
log file by default. Console output is opt-in through the ``logging``
config section. Raw key tracing goes to ``texc.keyevents`` and is only
switched on when ``TEXC_KEYTRACE`` is ``1``, ``true`` or ``yes``.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any

logger = logging.getLogger("texc")
KEY_LOGGER = logging.getLogger("texc.keyevents")

FILE_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
CONSOLE_FORMAT = "%(levelname)-8s - %(name)-12s - %(message)s"


def _rotating_handler(filename: str, level: int) -> logging.Handler | None:
    log_dir = os.path.dirname(filename)
    try:
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
    except OSError as exc:
        print(f"texc: cannot open log file '{filename}': {exc}", file=sys.stderr)
        return None
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    handler.setLevel(level)
    return handler


def setup_logging(config: dict[str, Any] | None = None) -> None:
    """Attach handlers to the ``texc`` logger.

    Recognised keys of ``config["logging"]``: ``file`` (path),
    ``file_level``, ``log_to_console`` and ``console_level``. Safe to call
    more than once; previous handlers are replaced.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})

    file_level = getattr(logging, str(logging_config.get("file_level", "INFO")).upper(), logging.INFO)
    log_file = logging_config.get("file") or os.path.join(tempfile.gettempdir(), "texc.log")

    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.setLevel(logging.DEBUG)

    file_handler = _rotating_handler(log_file, file_level)
    if file_handler is None:
        fallback = os.path.join(tempfile.gettempdir(), "texc.log")
        if fallback != log_file:
            file_handler = _rotating_handler(fallback, file_level)
    if file_handler is not None:
        logger.addHandler(file_handler)

    if logging_config.get("log_to_console", False):
        console_level = getattr(
            logging, str(logging_config.get("console_level", "WARNING")).upper(), logging.WARNING
        )
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console_handler.setLevel(console_level)
        logger.addHandler(console_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    KEY_LOGGER.propagate = False
    for handler in KEY_LOGGER.handlers:
        handler.close()
    KEY_LOGGER.handlers = []
    KEY_LOGGER.setLevel(logging.DEBUG)
    if os.environ.get("TEXC_KEYTRACE", "").lower() in {"1", "true", "yes"}:
        trace_file = os.path.join(os.path.dirname(log_file) or ".", "texc-keytrace.log")
        trace_handler = _rotating_handler(trace_file, logging.DEBUG)
        if trace_handler is not None:
            trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            KEY_LOGGER.addHandler(trace_handler)
            KEY_LOGGER.disabled = False
            logger.info("Key event tracing enabled, logging to '%s'.", trace_file)
    if not KEY_LOGGER.handlers:
        KEY_LOGGER.addHandler(logging.NullHandler())
        KEY_LOGGER.disabled = True

    logger.debug(
        "Logging configured: file=%s level=%s", log_file, logging.getLevelName(file_level)
    )
