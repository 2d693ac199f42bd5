"""Handler wiring for the ``texc`` loggers."""

from __future__ import annotations

import logging
import logging.handlers
import tempfile

import pytest

from texc.logging_config import KEY_LOGGER, logger, setup_logging


@pytest.fixture(autouse=True)
def restore_loggers():
    saved = (logger.handlers[:], logger.level, KEY_LOGGER.handlers[:], KEY_LOGGER.disabled)
    yield
    for handler in logger.handlers + KEY_LOGGER.handlers:
        if handler not in saved[0] and handler not in saved[2]:
            handler.close()
    logger.handlers, logger.level, KEY_LOGGER.handlers, KEY_LOGGER.disabled = saved


def file_handlers(log):
    return [h for h in log.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]


def test_records_go_to_configured_file(tmp_path, monkeypatch):
    monkeypatch.delenv("TEXC_KEYTRACE", raising=False)
    log_file = tmp_path / "logs" / "texc.log"
    setup_logging({"logging": {"file": str(log_file), "file_level": "WARNING"}})

    [handler] = file_handlers(logger)
    assert handler.level == logging.WARNING
    logging.getLogger("texc.editor").warning("disk full")
    logging.getLogger("texc.editor").info("not written")
    handler.flush()

    text = log_file.read_text()
    assert "disk full" in text
    assert "not written" not in text


def test_console_handler_is_opt_in(tmp_path, monkeypatch):
    monkeypatch.delenv("TEXC_KEYTRACE", raising=False)
    setup_logging({"logging": {"file": str(tmp_path / "a.log")}})
    assert not [h for h in logger.handlers if type(h) is logging.StreamHandler]

    setup_logging(
        {"logging": {"file": str(tmp_path / "a.log"), "log_to_console": True, "console_level": "ERROR"}}
    )
    [console] = [h for h in logger.handlers if type(h) is logging.StreamHandler]
    assert console.level == logging.ERROR
    assert len(file_handlers(logger)) == 1


def test_unusable_log_path_falls_back_to_tempdir(tmp_path, monkeypatch, capsys):
    monkeypatch.delenv("TEXC_KEYTRACE", raising=False)
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    setup_logging({"logging": {"file": str(blocker / "sub" / "texc.log")}})

    [handler] = file_handlers(logger)
    assert handler.baseFilename == str(tmp_path / "texc.log")
    assert "cannot open log file" in capsys.readouterr().err


def test_key_trace_disabled_by_default(tmp_path, monkeypatch):
    monkeypatch.delenv("TEXC_KEYTRACE", raising=False)
    setup_logging({"logging": {"file": str(tmp_path / "texc.log")}})
    assert KEY_LOGGER.disabled
    assert not file_handlers(KEY_LOGGER)


def test_key_trace_writes_next_to_log(tmp_path, monkeypatch):
    monkeypatch.setenv("TEXC_KEYTRACE", "1")
    setup_logging({"logging": {"file": str(tmp_path / "texc.log")}})

    assert not KEY_LOGGER.disabled
    [handler] = file_handlers(KEY_LOGGER)
    assert handler.baseFilename == str(tmp_path / "texc-keytrace.log")
    assert not KEY_LOGGER.propagate
