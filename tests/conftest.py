"""Shared fixtures for the texc test suite."""

from __future__ import annotations

import os

import pytest

from texc.editor import Editor
from texc.models import EditorConfig
from texc.rows import insert_row
from texc.syntax import HLDB


@pytest.fixture
def cfg() -> EditorConfig:
    """A plain-text document with a 10x40 text area."""
    return EditorConfig(screenrows=10, screencols=40)


@pytest.fixture
def c_cfg(cfg: EditorConfig) -> EditorConfig:
    """Same as ``cfg`` but with C highlighting active."""
    cfg.syntax = HLDB[0]
    return cfg


@pytest.fixture
def add_rows():
    """Return a helper appending lines to a document and resetting dirty."""

    def _add(config: EditorConfig, *lines: str) -> EditorConfig:
        for line in lines:
            insert_row(config, config.numrows, line)
        config.dirty = 0
        return config

    return _add


@pytest.fixture
def screen_fd(tmp_path):
    """A writable fd standing in for the terminal's stdout."""
    fd = os.open(tmp_path / "screen.out", os.O_WRONLY | os.O_CREAT, 0o644)
    yield fd
    os.close(fd)


@pytest.fixture
def keyboard():
    """Return ``feed(data)`` producing a read fd preloaded with *data*.

    The write end is closed, so reads past the data see EOF, which the
    key decoder treats like a timeout.
    """
    opened: list[int] = []

    def feed(data: bytes) -> int:
        r, w = os.pipe()
        os.write(w, data)
        os.close(w)
        opened.append(r)
        return r

    yield feed
    for fd in opened:
        os.close(fd)


@pytest.fixture
def editor(screen_fd) -> Editor:
    ed = Editor(stdin_fd=-1, stdout_fd=screen_fd)
    ed.cfg.screenrows = 10
    ed.cfg.screencols = 40
    return ed
