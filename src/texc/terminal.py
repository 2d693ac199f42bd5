from __future__ import annotations

import errno
import fcntl
import logging
import os
import re
import struct
import termios
from contextlib import AbstractContextManager
from typing import Callable

from .constants import (
    CSI_SIMPLE_MAP,
    CSI_TILDE_MAP,
    ESC,
    SS3_SIMPLE_MAP,
)

logger = logging.getLogger(__name__)
KEY_LOGGER = logging.getLogger("texc.keyevents")

ByteReader = Callable[[], "int | None"]


def _read_byte_once(fd: int) -> int | None:
    try:
        data = os.read(fd, 1)
    except InterruptedError:
        return None
    except BlockingIOError:
        return None
    if not data:
        return None
    return data[0]


def decode_key(read_byte: ByteReader) -> int | None:
    """Decode one key from *read_byte*, which yields a byte or ``None`` on
    timeout.

    Returns ``None`` when the very first read times out. Escape sequences
    that are cut short or not recognised come back as a bare ``ESC``.
    """
    c = read_byte()
    if c is None:
        return None
    if c != ESC:
        return c

    seq0 = read_byte()
    if seq0 is None:
        return ESC
    seq1 = read_byte()
    if seq1 is None:
        return ESC

    if seq0 == ord("["):
        if ord("0") <= seq1 <= ord("9"):
            seq2 = read_byte()
            if seq2 is None:
                return ESC
            if seq2 == ord("~"):
                return CSI_TILDE_MAP.get(seq1, ESC)
        else:
            return CSI_SIMPLE_MAP.get(seq1, ESC)
    elif seq0 == ord("O"):
        return SS3_SIMPLE_MAP.get(seq1, ESC)
    return ESC


def read_key(fd: int) -> int:
    while True:
        key = decode_key(lambda: _read_byte_once(fd))
        if key is not None:
            KEY_LOGGER.debug("key %d", key)
            return key


def get_cursor_position(ifd: int, ofd: int) -> tuple[int, int]:
    if os.write(ofd, b"\x1b[6n") != 4:
        raise OSError(errno.EIO, "cursor query write failed")

    buf = bytearray()
    while len(buf) < 31:
        c = _read_byte_once(ifd)
        if c is None:
            break
        buf.append(c)
        if c == ord("R"):
            break

    match = re.match(rb"\x1b\[(\d+);(\d+)R", bytes(buf))
    if not match:
        raise OSError(errno.EIO, "invalid cursor position response")
    return int(match.group(1)), int(match.group(2))


def get_window_size(ifd: int, ofd: int) -> tuple[int, int]:
    try:
        packed = fcntl.ioctl(ofd, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
        rows, cols, _, _ = struct.unpack("HHHH", packed)
        if cols:
            return rows, cols
    except OSError:
        logger.debug("TIOCGWINSZ failed, falling back to cursor query")

    if os.write(ofd, b"\x1b[999C\x1b[999B") != 12:
        raise OSError(errno.EIO, "window query write failed")
    return get_cursor_position(ifd, ofd)


class RawMode(AbstractContextManager["RawMode"]):
    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._orig: list | None = None

    def __enter__(self) -> "RawMode":
        if not os.isatty(self.fd):
            raise OSError(errno.ENOTTY, "stdin is not a tty")

        try:
            self._orig = termios.tcgetattr(self.fd)
        except termios.error as exc:
            raise OSError(exc.args[0], "tcgetattr failed") from exc
        raw = termios.tcgetattr(self.fd)
        raw[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
        raw[1] &= ~termios.OPOST
        raw[2] |= termios.CS8
        raw[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        # Return from read() after at most 100ms with whatever arrived.
        raw[6][termios.VMIN] = 0
        raw[6][termios.VTIME] = 1
        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, raw)
        except termios.error as exc:
            raise OSError(exc.args[0], "tcsetattr failed") from exc
        logger.debug("Raw mode enabled on fd %d", self.fd)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._orig is not None:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._orig)
            logger.debug("Terminal attributes restored on fd %d", self.fd)
