from __future__ import annotations

import errno
import logging
import os
import signal
import sys
import time
from typing import Any, Final

from .config import DEFAULT_CONFIG, load_config
from .constants import (
    ANSI_CLEAR_SCREEN,
    ANSI_CURSOR_HOME,
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_F,
    CTRL_H,
    CTRL_L,
    CTRL_Q,
    CTRL_S,
    DEL_KEY,
    END_KEY,
    ENTER,
    ESC,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
    TEXC_QUIT_TIMES,
    TEXC_STATUS_TIMEOUT,
)
from .logging_config import setup_logging
from .models import EditorConfig
from .prompt import PromptSession, PromptStatus, SearchSession
from .rows import (
    del_row,
    insert_row,
    row_append_string,
    row_del_char,
    row_insert_char,
    rows_to_string,
    split_row,
)
from .syntax import select_syntax_highlight
from .terminal import RawMode, get_window_size, read_key
from .ui import refresh_screen

logger = logging.getLogger(__name__)

STDIN_FILENO: Final[int] = 0
STDOUT_FILENO: Final[int] = 1


class Editor:
    def __init__(
        self,
        stdin_fd: int = STDIN_FILENO,
        stdout_fd: int = STDOUT_FILENO,
        settings: dict[str, Any] | None = None,
    ) -> None:
        self.settings = settings if settings is not None else DEFAULT_CONFIG
        editor_settings = self.settings.get("editor", {})
        self.cfg = EditorConfig(
            statusmsg_timeout=float(
                editor_settings.get("status_message_timeout", TEXC_STATUS_TIMEOUT)
            )
        )
        self.quit_times_default = int(editor_settings.get("quit_times", TEXC_QUIT_TIMES))
        self.quit_times = self.quit_times_default
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd

    def update_window_size(self) -> None:
        try:
            rows, cols = get_window_size(self.stdin_fd, self.stdout_fd)
        except OSError as exc:
            raise OSError(exc.errno, "Unable to query screen size") from exc
        # Two lines are kept for the status bar and the message line.
        self.cfg.screenrows = max(1, rows - 2)
        self.cfg.screencols = max(1, cols)
        logger.debug("Window size %dx%d", cols, rows)

    def handle_sigwinch(self, _signum: int, _frame) -> None:
        self.update_window_size()
        self.refresh_screen()

    def set_status_message(self, fmt: str, *args: object) -> None:
        self.cfg.statusmsg = fmt % args if args else fmt
        self.cfg.statusmsg_time = time.time()

    def select_syntax_highlight(self, filename: str | None) -> None:
        select_syntax_highlight(self.cfg, filename)

    def clear_screen(self) -> None:
        os.write(self.stdout_fd, (ANSI_CLEAR_SCREEN + ANSI_CURSOR_HOME).encode())

    def insert_char(self, c: int) -> None:
        cfg = self.cfg
        if cfg.cy == cfg.numrows:
            insert_row(cfg, cfg.numrows, "")
        row_insert_char(cfg, cfg.rows[cfg.cy], cfg.cx, chr(c & 0xFF))
        cfg.cx += 1

    def insert_newline(self) -> None:
        cfg = self.cfg
        if cfg.cy >= cfg.numrows:
            insert_row(cfg, cfg.numrows, "")
        else:
            split_row(cfg, cfg.cy, cfg.cx)
        cfg.cy += 1
        cfg.cx = 0

    def del_char(self) -> None:
        cfg = self.cfg
        if cfg.cy == cfg.numrows:
            return
        if cfg.cx == 0 and cfg.cy == 0:
            return

        row = cfg.rows[cfg.cy]
        if cfg.cx > 0:
            row_del_char(cfg, row, cfg.cx - 1)
            cfg.cx -= 1
        else:
            prev = cfg.rows[cfg.cy - 1]
            cfg.cx = prev.size
            row_append_string(cfg, prev, row.chars)
            del_row(cfg, cfg.cy)
            cfg.cy -= 1

    def open_file(self, filename: str) -> None:
        self.cfg.filename = filename
        self.select_syntax_highlight(filename)
        try:
            with open(filename, "rb") as f:
                for line in f:
                    # Latin-1 maps every byte to exactly one character.
                    insert_row(self.cfg, self.cfg.numrows, line.rstrip(b"\r\n").decode("latin-1"))
        except OSError as exc:
            raise OSError(exc.errno, f"Opening file failed: {filename}") from exc
        self.cfg.dirty = 0
        logger.info("Opened %s (%d lines)", filename, self.cfg.numrows)

    def save(self) -> bool:
        cfg = self.cfg
        if not cfg.filename:
            filename = self.prompt(PromptSession("Save as: %s (ESC to cancel)"))
            if filename is None:
                self.set_status_message("Save aborted")
                return False
            cfg.filename = filename
            self.select_syntax_highlight(filename)

        data = rows_to_string(cfg).encode("latin-1")
        fd = -1
        try:
            fd = os.open(cfg.filename, os.O_RDWR | os.O_CREAT, 0o644)
            os.ftruncate(fd, len(data))
            written = 0
            while written < len(data):
                n = os.write(fd, data[written:])
                if n <= 0:
                    raise OSError(errno.EIO, "short write")
                written += n
        except OSError as exc:
            if fd != -1:
                os.close(fd)
            logger.warning("Saving %s failed: %s", cfg.filename, exc)
            self.set_status_message("Can't save! I/O error: %s", os.strerror(exc.errno or errno.EIO))
            return False

        os.close(fd)
        cfg.dirty = 0
        logger.info("Wrote %d bytes to %s", len(data), cfg.filename)
        self.set_status_message("%d bytes written to disk", len(data))
        return True

    def refresh_screen(self) -> None:
        refresh_screen(self)

    def prompt(self, session: PromptSession) -> str | None:
        """Run *session* to completion, one key per redraw.

        Returns the entered text, or ``None`` when the user cancelled.
        """
        while True:
            self.set_status_message(session.message())
            self.refresh_screen()
            result = session.on_key(read_key(self.stdin_fd))
            if result.status is PromptStatus.CONTINUE:
                continue
            self.set_status_message("")
            return result.value if result.status is PromptStatus.CONFIRMED else None

    def find(self) -> None:
        query = self.prompt(SearchSession(self.cfg))
        logger.debug("Search finished: %r", query)

    def move_cursor(self, key: int) -> None:
        cfg = self.cfg
        row = cfg.current_row()

        if key == ARROW_LEFT:
            if cfg.cx != 0:
                cfg.cx -= 1
            elif cfg.cy > 0:
                cfg.cy -= 1
                cfg.cx = cfg.rows[cfg.cy].size
        elif key == ARROW_RIGHT:
            if row is not None and cfg.cx < row.size:
                cfg.cx += 1
            elif row is not None and cfg.cx == row.size:
                cfg.cy += 1
                cfg.cx = 0
        elif key == ARROW_UP:
            if cfg.cy != 0:
                cfg.cy -= 1
        elif key == ARROW_DOWN:
            if cfg.cy < cfg.numrows:
                cfg.cy += 1

        row = cfg.current_row()
        rowlen = row.size if row is not None else 0
        if cfg.cx > rowlen:
            cfg.cx = rowlen

    def process_keypress(self) -> None:
        self.handle_key(read_key(self.stdin_fd))

    def handle_key(self, c: int) -> None:
        cfg = self.cfg
        if c == ENTER:
            self.insert_newline()
        elif c == CTRL_Q:
            if cfg.dirty and self.quit_times > 0:
                self.set_status_message(
                    "WARNING!!! File has unsaved changes. Press Ctrl-Q %d more times to quit.",
                    self.quit_times,
                )
                self.quit_times -= 1
                return
            self.clear_screen()
            raise SystemExit(0)
        elif c == CTRL_S:
            self.save()
        elif c == CTRL_F:
            self.find()
        elif c in (CTRL_L, ESC):
            pass
        elif c in (BACKSPACE, CTRL_H, DEL_KEY):
            if c == DEL_KEY:
                self.move_cursor(ARROW_RIGHT)
            self.del_char()
        elif c in (ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT):
            self.move_cursor(c)
        elif c == HOME_KEY:
            cfg.cx = 0
        elif c == END_KEY:
            if cfg.cy < cfg.numrows:
                cfg.cx = cfg.rows[cfg.cy].size
        elif c in (PAGE_UP, PAGE_DOWN):
            if c == PAGE_UP:
                cfg.cy = cfg.rowoff
            else:
                cfg.cy = min(cfg.rowoff + cfg.screenrows - 1, cfg.numrows)
            for _ in range(cfg.screenrows):
                self.move_cursor(ARROW_UP if c == PAGE_UP else ARROW_DOWN)
        elif c < 256:
            self.insert_char(c)

        self.quit_times = self.quit_times_default


def run(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print("Usage: texc [filename]", file=sys.stderr)
        return 1

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    if not os.isatty(stdin_fd) or not os.isatty(stdout_fd):
        print("texc: stdin/stdout must be a tty", file=sys.stderr)
        return 1

    settings = load_config()
    setup_logging(settings)
    editor = Editor(stdin_fd, stdout_fd, settings)

    try:
        with RawMode(stdin_fd):
            editor.update_window_size()
            if args:
                editor.open_file(args[0])
            signal.signal(signal.SIGWINCH, editor.handle_sigwinch)
            editor.set_status_message("HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find")
            while True:
                editor.refresh_screen()
                editor.process_keypress()
    except SystemExit as exc:
        logger.info("Exiting")
        if isinstance(exc.code, int):
            return exc.code
        return 0
    except OSError as exc:
        editor.clear_screen()
        logger.error("Fatal error: %s", exc, exc_info=True)
        print(f"texc: {exc}", file=sys.stderr)
        return 1
