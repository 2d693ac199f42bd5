from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING

from .constants import (
    ANSI_CLEAR_LINE,
    ANSI_CURSOR_HOME,
    ANSI_DEFAULT_FG,
    ANSI_HIDE_CURSOR,
    ANSI_INVERT_OFF,
    ANSI_INVERT_ON,
    ANSI_SHOW_CURSOR,
    HL_NORMAL,
    TEXC_VERSION,
)
from .models import EditorConfig, Row
from .rows import row_cx_to_rx
from .syntax import syntax_to_color

if TYPE_CHECKING:
    from .editor import Editor


def is_control(ch: str) -> bool:
    code = ord(ch)
    return code < 32 or code == 127


def scroll(cfg: EditorConfig) -> None:
    row = cfg.current_row()
    cfg.rx = row_cx_to_rx(row, cfg.cx) if row is not None else 0

    if cfg.cy < cfg.rowoff:
        cfg.rowoff = cfg.cy
    if cfg.cy >= cfg.rowoff + cfg.screenrows:
        cfg.rowoff = cfg.cy - cfg.screenrows + 1
    if cfg.rx < cfg.coloff:
        cfg.coloff = cfg.rx
    if cfg.rx >= cfg.coloff + cfg.screencols:
        cfg.coloff = cfg.rx - cfg.screencols + 1


def draw_welcome(cfg: EditorConfig, ab: list[str]) -> None:
    welcome = f"texc editor {TEXC_VERSION}"
    if len(welcome) > cfg.screencols:
        welcome = welcome[: cfg.screencols]
    padding = (cfg.screencols - len(welcome)) // 2
    if padding:
        ab.append("~")
        padding -= 1
    if padding > 0:
        ab.append(" " * padding)
    ab.append(welcome)


def draw_row(cfg: EditorConfig, row: Row, ab: list[str]) -> None:
    length = min(max(row.rsize - cfg.coloff, 0), cfg.screencols)
    chars = row.render[cfg.coloff : cfg.coloff + length]
    hl = row.hl[cfg.coloff : cfg.coloff + length]
    current_color = -1
    for ch, h in zip(chars, hl):
        if is_control(ch):
            sym = chr(ord("@") + ord(ch)) if ord(ch) <= 26 else "?"
            ab.append(ANSI_INVERT_ON)
            ab.append(sym)
            ab.append(ANSI_INVERT_OFF)
            if current_color != -1:
                ab.append(f"\x1b[{current_color}m")
        elif h == HL_NORMAL:
            if current_color != -1:
                ab.append(ANSI_DEFAULT_FG)
                current_color = -1
            ab.append(ch)
        else:
            color = syntax_to_color(h)
            if color != current_color:
                current_color = color
                ab.append(f"\x1b[{color}m")
            ab.append(ch)
    ab.append(ANSI_DEFAULT_FG)


def draw_rows(cfg: EditorConfig, ab: list[str]) -> None:
    for y in range(cfg.screenrows):
        filerow = cfg.rowoff + y
        if filerow >= cfg.numrows:
            if cfg.numrows == 0 and y == cfg.screenrows // 3:
                draw_welcome(cfg, ab)
            else:
                ab.append("~")
        else:
            draw_row(cfg, cfg.rows[filerow], ab)
        ab.append(ANSI_CLEAR_LINE)
        ab.append("\r\n")


def draw_status_bar(cfg: EditorConfig, ab: list[str]) -> None:
    ab.append(ANSI_INVERT_ON)
    filename = cfg.filename if cfg.filename else "[No Name]"
    status = f"{filename:.20} - {cfg.numrows} lines {'(modified)' if cfg.dirty else ''}"
    filetype = cfg.syntax.filetype if cfg.syntax is not None else "no ft"
    rstatus = f"{filetype} | {cfg.cy + 1}/{cfg.numrows}"
    if len(status) > cfg.screencols:
        status = status[: cfg.screencols]
    ab.append(status)
    fill = len(status)
    while fill < cfg.screencols:
        if cfg.screencols - fill == len(rstatus):
            ab.append(rstatus)
            break
        ab.append(" ")
        fill += 1
    ab.append(ANSI_INVERT_OFF)
    ab.append("\r\n")


def draw_message_bar(cfg: EditorConfig, ab: list[str], now: float) -> None:
    ab.append(ANSI_CLEAR_LINE)
    if cfg.statusmsg and now - cfg.statusmsg_time < cfg.statusmsg_timeout:
        ab.append(cfg.statusmsg[: cfg.screencols])


def compose_frame(cfg: EditorConfig, now: float | None = None) -> bytes:
    """Scroll, then build one complete frame as terminal bytes."""
    scroll(cfg)
    ab: list[str] = [ANSI_HIDE_CURSOR, ANSI_CURSOR_HOME]
    draw_rows(cfg, ab)
    draw_status_bar(cfg, ab)
    draw_message_bar(cfg, ab, time.time() if now is None else now)
    ab.append(f"\x1b[{cfg.cy - cfg.rowoff + 1};{cfg.rx - cfg.coloff + 1}H")
    ab.append(ANSI_SHOW_CURSOR)
    # One str char per byte; see Editor.open_file.
    return "".join(ab).encode("latin-1", errors="replace")


def refresh_screen(editor: Editor) -> None:
    os.write(editor.stdout_fd, compose_frame(editor.cfg))
