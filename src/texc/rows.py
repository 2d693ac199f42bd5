from __future__ import annotations

from .constants import TEXC_TAB_STOP
from .models import EditorConfig, Row
from .syntax import update_syntax


def row_cx_to_rx(row: Row, cx: int) -> int:
    rx = 0
    for ch in row.chars[:cx]:
        if ch == "\t":
            rx += (TEXC_TAB_STOP - 1) - (rx % TEXC_TAB_STOP)
        rx += 1
    return rx


def row_rx_to_cx(row: Row, rx: int) -> int:
    cur_rx = 0
    for cx, ch in enumerate(row.chars):
        if ch == "\t":
            cur_rx += (TEXC_TAB_STOP - 1) - (cur_rx % TEXC_TAB_STOP)
        cur_rx += 1
        if cur_rx > rx:
            return cx
    return row.size


def update_row(config: EditorConfig, row: Row) -> None:
    out: list[str] = []
    for ch in row.chars:
        if ch == "\t":
            out.append(" ")
            while len(out) % TEXC_TAB_STOP != 0:
                out.append(" ")
        else:
            out.append(ch)
    row.render = "".join(out)
    update_syntax(config, row.idx)


def _reindex(config: EditorConfig, start: int) -> None:
    for j in range(start, config.numrows):
        config.rows[j].idx = j


def insert_row(config: EditorConfig, at: int, s: str) -> None:
    if at < 0 or at > config.numrows:
        return
    # Whatever row used to sit at `at` was highlighted against the comment
    # state of rows[at - 1]; starting from it makes a difference cascade.
    incoming = at > 0 and config.rows[at - 1].hl_oc
    row = Row(idx=at, chars=s, hl_oc=incoming)
    config.rows.insert(at, row)
    _reindex(config, at + 1)
    update_row(config, row)
    config.dirty += 1


def del_row(config: EditorConfig, at: int) -> None:
    if at < 0 or at >= config.numrows:
        return
    removed = config.rows.pop(at)
    _reindex(config, at)
    config.dirty += 1
    if at < config.numrows:
        incoming = at > 0 and config.rows[at - 1].hl_oc
        if incoming != removed.hl_oc:
            update_syntax(config, at)


def row_insert_char(config: EditorConfig, row: Row, at: int, c: str) -> None:
    if at < 0 or at > row.size:
        at = row.size
    row.chars = row.chars[:at] + c + row.chars[at:]
    update_row(config, row)
    config.dirty += 1


def row_append_string(config: EditorConfig, row: Row, s: str) -> None:
    row.chars += s
    update_row(config, row)
    config.dirty += 1


def row_del_char(config: EditorConfig, row: Row, at: int) -> None:
    if at < 0 or at >= row.size:
        return
    row.chars = row.chars[:at] + row.chars[at + 1 :]
    update_row(config, row)
    config.dirty += 1


def split_row(config: EditorConfig, idx: int, at: int) -> None:
    """Break row *idx* at char *at*, moving the tail onto a new row below."""
    row = config.rows[idx]
    at = max(0, min(at, row.size))
    if at == 0:
        insert_row(config, idx, "")
        return
    insert_row(config, idx + 1, row.chars[at:])
    row.chars = row.chars[:at]
    update_row(config, row)
    config.dirty += 1


def rows_to_string(config: EditorConfig) -> str:
    return "".join(f"{row.chars}\n" for row in config.rows)
