from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from .constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_H,
    DEL_KEY,
    ENTER,
    ESC,
    HL_MATCH,
)
from .models import EditorConfig
from .rows import row_rx_to_cx

logger = logging.getLogger(__name__)


class PromptStatus(Enum):
    CONTINUE = auto()
    CONFIRMED = auto()
    CANCELLED = auto()


@dataclass(frozen=True, slots=True)
class PromptResult:
    status: PromptStatus
    value: str | None = None


PROMPT_CONTINUE = PromptResult(PromptStatus.CONTINUE)


class PromptSession:
    """Single-line input read one key at a time from the main loop.

    Subclasses hook into ``step`` (after every key that does not end the
    session) and ``finish`` (when the session is confirmed or cancelled).
    """

    def __init__(self, template: str) -> None:
        self.template = template
        self.buf = ""

    def message(self) -> str:
        return self.template % self.buf

    def on_key(self, key: int) -> PromptResult:
        if key in (DEL_KEY, CTRL_H, BACKSPACE):
            self.buf = self.buf[:-1]
        elif key == ESC:
            self.finish(key)
            return PromptResult(PromptStatus.CANCELLED)
        elif key == ENTER:
            if self.buf:
                self.finish(key)
                return PromptResult(PromptStatus.CONFIRMED, self.buf)
        elif 32 <= key < 127:
            self.buf += chr(key)
        self.step(key)
        return PROMPT_CONTINUE

    def step(self, key: int) -> None:
        pass

    def finish(self, key: int) -> None:
        pass


class SearchSession(PromptSession):
    """Incremental search over the render strings of every row.

    Arrow right/down step forward, left/up step backward, wrapping at both
    ends; any edit to the query restarts from the top. The current match is
    overlaid with ``HL_MATCH`` and the row's own highlight is put back before
    every step and on exit.
    """

    def __init__(self, cfg: EditorConfig) -> None:
        super().__init__("Search: %s (Use ESC/Arrows/Enter)")
        self.cfg = cfg
        self.last_match = -1
        self.direction = 1
        self.saved_hl_line = -1
        self.saved_hl: list[int] | None = None
        self.saved_cursor = (cfg.cx, cfg.cy, cfg.coloff, cfg.rowoff)

    def _restore_hl(self) -> None:
        if self.saved_hl is not None and 0 <= self.saved_hl_line < self.cfg.numrows:
            self.cfg.rows[self.saved_hl_line].hl = self.saved_hl
        self.saved_hl = None
        self.saved_hl_line = -1

    def finish(self, key: int) -> None:
        self._restore_hl()
        self.last_match = -1
        self.direction = 1
        if key == ESC:
            cfg = self.cfg
            cfg.cx, cfg.cy, cfg.coloff, cfg.rowoff = self.saved_cursor

    def step(self, key: int) -> None:
        self._restore_hl()
        if key in (ARROW_RIGHT, ARROW_DOWN):
            self.direction = 1
        elif key in (ARROW_LEFT, ARROW_UP):
            self.direction = -1
        else:
            self.last_match = -1
            self.direction = 1
        if self.buf:
            self.search()

    def search(self) -> bool:
        cfg = self.cfg
        if self.last_match == -1:
            self.direction = 1
        current = self.last_match
        for _ in range(cfg.numrows):
            current += self.direction
            if current == -1:
                current = cfg.numrows - 1
            elif current == cfg.numrows:
                current = 0
            row = cfg.rows[current]
            offset = row.render.find(self.buf)
            if offset == -1:
                continue

            self.last_match = current
            cfg.cy = current
            cfg.cx = row_rx_to_cx(row, offset)
            # Past the end so the next scroll puts the match on the top line.
            cfg.rowoff = cfg.numrows
            self.saved_hl_line = current
            self.saved_hl = row.hl.copy()
            end = min(offset + len(self.buf), row.rsize)
            row.hl[offset:end] = [HL_MATCH] * (end - offset)
            return True
        logger.debug("No match for %r", self.buf)
        return False
