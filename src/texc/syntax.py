from __future__ import annotations

import logging
from collections import deque

from .constants import (
    C_HL_EXTENSIONS,
    C_HL_KEYWORDS,
    HL_COMMENT,
    HL_KEYWORD1,
    HL_KEYWORD2,
    HL_MATCH,
    HL_MLCOMMENT,
    HL_NORMAL,
    HL_NUMBER,
    HL_STRING,
    SEPARATORS,
)
from .models import EditorConfig, EditorSyntax, Row

logger = logging.getLogger(__name__)

HLDB: tuple[EditorSyntax, ...] = (
    EditorSyntax(
        filetype="c",
        filematch=C_HL_EXTENSIONS,
        keywords=C_HL_KEYWORDS,
        singleline_comment_start="//",
        multiline_comment_start="/*",
        multiline_comment_end="*/",
        highlight_numbers=True,
        highlight_strings=True,
    ),
)

# C isspace(); str.isspace() also accepts latin-1 blanks such as 0xA0.
_WHITESPACE = " \t\n\v\f\r"


def is_separator(c: str) -> bool:
    return not c or c in _WHITESPACE or c in SEPARATORS


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def syntax_to_color(hl: int) -> int:
    if hl == HL_NUMBER:
        return 31
    if hl in (HL_COMMENT, HL_MLCOMMENT):
        return 32
    if hl == HL_STRING:
        return 33
    if hl == HL_MATCH:
        return 34
    if hl == HL_KEYWORD1:
        return 35
    if hl == HL_KEYWORD2:
        return 36
    return 37


def select_syntax_highlight(config: EditorConfig, filename: str | None) -> None:
    """Pick the HLDB entry matching *filename* and rehighlight every row.

    Patterns starting with a dot must equal the file's last extension;
    any other pattern matches anywhere in the name.
    """
    config.syntax = None
    if not filename:
        return
    dot = filename.rfind(".")
    ext = filename[dot:] if dot != -1 else None
    for syntax in HLDB:
        for pattern in syntax.filematch:
            is_ext = pattern.startswith(".")
            if (is_ext and ext == pattern) or (not is_ext and pattern in filename):
                config.syntax = syntax
                logger.debug("Selected syntax %r for %s", syntax.filetype, filename)
                for row in config.rows:
                    update_syntax(config, row.idx)
                return


def update_syntax(config: EditorConfig, idx: int) -> None:
    """Rehighlight row *idx*, then every following row whose incoming
    comment state changed as a result."""
    pending: deque[int] = deque([idx])
    while pending:
        at = pending.popleft()
        if _highlight_row(config, config.rows[at]) and at + 1 < config.numrows:
            pending.append(at + 1)


def _highlight_row(config: EditorConfig, row: Row) -> bool:
    row.hl = [HL_NORMAL] * row.rsize
    syntax = config.syntax
    if syntax is None:
        return False

    keywords = syntax.keywords
    scs = syntax.singleline_comment_start
    mcs = syntax.multiline_comment_start
    mce = syntax.multiline_comment_end

    p = row.render
    n = len(p)
    hl = row.hl

    prev_sep = True
    in_string = ""
    in_comment = row.idx > 0 and config.rows[row.idx - 1].hl_oc

    i = 0
    while i < n:
        c = p[i]
        prev_hl = hl[i - 1] if i > 0 else HL_NORMAL

        if scs and not in_string and not in_comment:
            if p.startswith(scs, i):
                hl[i:] = [HL_COMMENT] * (n - i)
                break

        if mcs and mce and not in_string:
            if in_comment:
                hl[i] = HL_MLCOMMENT
                if p.startswith(mce, i):
                    hl[i : i + len(mce)] = [HL_MLCOMMENT] * len(mce)
                    i += len(mce)
                    in_comment = False
                    prev_sep = True
                    continue
                i += 1
                continue
            if p.startswith(mcs, i):
                hl[i : i + len(mcs)] = [HL_MLCOMMENT] * len(mcs)
                i += len(mcs)
                in_comment = True
                continue

        if syntax.highlight_strings:
            if in_string:
                hl[i] = HL_STRING
                if c == "\\" and i + 1 < n:
                    hl[i + 1] = HL_STRING
                    i += 2
                    continue
                if c == in_string:
                    in_string = ""
                i += 1
                prev_sep = True
                continue
            if c in ('"', "'"):
                in_string = c
                hl[i] = HL_STRING
                i += 1
                continue

        if syntax.highlight_numbers:
            # Permissive: "1.2.3" is one number.
            if (_is_digit(c) and (prev_sep or prev_hl == HL_NUMBER)) or (
                c == "." and prev_hl == HL_NUMBER
            ):
                hl[i] = HL_NUMBER
                i += 1
                prev_sep = False
                continue

        if prev_sep:
            matched = False
            for kw in keywords:
                kw2 = kw.endswith("|")
                token = kw[:-1] if kw2 else kw
                klen = len(token)
                tail = p[i + klen] if i + klen < n else ""
                if p.startswith(token, i) and is_separator(tail):
                    hl[i : i + klen] = [HL_KEYWORD2 if kw2 else HL_KEYWORD1] * klen
                    i += klen
                    matched = True
                    break
            if matched:
                prev_sep = False
                continue

        prev_sep = is_separator(c)
        i += 1

    changed = row.hl_oc != in_comment
    row.hl_oc = in_comment
    return changed
