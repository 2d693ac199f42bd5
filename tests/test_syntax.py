"""C highlighter: token classes, comment cascade and filetype selection."""

from __future__ import annotations

import pytest

from texc.constants import (
    HL_COMMENT,
    HL_KEYWORD1,
    HL_KEYWORD2,
    HL_MATCH,
    HL_MLCOMMENT,
    HL_NORMAL,
    HL_NUMBER,
    HL_STRING,
)
from texc.rows import del_row, insert_row, row_del_char, row_insert_char
from texc.syntax import HLDB, is_separator, select_syntax_highlight, syntax_to_color, update_syntax


def test_comment_and_keyword_rows(cfg, add_rows):
    add_rows(cfg, "// hi", "int x;")
    select_syntax_highlight(cfg, "test.c")

    assert cfg.syntax is HLDB[0]
    assert cfg.rows[0].hl == [HL_COMMENT] * 5
    assert cfg.rows[1].hl == [HL_KEYWORD1] * 3 + [HL_NORMAL] * 3


def test_secondary_keywords(c_cfg, add_rows):
    add_rows(c_cfg, "unsigned char c;")
    hl = c_cfg.rows[0].hl
    assert hl[:8] == [HL_KEYWORD2] * 8
    assert hl[8] == HL_NORMAL
    assert hl[9:13] == [HL_KEYWORD1] * 4


@pytest.mark.parametrize("line", ["internal = 1;", "x_if = 2;", "ifx;"])
def test_keywords_need_separators_on_both_sides(c_cfg, add_rows, line):
    add_rows(c_cfg, line)
    hl = c_cfg.rows[0].hl
    assert HL_KEYWORD1 not in hl
    assert HL_KEYWORD2 not in hl


def test_keyword_at_end_of_row(c_cfg, add_rows):
    add_rows(c_cfg, "x = (int")
    assert c_cfg.rows[0].hl[-3:] == [HL_KEYWORD1] * 3


def test_string_with_escaped_quote(c_cfg, add_rows):
    add_rows(c_cfg, 'a = "x\\"y";')
    hl = c_cfg.rows[0].hl
    assert hl[:4] == [HL_NORMAL] * 4
    assert hl[4:10] == [HL_STRING] * 6
    assert hl[10] == HL_NORMAL


def test_comment_marker_inside_string(c_cfg, add_rows):
    add_rows(c_cfg, 's = "// not";')
    hl = c_cfg.rows[0].hl
    assert HL_COMMENT not in hl
    assert hl[4:12] == [HL_STRING] * 8


def test_single_quoted_char(c_cfg, add_rows):
    add_rows(c_cfg, "c = 'a';")
    assert c_cfg.rows[0].hl[4:7] == [HL_STRING] * 3


def test_permissive_numbers(c_cfg, add_rows):
    add_rows(c_cfg, "v = 1.2.3;", "abc1 = 42;")
    first, second = c_cfg.rows
    assert first.hl[4:9] == [HL_NUMBER] * 5
    assert first.hl[9] == HL_NORMAL
    assert HL_NUMBER not in second.hl[:4]
    assert second.hl[7:9] == [HL_NUMBER] * 2


def test_open_block_comment_continues_on_next_row(c_cfg, add_rows):
    add_rows(c_cfg, "x /* open", "still", "done */ y")
    first, second, third = c_cfg.rows

    assert first.hl[:2] == [HL_NORMAL] * 2
    assert first.hl[2:] == [HL_MLCOMMENT] * 7
    assert first.hl_oc
    assert second.hl == [HL_MLCOMMENT] * 5
    assert third.hl[:7] == [HL_MLCOMMENT] * 7
    assert third.hl[7:] == [HL_NORMAL] * 2
    assert not third.hl_oc


def test_removing_the_opener_uncomments_following_rows(c_cfg, add_rows):
    add_rows(c_cfg, "/*", "int a;", "int b;")
    assert c_cfg.rows[2].hl == [HL_MLCOMMENT] * 6

    row = c_cfg.rows[0]
    row_del_char(c_cfg, row, 1)
    row_del_char(c_cfg, row, 0)

    assert not c_cfg.rows[0].hl_oc
    for r in c_cfg.rows[1:]:
        assert r.hl[:3] == [HL_KEYWORD1] * 3
        assert not r.hl_oc


def test_closing_marker_in_later_row_stops_cascade(c_cfg, add_rows):
    add_rows(c_cfg, "a", "b", "c */", "int z;")
    row_insert_char(c_cfg, c_cfg.rows[0], 0, "*")
    row_insert_char(c_cfg, c_cfg.rows[0], 0, "/")
    assert c_cfg.rows[1].hl == [HL_MLCOMMENT]
    assert c_cfg.rows[2].hl == [HL_MLCOMMENT] * 4
    assert c_cfg.rows[3].hl[:3] == [HL_KEYWORD1] * 3


def test_long_cascade_runs_without_recursion(c_cfg, add_rows):
    add_rows(c_cfg, "", *["x = 1;"] * 3000)
    row_insert_char(c_cfg, c_cfg.rows[0], 0, "*")
    row_insert_char(c_cfg, c_cfg.rows[0], 0, "/")
    assert all(r.hl_oc for r in c_cfg.rows)
    assert c_cfg.rows[-1].hl == [HL_MLCOMMENT] * 6

    del_row(c_cfg, 0)
    assert not any(r.hl_oc for r in c_cfg.rows)
    assert c_cfg.rows[-1].hl[4] == HL_NUMBER


def test_rehighlighting_is_idempotent(c_cfg, add_rows):
    add_rows(c_cfg, "/* a", "b */ int c = 'd'; // e", 'char *s = "f";')
    before = [(list(r.hl), r.hl_oc) for r in c_cfg.rows]
    for r in c_cfg.rows:
        update_syntax(c_cfg, r.idx)
    assert [(r.hl, r.hl_oc) for r in c_cfg.rows] == before


def test_no_syntax_leaves_everything_normal(cfg, add_rows):
    add_rows(cfg, "int x = 1; // c", "/* y")
    for row in cfg.rows:
        assert row.hl == [HL_NORMAL] * row.rsize
        assert not row.hl_oc


def test_highlight_covers_render_not_chars(c_cfg, add_rows):
    add_rows(c_cfg, "\tint")
    row = c_cfg.rows[0]
    assert len(row.hl) == 11
    assert row.hl[8:] == [HL_KEYWORD1] * 3


@pytest.mark.parametrize(
    "filename, filetype",
    [
        ("main.c", "c"),
        ("defs.h", "c"),
        ("lib.cpp", "c"),
        ("dir.c/notes.txt", None),
        ("foo.c.txt", None),
        ("script.py", None),
        ("Makefile", None),
        (None, None),
    ],
)
def test_select_by_extension(cfg, filename, filetype):
    select_syntax_highlight(cfg, filename)
    assert (cfg.syntax.filetype if cfg.syntax else None) == filetype


def test_switching_to_plain_text_clears_syntax(c_cfg):
    select_syntax_highlight(c_cfg, "notes.txt")
    assert c_cfg.syntax is None


@pytest.mark.parametrize(
    "hl, color",
    [
        (HL_NUMBER, 31),
        (HL_COMMENT, 32),
        (HL_MLCOMMENT, 32),
        (HL_STRING, 33),
        (HL_MATCH, 34),
        (HL_KEYWORD1, 35),
        (HL_KEYWORD2, 36),
        (HL_NORMAL, 37),
    ],
)
def test_syntax_to_color(hl, color):
    assert syntax_to_color(hl) == color


@pytest.mark.parametrize("c", ["", " ", "\t", ",", ".", "(", ")", "+", ";", "[", "~", "%"])
def test_separators(c):
    assert is_separator(c)


@pytest.mark.parametrize("c", ["a", "_", "0", "{", '"', "\xa0"])
def test_non_separators(c):
    assert not is_separator(c)


def test_insert_row_inside_comment_starts_commented(c_cfg, add_rows):
    add_rows(c_cfg, "/* open", "tail")
    insert_row(c_cfg, 1, "int q;")
    assert c_cfg.rows[1].hl == [HL_MLCOMMENT] * 6
    assert c_cfg.rows[2].hl == [HL_MLCOMMENT] * 4


def test_storage_class_is_primary_and_qualifiers_are_plain(c_cfg, add_rows):
    add_rows(c_cfg, "static const int n;")
    hl = c_cfg.rows[0].hl
    assert hl[:6] == [HL_KEYWORD1] * 6
    assert hl[7:12] == [HL_NORMAL] * 5
    assert hl[13:16] == [HL_KEYWORD1] * 3
