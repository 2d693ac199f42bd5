from __future__ import annotations

TEXC_VERSION = "0.0.1"
TEXC_TAB_STOP = 8
TEXC_QUIT_TIMES = 2
TEXC_STATUS_TIMEOUT = 5

# Syntax highlight types.
HL_NORMAL = 0
HL_STRING = 1
HL_NUMBER = 2
HL_COMMENT = 3
HL_MLCOMMENT = 4
HL_KEYWORD1 = 5
HL_KEYWORD2 = 6
HL_MATCH = 7

SEPARATORS = ",.()+-/*=~%<>[];"

# Key actions.
KEY_NULL = 0
CTRL_F = 6
CTRL_H = 8
TAB = 9
CTRL_L = 12
ENTER = 13
CTRL_Q = 17
CTRL_S = 19
ESC = 27
BACKSPACE = 127

ARROW_LEFT = 1000
ARROW_RIGHT = 1001
ARROW_UP = 1002
ARROW_DOWN = 1003
DEL_KEY = 1004
HOME_KEY = 1005
END_KEY = 1006
PAGE_UP = 1007
PAGE_DOWN = 1008

# ESC [ <digit> ~
CSI_TILDE_MAP = {
    ord("1"): HOME_KEY,
    ord("3"): DEL_KEY,
    ord("4"): END_KEY,
    ord("5"): PAGE_UP,
    ord("6"): PAGE_DOWN,
    ord("7"): HOME_KEY,
    ord("8"): END_KEY,
}
# ESC [ <letter>
CSI_SIMPLE_MAP = {
    ord("A"): ARROW_UP,
    ord("B"): ARROW_DOWN,
    ord("C"): ARROW_RIGHT,
    ord("D"): ARROW_LEFT,
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}
# ESC O <letter>
SS3_SIMPLE_MAP = {
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}

ANSI_HIDE_CURSOR = "\x1b[?25l"
ANSI_SHOW_CURSOR = "\x1b[?25h"
ANSI_CURSOR_HOME = "\x1b[H"
ANSI_CLEAR_SCREEN = "\x1b[2J"
ANSI_CLEAR_LINE = "\x1b[K"
ANSI_INVERT_ON = "\x1b[7m"
ANSI_INVERT_OFF = "\x1b[m"
ANSI_DEFAULT_FG = "\x1b[39m"

C_HL_EXTENSIONS = (".c", ".h", ".cpp")
C_HL_KEYWORDS = (
    # Statements.
    "switch",
    "if",
    "while",
    "for",
    "break",
    "continue",
    "return",
    "else",
    "struct",
    "union",
    "typedef",
    "static",
    "enum",
    "class",
    "case",
    # Base types.
    "int",
    "long",
    "double",
    "float",
    "char",
    "void",
    # Sign modifiers (secondary class).
    "unsigned|",
    "signed|",
)
