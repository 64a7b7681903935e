"""VT100-style terminal output and key input on top of termios."""

from __future__ import annotations

import enum
import os
import select
import sys
from collections.abc import Callable
from typing import TextIO

MIN_WAIT_MS = 150
COLOR_DEFAULT = 9
_ESC = 0x1B
_CTRL_H = 0x08


class Key(enum.IntEnum):
    """Codes for keys that do not map to a single character."""

    DOWN = 0o402
    UP = 0o403
    LEFT = 0o404
    RIGHT = 0o405
    HOME = 0o406
    BACKSPACE = 0o407
    DELETE = 0o512
    PAGE_DOWN = 0o522
    PAGE_UP = 0o523
    END = 0o550


_CSI_LETTERS = {
    "A": Key.UP,
    "B": Key.DOWN,
    "C": Key.RIGHT,
    "D": Key.LEFT,
    "H": Key.HOME,
    "F": Key.END,
}

_CSI_TILDE = {
    "1": Key.HOME,
    "7": Key.HOME,
    "3": Key.DELETE,
    "4": Key.END,
    "8": Key.END,
    "5": Key.PAGE_UP,
    "6": Key.PAGE_DOWN,
}

_SS3_HIGH = {chr(ord(letter) | 0x80): key for letter, key in _CSI_LETTERS.items()}


def decode_escape(read: Callable[[], str]) -> int:
    """Decode the rest of an escape sequence whose ESC was already read.

    *read* returns the next input character, or an empty string at the end.
    Unknown sequences come back as a plain ESC.
    """
    ch = read()
    if ch == "\x1b":
        return _ESC
    if ch == "[":
        ch = read()
        if ch in _CSI_LETTERS:
            return _CSI_LETTERS[ch]
        if ch in _CSI_TILDE and read() == "~":
            return _CSI_TILDE[ch]
    elif ch == "0":
        ch = read()
        if ch in _SS3_HIGH:
            return _SS3_HIGH[ch]
    return _ESC


class Terminal:
    """A terminal driven by escape sequences, reading keys in raw mode."""

    def __init__(self, out: TextIO | None = None, inp: TextIO | None = None) -> None:
        self._out = sys.stdout if out is None else out
        self._inp = sys.stdin if inp is None else inp
        self._saved: list | None = None
        self.timeout_ms = MIN_WAIT_MS
        self.rows = 24
        self.cols = 80

    def __enter__(self) -> Terminal:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _fileno(self) -> int | None:
        try:
            return self._inp.fileno()
        except (OSError, ValueError):
            return None

    def start(self) -> None:
        """Put the input terminal into raw mode, remembering its settings."""
        import termios

        fd = self._fileno()
        if fd is None or not os.isatty(fd):
            raise OSError("Cannot start terminal: not a tty")
        try:
            saved = termios.tcgetattr(fd)
        except termios.error as exc:
            raise OSError("Cannot start terminal: tcgetattr() fail") from exc
        self._saved = saved
        raw = [*saved[:6], list(saved[6])]
        raw[0] &= ~(
            termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON
        )
        raw[2] |= termios.CS8
        raw[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        raw[6][termios.VMIN] = 0
        raw[6][termios.VTIME] = 8
        try:
            termios.tcsetattr(fd, termios.TCSAFLUSH, raw)
        except termios.error as exc:
            raise OSError("Cannot start terminal: tcsetattr() fail") from exc

    def stop(self) -> None:
        """Restore the settings saved by start(); does nothing if start() never ran."""
        if self._saved is None:
            return
        import termios

        fd = self._fileno()
        saved, self._saved = self._saved, None
        if fd is None:
            return
        try:
            termios.tcsetattr(fd, termios.TCSAFLUSH, saved)
        except termios.error as exc:
            raise OSError("Cannot restore terminal: tcsetattr() fail") from exc

    def size(self) -> tuple[int, int]:
        """Query and remember the window size as (rows, columns).

        Falls back to 20 rows by 73 columns when it cannot be read.
        """
        fd = self._fileno()
        try:
            if fd is None:
                raise OSError("no file descriptor")
            cols, rows = os.get_terminal_size(fd)
        except OSError:
            rows, cols = 20, 73
        self.rows, self.cols = rows, cols
        return rows, cols

    def set_timeout(self, ms: int) -> None:
        """Set how long get_key() waits; negative waits forever.

        Non-negative values below the minimum are raised to it.
        """
        if 0 <= ms < MIN_WAIT_MS:
            ms = MIN_WAIT_MS
        self.timeout_ms = ms

    def _emit(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()

    def set_cursor(self, visible: bool) -> None:
        """Show or hide the cursor."""
        self._emit("\033[?25h" if visible else "\033[?25l")

    def move(self, row: int, col: int) -> None:
        """Move the cursor to a zero-based row and a column."""
        self._emit(f"\033[{row + 1};{col}H")

    def bold(self, on: bool) -> None:
        """Turn bold text on or off."""
        self._emit(f"\033[{1 if on else 22}m")

    def reverse(self, on: bool) -> None:
        """Turn reverse video on or off."""
        self._emit(f"\033[{7 if on else 27}m")

    def plain(self) -> None:
        """Reset all text attributes."""
        self._emit("\033[0m")

    def clear(self) -> None:
        """Reset attributes, home the cursor and erase the screen."""
        self.plain()
        self.move(0, 0)
        self._emit("\033[2J")

    @staticmethod
    def _color(color: int) -> int:
        return color if color == COLOR_DEFAULT else color & 7

    def set_foreground(self, color: int) -> None:
        """Set the text colour (0-7, or COLOR_DEFAULT)."""
        self._emit(f"\033[3{self._color(color)}m")

    def set_background(self, color: int) -> None:
        """Set the background colour (0-7, or COLOR_DEFAULT)."""
        self._emit(f"\033[4{self._color(color)}m")

    def write(self, text: str) -> None:
        """Write text at the cursor."""
        self._emit(text)

    def put_char(self, c: str) -> None:
        """Write one character, turning a newline into carriage return and newline."""
        self._emit("\r\n" if c == "\n" else c)

    def _ready(self) -> bool:
        if self.timeout_ms < 0:
            return True
        fd = self._fileno()
        if fd is None:
            return True
        readable, _, _ = select.select([fd], [], [], self.timeout_ms / 1000)
        return bool(readable)

    def _read(self) -> str:
        return self._inp.read(1)

    def get_key(self) -> int | None:
        """Read one key code, or None on timeout, error or end of input."""
        try:
            if not self._ready():
                return None
        except OSError:
            return None
        ch = self._read()
        if not ch:
            return None
        if ch == "\r":
            return ord("\n")
        if ch == "\x1b":
            return decode_escape(self._read)
        if ord(ch) == _CTRL_H:
            return Key.BACKSPACE
        return ord(ch)

    def space_print(self, row: int, col: int, length: int) -> None:
        """Blank *length* columns starting at (row, col)."""
        self.move(row, col)
        if length > 0:
            self._emit(" " * length)

    def highlight(self, text: str) -> None:
        """Write text where ``^`` starts bold and a backquote ends it."""
        for ch in text:
            if ch == "^":
                self.bold(True)
            elif ch == "`":
                self.bold(False)
            else:
                self.put_char(ch)
        self.bold(False)