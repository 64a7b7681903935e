"""Single-line text editing on a terminal."""

from __future__ import annotations

from collections.abc import Iterable

from .terminal import Key, Terminal

_DEL = 0o177
_CTRL_H = 0x08
_ESC = 0x1B
_NEWLINE = ord("\n")
_PRINTABLE = range(0x20, 0x7F)


class LineBuffer:
    """Text being edited, with a cursor and a size limit.

    At most ``limit - 1`` characters may be typed into the buffer.
    """

    def __init__(self, text: str = "", limit: int = 256, cursor: int = 0) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.text = text
        self.limit = limit
        self.cursor = min(max(cursor, 0), len(text))

    def feed(self, key: int) -> int | None:
        """Apply one key.

        Returns the key if it finishes editing (newline or ESC), otherwise
        None. Raises OverflowError when a character does not fit.
        """
        text, pos = self.text, self.cursor
        if key in (_DEL, Key.BACKSPACE, _CTRL_H):
            if pos > 0:
                self.text = text[: pos - 1] + text[pos:]
                self.cursor = pos - 1
        elif key == Key.DELETE:
            if pos < len(text):
                self.text = text[:pos] + text[pos + 1 :]
        elif key == Key.LEFT:
            if pos > 0:
                self.cursor = pos - 1
        elif key == Key.RIGHT:
            if pos < len(text):
                self.cursor = pos + 1
        elif key in (_NEWLINE, _ESC):
            return key
        elif key in _PRINTABLE:
            if len(text) >= self.limit - 1:
                raise OverflowError("Too many characters")
            self.text = text[:pos] + chr(key) + text[pos:]
            self.cursor = pos + 1
        return None


def _key_codes(keys: Iterable[str | int]) -> set[int]:
    return {ord(k) if isinstance(k, str) else k for k in keys}


def _draw(term: Terminal, buf: LineBuffer, row: int, col: int) -> None:
    term.space_print(row, col, buf.limit)
    term.move(row, col)
    term.write(buf.text)
    term.move(row, col + buf.cursor)


def edit_line(
    term: Terminal,
    text: str,
    limit: int,
    row: int,
    col: int,
    cursor: int = 0,
    exit_keys: Iterable[str | int] = "",
) -> tuple[int, str, int]:
    """Let the user edit *text* in place at (row, col).

    Editing ends on newline, ESC or any of *exit_keys*. Returns the key
    that ended it, the edited text and the final cursor position.
    """
    buf = LineBuffer(text, limit, cursor)
    stops = _key_codes(exit_keys)
    term.set_cursor(True)
    while True:
        _draw(term, buf, row, col)
        key = term.get_key()
        if key is None:
            continue
        if key in stops:
            result = key
            break
        try:
            result = buf.feed(key)
        except OverflowError:
            term.write("\a")
            continue
        if result is not None:
            break
    _draw(term, buf, row, col)
    term.set_cursor(False)
    return result, buf.text, buf.cursor