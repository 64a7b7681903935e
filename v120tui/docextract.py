"""Extract ``/* doc: ... */`` comments and the functions they describe."""

from __future__ import annotations

import sys
from collections.abc import Sequence

_BLANK = frozenset(" \t")
_SPACE = frozenset(" \t\n\r\v\f")
_NAME_MAX = 511


class _Source:
    """Character reader with push-back and repositioning."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self.eof = False

    def getc(self) -> str | None:
        if self._pos >= len(self._text):
            self.eof = True
            return None
        ch = self._text[self._pos]
        self._pos += 1
        return ch

    def ungetc(self, ch: str | None) -> None:
        if ch is None:
            return
        self._pos -= 1
        self.eof = False

    def tell(self) -> int:
        return self._pos

    def seek(self, pos: int) -> None:
        self._pos = pos
        self.eof = False


def _skip_space(src: _Source) -> None:
    ch = src.getc()
    while ch in _SPACE:
        ch = src.getc()
    src.ungetc(ch)


def _skip_comment(src: _Source) -> None:
    while True:
        ch = src.getc()
        while ch != "*":
            if ch is None:
                return
            ch = src.getc()
        ch = src.getc()
        if ch is None or ch == "/":
            return


def _function_name(src: _Source) -> str:
    """Return the last word before the next ``(``."""
    while True:
        name: list[str] = []
        ch = src.getc()
        while ch is not None and ch not in _SPACE and ch != "(":
            name.append(ch)
            if len(name) >= _NAME_MAX:
                break
            ch = src.getc()
        if ch is None or ch == "(":
            return "".join(name)
        _skip_space(src)
        ch = src.getc()
        if ch is None or ch == "(":
            return "".join(name)
        src.ungetc(ch)


def _copy_comment(src: _Source, out: list[str]) -> None:
    ch = src.getc()
    while ch in _BLANK:
        ch = src.getc()
    while True:
        while ch != "*":
            if ch is None:
                return
            out.append(ch)
            ch = src.getc()
        ch = src.getc()
        if ch == "/":
            return
        out.append("*")


def extract_docs(text: str) -> str:
    """Collect doc comments from C-like *text*.

    Every doc comment after the first line is preceded by a ``***``
    separator and the name of the function that follows it.
    """
    src = _Source(text)
    out: list[str] = []
    line = 0
    while not src.eof:
        ch = src.getc()
        if ch in ("\n", "\r"):
            line += 1
            continue
        if ch != "/" or src.getc() != "*":
            continue
        ch = src.getc()
        while ch in _BLANK:
            ch = src.getc()
        if ch != "d" or src.getc() != "o" or src.getc() != "c" or src.getc() != ":":
            continue
        ch = src.getc()
        while ch in _BLANK:
            ch = src.getc()
        src.ungetc(ch)
        if line != 0:
            pos = src.tell()
            _skip_comment(src)
            _skip_space(src)
            out.append("\n***\n")
            out.append(_function_name(src) + "\n")
            src.seek(pos)
        _copy_comment(src, out)
        out.append("\n")
    return "".join(out)


def main(argv: Sequence[str] | None = None) -> int:
    """Print the doc comments of one file to standard output."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("Usage: docextract FILENAME", file=sys.stderr)
        return 1
    fname = args[0]
    try:
        with open(fname, encoding="utf-8", errors="replace") as handle:
            text = handle.read()
    except OSError:
        print(f"Cannot open {fname}", file=sys.stderr)
        return -1
    sys.stdout.write(extract_docs(text))
    return 0