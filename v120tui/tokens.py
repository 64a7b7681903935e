"""Tokenising of script lines for the command interpreter."""

from __future__ import annotations

from typing import TextIO

MAX_ARGS = 10
_BLANK = frozenset(" \t")
_SPACE = frozenset(" \t\n\r\v\f")


def _closing(text: str, start: int, quote: str) -> int:
    """Index of the closing *quote* at or after *start*, honouring backslashes."""
    pos = start
    end = len(text)
    while pos < end and text[pos] != quote:
        if text[pos] == "\\" and pos + 1 < end:
            pos += 1
        pos += 1
    return pos


def split_line(line: str) -> list[str]:
    """Split one script line into at most ten arguments.

    Double-quoted arguments keep their quotes, single-quoted ones lose them.
    A ``#`` at the start of an argument begins a comment. Blank and
    comment-only lines give an empty list.
    """
    text = line.rstrip("\r\n")
    end = len(text)
    tokens: list[str] = []
    pos = 0
    while len(tokens) < MAX_ARGS:
        while pos < end and text[pos] in _BLANK:
            pos += 1
        if pos >= end or text[pos] in "\r\n#":
            break
        first = text[pos]
        if first == '"':
            stop = _closing(text, pos + 1, '"')
            if stop < end:
                stop += 1
            tokens.append(text[pos:stop])
        elif first == "'":
            stop = _closing(text, pos + 1, "'")
            tokens.append(text[pos + 1 : stop])
        else:
            stop = pos
            while stop < end and text[stop] not in _SPACE:
                stop += 1
            tokens.append(text[pos:stop])
        pos = stop + 1
    return tokens


class TokenReader:
    """Reads arguments line by line from a script stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._tokens: list[str] = []
        self._index = 0

    def advance(self) -> bool:
        """Load the next non-blank line; return False once the stream is exhausted."""
        self._tokens = []
        self._index = 0
        for line in self._stream:
            tokens = split_line(line)
            if tokens:
                self._tokens = tokens
                return True
        return False

    def next_token(self) -> str | None:
        """Return the next argument of the current line, or None.

        Empty arguments also come back as None.
        """
        if self._index >= len(self._tokens):
            return None
        token = self._tokens[self._index]
        self._index += 1
        return token or None

    def count(self) -> int:
        """Number of arguments on the current line."""
        return len(self._tokens)