"""Parser for RNM register-name files and a cache of parsed files."""

from __future__ import annotations

import enum
import string
from collections.abc import Iterable
from dataclasses import dataclass, field

from .paths import get_full_path, strip_directory

MAX_TOKENS = 128
_BLANK = " \t"
_SPACE = " \t\n\r\v\f"
_END_OF_LINE = "\n\r#"


class RnmError(Exception):
    """Raised when an RNM file cannot be found, read or parsed."""


class Endianness(enum.Enum):
    """Byte-swapping mode of a card's registers."""

    AUTO = "auto"
    LONG = "long"
    BYTE = "byte"
    SHORT = "short"


_ENDIANNESS_CODES = {
    "A": Endianness.AUTO,
    "L": Endianness.LONG,
    "B": Endianness.BYTE,
    "S": Endianness.SHORT,
}


@dataclass
class Register:
    """Metadata of one register: its name, signedness and width in bytes."""

    name: str = ""
    signed: bool = False
    width: int = 2


@dataclass
class RnmFile:
    """Register metadata parsed from one RNM file.

    ``registers`` has one slot per offset up to ``length``; offsets the
    file does not mention hold None.
    """

    name: str
    path: str
    length: int
    registers: list[Register | None]
    data_width: int = 2
    endianness: Endianness = Endianness.AUTO
    address_width: int = 16
    _offsets: dict[str, int] = field(default_factory=dict, repr=False)

    def search(self, name: str) -> int | None:
        """Return the offset of the register called *name*, or None."""
        return self._offsets.get(name)


def strip_line(s: str) -> str:
    """Remove leading and trailing blanks, the line ending and any ``#`` comment."""
    s = s.lstrip(_BLANK)
    cut = len(s)
    for pos, ch in enumerate(s):
        if ch in _END_OF_LINE:
            cut = pos
            break
    return s[:cut].rstrip(_BLANK)


def _parse_int(text: str) -> int:
    """Read a leading integer with C prefix rules (``0x`` hex, ``0`` octal)."""
    s = text.lstrip(_SPACE)
    negative = False
    if s[:1] in ("+", "-"):
        negative = s[0] == "-"
        s = s[1:]
    if s[:2].lower() == "0x" and s[2:3] and s[2] in string.hexdigits:
        base, digits, s = 16, string.hexdigits, s[2:]
    elif s.startswith("0"):
        base, digits = 8, string.octdigits
    else:
        base, digits = 10, string.digits
    run = []
    for ch in s:
        if ch not in digits:
            break
        run.append(ch)
    value = int("".join(run), base) if run else 0
    return -value if negative else value


def _max_offset(lines: Iterable[str]) -> int:
    offset = 0
    for line in lines:
        s = strip_line(line)
        if not s or not s[0].isdigit():
            continue
        offset = max(offset, _parse_int(s))
    return offset


def _tokenize(line: str) -> list[str]:
    return [tok for tok in line.split(":") if tok][:MAX_TOKENS]


def _apply_line(rnm: RnmFile, tokens: list[str]) -> None:
    key = tokens[0][0].upper()
    if key == "W":
        if len(tokens) < 2:
            raise RnmError("Expected: value after global data width 'W'")
        width = _parse_int(tokens[1])
        if width not in (2, 4):
            raise RnmError(f"Unsupported global data width: {tokens[1]}")
        rnm.data_width = width
    elif key == "E":
        if len(tokens) < 2:
            raise RnmError("Expected: value after endianness 'E'")
        code = tokens[1][0].upper()
        if code not in _ENDIANNESS_CODES:
            raise RnmError(f"Unsupported endianness: {tokens[1]}")
        rnm.endianness = _ENDIANNESS_CODES[code]
    elif key == "A":
        if len(tokens) < 2:
            raise RnmError("Expected: value after global address width 'A'")
        rnm.address_width = _parse_int(tokens[1])
    else:
        _apply_register(rnm, tokens)


def _apply_register(rnm: RnmFile, tokens: list[str]) -> None:
    if not tokens[0][0].isdigit():
        raise RnmError(f"Unexpected token at start of line: {tokens[0]}")
    offset = _parse_int(tokens[0])
    if offset > rnm.length:
        raise RnmError(f"Register offset {offset} beyond end of map")
    register = Register(signed=False, width=2)
    rnm.registers[offset] = register
    if len(tokens) < 2:
        # An offset alone only marks the extent of the address space.
        return
    register.name = strip_line(tokens[1])
    rnm._offsets[register.name] = offset

    if len(tokens) < 3:
        return
    sign = tokens[2][0].upper()
    if sign == "S":
        register.signed = True
    elif sign != "U":
        raise RnmError(f"Expected: 'U' or 'S' for offs {offset}")

    if len(tokens) < 4:
        return
    width = tokens[3][0]
    if width == "4":
        register.width = 4
    elif width != "2":
        raise RnmError(f"Expected: '2' or '4' datawidth for offs {offset}")


def parse_rnm(text: str, name: str, path: str) -> RnmFile:
    """Parse the contents of an RNM file.

    Lines have the form ``offset:name:sign:width`` or set a global value
    with ``W:width``, ``E:endianness`` or ``A:address-width``. Raises
    RnmError on a syntax error or when no register offset is present.
    """
    lines = text.splitlines()
    length = _max_offset(lines)
    if length == 0:
        raise RnmError("Expected: At least one register offset")
    rnm = RnmFile(
        name=name,
        path=path,
        length=length,
        registers=[None] * (length + 1),
    )
    for line in lines:
        tokens = _tokenize(strip_line(line))
        if tokens:
            _apply_line(rnm, tokens)
    return rnm


class RnmCache:
    """Parsed RNM files, keyed by their full path."""

    def __init__(self, home: str, directories: Iterable[str]) -> None:
        self._home = home
        self._directories = list(directories)
        self._files: dict[str, RnmFile] = {}

    def load(self, filename: str) -> RnmFile:
        """Return the parsed file, reading and parsing it only the first time."""
        full = get_full_path(filename, self._home, self._directories)
        if full is None:
            raise RnmError("Cannot determine absolute path")
        cached = self._files.get(full)
        if cached is not None:
            return cached
        try:
            with open(full, encoding="utf-8", errors="replace") as handle:
                text = handle.read()
        except OSError as exc:
            raise RnmError(f"Cannot open file: {full}") from exc
        rnm = parse_rnm(text, strip_directory(full), full)
        self._files[full] = rnm
        return rnm

    def clear(self) -> None:
        """Forget every cached file."""
        self._files.clear()