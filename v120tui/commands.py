"""Key bindings, named commands and script loading for the browser."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .paths import get_full_path
from .rnm import RnmCache, RnmError, RnmFile
from .terminal import Key
from .tokens import TokenReader

MAX_CRATE = 15
VME_WINDOW = 65536
DUMMY_LENGTH = 32768
MAX_SCRIPT_DEPTH = 99

_C_INT = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")


def _ctrl(letter: str) -> int:
    return ord(letter) & 0x1F


def _c_int(text: str) -> int:
    """Read a leading integer the way C's strtol does with base 0; junk gives 0."""
    match = _C_INT.match(text)
    if match is None:
        return 0
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    return -value if sign == "-" else value


class CommandError(Exception):
    """Raised when a command cannot be carried out."""


@dataclass
class _View:
    """One entry in the buffer list."""

    title: str
    crate: int | None = None
    address: int = 0
    length: int = 0
    rnm: RnmFile | None = None


@dataclass
class Session:
    """State shared by the command interpreter.

    ``crates`` maps crate numbers to open crate handles. ``prompt`` asks
    the user for a line of text and returns None when cancelled;
    ``on_move`` receives cursor movements; ``key_handler`` and
    ``command_handler`` get keys and command names that the global tables
    do not know, and return True when they handled them.
    """

    home: str = "."
    directories: list[str] = field(default_factory=list)
    crates: dict[int, Any] = field(default_factory=dict)
    interactive: bool = True
    prompt: Callable[[str], str | None] | None = None
    on_move: Callable[[str], None] | None = None
    key_handler: Callable[[int], bool] | None = None
    command_handler: Callable[[str], bool] | None = None
    buffers: list[_View] = field(default_factory=lambda: [_View("buffer list")])
    current: int = 0
    previous: int = 0
    warnings: list[str] = field(default_factory=list)
    running: bool = True
    rnm: RnmCache | None = None

    def __post_init__(self) -> None:
        if self.rnm is None:
            self.rnm = RnmCache(self.home, self.directories)


def parse_add_vme(args: Sequence[str | None]) -> tuple[int, int, str | None]:
    """Read crate number, VME address and optional RNM file from script arguments."""
    items = list(args)
    if not items or not items[0]:
        raise CommandError("Expected: crate id")
    crate = _c_int(items[0])
    if len(items) < 2 or not items[1]:
        raise CommandError("Expected: VME address")
    address = _c_int(items[1])
    rnmfile = items[2] if len(items) > 2 and items[2] else None
    if not 0 <= crate <= MAX_CRATE:
        raise CommandError("Invalid parameter")
    return crate, address, rnmfile


class Dispatcher:
    """Maps keys and command names onto actions on a Session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self._depth = 0
        moves = {
            "down": ("j", "J", Key.DOWN),
            "up": ("k", "K", Key.UP),
            "right": ("l", "L", Key.RIGHT),
            "left": ("h", "H", Key.LEFT),
            "page_up": (_ctrl("B"), Key.PAGE_UP),
            "page_down": (_ctrl("F"), Key.PAGE_DOWN),
        }
        self._keys: dict[int, Callable[[], None]] = {}
        for direction, keys in moves.items():
            for key in keys:
                self._keys[_code(key)] = self._mover(direction)
        self._keys[ord(":")] = self._command_key
        self._keys[ord("0")] = self._home
        for key in "Nn":
            self._keys[ord(key)] = self._next
        for key in "bB":
            self._keys[ord(key)] = self._toggle

        self._commands: dict[str, Callable[[list[str | None]], None]] = {
            "home": lambda args: self._home(),
            "quit": self._quit,
            "q": self._quit,
            "Q": self._quit,
            "next-buffer": lambda args: self._next(),
            "toggle-buffer": lambda args: self._toggle(),
            "add-vme": self._add_vme,
            "add-dummy": self._add_dummy,
            "kill": self._kill,
            "load-file": self._load_file_command,
        }

    # Public interface

    def handle_key(self, key: int | None) -> bool:
        """Act on one key; return False if nothing knew what to do with it.

        Errors from the action are recorded in the session's warnings.
        """
        if key is None:
            return False
        action = self._keys.get(key)
        if action is None:
            handler = self.session.key_handler
            return bool(handler(key)) if handler is not None else False
        try:
            action()
        except CommandError as exc:
            self.session.warnings.append(str(exc))
        return True

    def run_command(self, name: str, args: Iterable[str | None] = ()) -> None:
        """Run the named command.

        In an interactive session the command prompts for its parameters;
        otherwise it takes them from *args*. Raises CommandError for an
        unknown name or when the command fails.
        """
        command = self._commands.get(name)
        if command is not None:
            command(list(args))
            return
        handler = self.session.command_handler
        if handler is not None and handler(name):
            return
        raise CommandError("Unknown command")

    def load_file(
        self,
        filename: str,
        home: str | None = None,
        directories: Iterable[str] | None = None,
    ) -> None:
        """Run every line of a script file as a command.

        Each line is ``command arg...``; ``#`` starts a comment. Failing
        lines are recorded as warnings and the rest still run. Raises
        CommandError when the file cannot be found or opened, or scripts
        nest too deeply.
        """
        session = self.session
        home = session.home if home is None else home
        dirs = session.directories if directories is None else list(directories)
        if self._depth >= MAX_SCRIPT_DEPTH:
            raise CommandError(f"Failed to load {filename}: scripts nested too deeply")
        full = get_full_path(filename, home, dirs)
        if full is None:
            raise CommandError(f"Failed to load {filename}")
        try:
            handle = open(full, encoding="utf-8", errors="replace")
        except OSError as exc:
            raise CommandError(f"Failed to load {filename}") from exc
        saved = session.interactive
        session.interactive = False
        self._depth += 1
        try:
            with handle:
                reader = TokenReader(handle)
                while reader.advance():
                    tokens = [reader.next_token() for _ in range(reader.count())]
                    name = tokens[0]
                    if name is None:
                        continue
                    try:
                        self.run_command(name, tokens[1:])
                    except CommandError as exc:
                        session.warnings.append(str(exc))
        finally:
            self._depth -= 1
            session.interactive = saved

    # Buffer navigation

    def _goto(self, index: int) -> None:
        session = self.session
        if index != session.current:
            session.previous = session.current
            session.current = index

    def _home(self) -> None:
        self._goto(0)

    def _next(self) -> None:
        session = self.session
        self._goto((session.current + 1) % len(session.buffers))

    def _toggle(self) -> None:
        session = self.session
        if session.previous < len(session.buffers):
            self._goto(session.previous)

    def _mover(self, direction: str) -> Callable[[], None]:
        def move() -> None:
            if self.session.on_move is not None:
                self.session.on_move(direction)

        return move

    def _add_view(self, view: _View) -> None:
        self.session.buffers.append(view)
        self._goto(len(self.session.buffers) - 1)

    # Commands

    def _ask(self, question: str) -> str | None:
        prompt = self.session.prompt
        return None if prompt is None else prompt(question)

    def _command_key(self) -> None:
        if not self.session.interactive:
            return
        name = self._ask("Enter command: ")
        if name:
            self.run_command(name, [])

    def _quit(self, args: list[str | None]) -> None:
        if not self.session.interactive:
            raise CommandError("You cannot exit this program from a script")
        self.session.running = False

    def _kill(self, args: list[str | None]) -> None:
        session = self.session
        if session.current == 0:
            raise CommandError("Cannot kill the buffer list")
        del session.buffers[session.current]
        target = session.previous
        if target >= len(session.buffers) or target == session.current:
            target = 0
        session.current = target
        session.previous = 0

    def _add_dummy(self, args: list[str | None]) -> None:
        self._add_view(_View("dummy VME", None, 0, DUMMY_LENGTH))

    def _add_vme(self, args: list[str | None]) -> None:
        if self.session.interactive:
            crate_text = self._ask("Enter crate number: ")
            if crate_text is None:
                return
            address_text = self._ask("Enter VME address: ")
            if address_text is None:
                return
            rnmfile = self._ask("Enter name of RNM file: ")
            if rnmfile is None:
                return
            crate = _c_int(crate_text)
            address = _c_int(address_text)
            if not 0 <= crate <= MAX_CRATE:
                raise CommandError("Invalid parameter")
            rnm_name = rnmfile or None
        else:
            crate, address, rnm_name = parse_add_vme(args)
        self._attach(crate, address, VME_WINDOW, rnm_name)

    def _attach(
        self, crate: int, address: int, length: int, rnmfile: str | None
    ) -> None:
        session = self.session
        if session.crates.get(crate) is None:
            raise CommandError(f"Crate {crate} not found")
        rnm = None
        if rnmfile is not None and session.rnm is not None:
            try:
                rnm = session.rnm.load(rnmfile)
            except RnmError as exc:
                session.warnings.append(str(exc))
        self._add_view(_View("loaded VME", crate, address, length, rnm))

    def _load_file_command(self, args: list[str | None]) -> None:
        if self.session.interactive:
            fname = self._ask("Enter name of file: ")
        else:
            fname = args[0] if args else None
        if not fname:
            return
        self.load_file(fname)


def _code(key: str | int) -> int:
    return ord(key) if isinstance(key, str) else int(key)