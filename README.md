# v120tui

Building blocks for a terminal browser of V120 VME crates: register-map
(RNM) parsing, a small command-script language with key bindings, a
VT100-style terminal layer with a one-line editor, and a tool that pulls
documentation comments out of source files.

The package has no runtime dependencies outside the standard library and
needs Python 3.10 or later. The terminal layer uses `termios`, so it
needs a POSIX system.

## Installing

    pip install .

To run the test suite:

    pip install ".[test]"
    pytest

## Extracting documentation comments

The `v120tui-doc` command reads one source file and prints every
comment that starts with `doc:`. For every such comment that is not on
the first line of the file, it first prints a `***` separator and the
name of the function that follows the comment.

    v120tui-doc FILENAME

It needs exactly one argument; otherwise it prints a usage line and
exits with status 1. If the file cannot be opened it prints
`Cannot open FILENAME` to standard error. The same work is available as
`v120tui.docextract.extract_docs(text)`, which returns the extracted
text as a string.

## Register maps (RNM files)

An RNM file describes the registers of one VME card, one entry per
line, fields separated by `:`. Leading and trailing blanks and anything
after `#` are ignored.

    W:2            global data width, 2 or 4 bytes
    E:A            endianness: A(uto), L(ong), B(yte) or S(hort)
    A:16           global address width
    0:STATUS:U:2   offset, name, U(nsigned) or S(igned), width 2 or 4
    4:COUNTER:S:4

Only the offset is required on a register line; the sign defaults to
unsigned and the width to 2. Offsets may be decimal, `0x` hex or
`0`-prefixed octal. A file must name at least one register offset
greater than zero. Without `W`, `E` and `A` lines the defaults are a
data width of 2, `Endianness.AUTO` and an address width of 16.

    from v120tui.rnm import parse_rnm, RnmCache, RnmError

    rnm = parse_rnm(text, "card.rnm", "/path/to/card.rnm")
    offset = rnm.search("COUNTER")     # None when there is no such register
    register = rnm.registers[offset]   # Register(name, signed, width)

`parse_rnm` raises `RnmError` on a syntax error. `strip_line` is the
line cleaner it uses. `RnmCache(home, directories)` resolves a file
name the same way scripts are found (`~/` and absolute paths directly,
other names in the current directory and then in each search
directory), parses each file once and hands back the cached `RnmFile`
on later calls to `load`; `clear` empties the cache.

## Command scripts

Scripts are plain text, one command per line, arguments separated by
white space. A word beginning with `#` starts a comment that runs to
the end of the line, and blank lines are skipped. A double-quoted
argument keeps its quotes; a single-quoted one does not. At most ten
words of a line are read.

    # ~/.v120_tui
    add-vme 0 0x4000 card.rnm
    add-dummy
    home

The commands are `home`, `quit` (also `q` and `Q`), `next-buffer`,
`toggle-buffer`, `add-vme CRATE ADDRESS [RNMFILE]`, `add-dummy`, `kill`
and `load-file FILENAME`. `quit` is refused from a script, and the
crate number must be between 0 and 15.

    from v120tui.commands import Session, Dispatcher

    session = Session(home=home, directories=directories)
    dispatcher = Dispatcher(session)
    dispatcher.load_file("~/.v120_tui")
    dispatcher.run_command("add-dummy")

`Dispatcher.run_command` raises `CommandError` for an unknown command
or a failing one. `Dispatcher.load_file` raises `CommandError` when the
script cannot be found or opened; lines inside it that fail are
appended to `session.warnings` and the remaining lines still run.
In an interactive session, commands that need parameters ask for them
through `session.prompt`. `parse_add_vme` reads the arguments of
`add-vme` on its own.

`v120tui.tokens.TokenReader` and `split_line` give access to the
tokenizer by itself.

## Keys

`j`/`k`/`h`/`l` (either case) and the arrow keys move, Ctrl-B and Page
Up page up, Ctrl-F and Page Down page down, `:` opens the command
prompt, `0` goes to the buffer list, `n`/`N` moves to the next buffer
and `b`/`B` toggles back to the previous one. `Dispatcher.handle_key`
applies these bindings; movements are passed to `session.on_move`, and
keys it does not know go to `session.key_handler`.

## Terminal and line editing

`v120tui.terminal.Terminal` drives a VT100-compatible terminal in raw
mode with plain escape sequences; it can be used as a context manager
that calls `start` and `stop`. `decode_escape` turns arrow, Home, End,
Delete and page sequences into `Key` values. `v120tui.lineedit.edit_line`
is a one-line editor with backspace, delete, left and right arrows,
Enter or Escape (or any given exit key) to finish, and a fixed maximum
length; `LineBuffer` holds the editing logic without a terminal.

## What the package does not do

The package does not talk to VME hardware. It opens no crates: the
handles in `Session.crates` must be supplied by the caller, and
`add-vme` only records a view for a crate that is present there. There
is no register display screen and no ready-made browser main loop; the
pieces above are what such a program would be built from.