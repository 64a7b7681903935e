import io

import pytest

from v120tui.lineedit import LineBuffer, edit_line
from v120tui.terminal import Key, Terminal


def test_cursor_is_clamped():
    assert LineBuffer("abc", 10, 99).cursor == 3
    assert LineBuffer("abc", 10, -4).cursor == 0


def test_insert_then_backspace_round_trip():
    buf = LineBuffer("abc", 10, 1)
    buf.feed(ord("x"))
    assert buf.cursor == 2
    assert len(buf.text) == 4
    buf.feed(Key.BACKSPACE)
    assert buf.text == "abc"
    assert buf.cursor == 1


def test_insert_at_cursor():
    buf = LineBuffer("ac", 10, 1)
    buf.feed(ord("b"))
    assert buf.text == "abc"


@pytest.mark.parametrize("key", [0o177, 0x08, Key.BACKSPACE])
def test_backspace_variants(key):
    buf = LineBuffer("abc", 10, 3)
    buf.feed(key)
    assert buf.text == "ab"
    assert buf.cursor == 2


def test_backspace_at_start_does_nothing():
    buf = LineBuffer("abc", 10, 0)
    buf.feed(Key.BACKSPACE)
    assert (buf.text, buf.cursor) == ("abc", 0)


def test_delete_under_cursor():
    buf = LineBuffer("abc", 10, 0)
    buf.feed(Key.DELETE)
    assert (buf.text, buf.cursor) == ("bc", 0)
    end = LineBuffer("abc", 10, 3)
    end.feed(Key.DELETE)
    assert end.text == "abc"


def test_left_right_bounds():
    buf = LineBuffer("ab", 10, 0)
    buf.feed(Key.LEFT)
    assert buf.cursor == 0
    buf.feed(Key.RIGHT)
    buf.feed(Key.RIGHT)
    buf.feed(Key.RIGHT)
    assert buf.cursor == 2


def test_overflow_raises_and_keeps_text():
    buf = LineBuffer("abc", 4, 3)
    with pytest.raises(OverflowError):
        buf.feed(ord("x"))
    assert buf.text == "abc"


def test_finishing_keys():
    buf = LineBuffer("a", 10)
    assert buf.feed(ord("\n")) == ord("\n")
    assert buf.feed(0x1B) == 0x1B
    assert buf.feed(ord("b")) is None


def test_non_printable_ignored():
    buf = LineBuffer("a", 10, 1)
    assert buf.feed(0x01) is None
    assert buf.text == "a"


def test_bad_limit():
    with pytest.raises(ValueError):
        LineBuffer("", 0)


def make(text):
    return Terminal(io.StringIO(), io.StringIO(text))


def test_edit_line_types_text():
    key, text, cursor = edit_line(make("hi\n"), "", 20, 0, 0, 0, "")
    assert key == ord("\n")
    assert text == "hi"
    assert cursor == 2


def test_edit_line_exit_key():
    key, text, cursor = edit_line(make("aq"), "", 20, 0, 0, 0, "q")
    assert key == ord("q")
    assert text == "a"
    assert cursor == 1


def test_edit_line_arrow_keys():
    key, text, _ = edit_line(make("ab\x1b[DX\n"), "", 20, 1, 2, 0, "")
    assert key == ord("\n")
    assert text == "aXb"


def test_edit_line_overflow_keeps_editing():
    term_out = io.StringIO()
    term = Terminal(term_out, io.StringIO("xyz\n"))
    key, text, _ = edit_line(term, "", 3, 0, 0, 0, "")
    assert key == ord("\n")
    assert text == "xy"
    assert "\a" in term_out.getvalue()