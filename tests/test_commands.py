import pytest

from v120tui.commands import CommandError, Dispatcher, Session, parse_add_vme
from v120tui.terminal import Key


def _session(tmp_path, **kwargs):
    return Session(home=str(tmp_path), directories=[str(tmp_path)], **kwargs)


def _prompter(answers):
    it = iter(answers)
    return lambda question: next(it)


def test_parse_add_vme_decimal_and_rnm():
    assert parse_add_vme(["3", "4096", "card.rnm"]) == (3, 4096, "card.rnm")


def test_parse_add_vme_without_rnm():
    crate, address, rnm = parse_add_vme(["15", "0"])
    assert (crate, address, rnm) == (15, 0, None)


def test_parse_add_vme_hex_matches_decimal():
    assert parse_add_vme(["1", "0x1000"]) == parse_add_vme(["1", "4096"])


@pytest.mark.parametrize(
    "args, message",
    [
        ([], "crate id"),
        ([None], "crate id"),
        (["1"], "VME address"),
        (["16", "0"], "Invalid parameter"),
        (["-1", "0"], "Invalid parameter"),
    ],
)
def test_parse_add_vme_errors(args, message):
    with pytest.raises(CommandError, match=message):
        parse_add_vme(args)


def test_movement_keys_are_equivalent(tmp_path):
    moves = []
    d = Dispatcher(_session(tmp_path, on_move=moves.append))
    for key in (ord("j"), ord("J"), Key.DOWN, ord("k"), Key.UP):
        assert d.handle_key(key) is True
    assert moves[0] == moves[1] == moves[2]
    assert moves[3] == moves[4]
    assert moves[0] != moves[3]
    assert len(moves) == 5


def test_ctrl_keys_match_page_keys(tmp_path):
    moves = []
    d = Dispatcher(_session(tmp_path, on_move=moves.append))
    d.handle_key(2)
    d.handle_key(Key.PAGE_UP)
    d.handle_key(6)
    d.handle_key(Key.PAGE_DOWN)
    assert moves[0] == moves[1]
    assert moves[2] == moves[3]
    assert moves[0] != moves[2]


def test_unknown_key_goes_to_key_handler(tmp_path):
    seen = []

    def handler(key):
        seen.append(key)
        return key == ord("x")

    d = Dispatcher(_session(tmp_path, key_handler=handler))
    assert d.handle_key(ord("x")) is True
    assert d.handle_key(ord("z")) is False
    assert seen == [ord("x"), ord("z")]


def test_none_key_is_ignored(tmp_path):
    assert Dispatcher(_session(tmp_path)).handle_key(None) is False


def test_add_dummy_and_navigation(tmp_path):
    s = _session(tmp_path)
    d = Dispatcher(s)
    d.run_command("add-dummy", [])
    assert len(s.buffers) == 2
    assert s.current == 1
    assert s.buffers[1].title == "dummy VME"
    assert s.buffers[1].length == 32768
    d.handle_key(ord("0"))
    assert s.current == 0
    d.handle_key(ord("b"))
    assert s.current == 1
    d.run_command("next-buffer", [])
    assert s.current == 0
    d.run_command("toggle-buffer", [])
    assert s.current == 1


def test_quit_interactive_and_from_script(tmp_path):
    s = _session(tmp_path)
    d = Dispatcher(s)
    d.run_command("q", [])
    assert s.running is False
    s2 = _session(tmp_path, interactive=False)
    with pytest.raises(CommandError, match="from a script"):
        Dispatcher(s2).run_command("quit", [])
    assert s2.running is True


def test_unknown_command_and_fallback(tmp_path):
    handled = []
    s = _session(tmp_path, command_handler=lambda n: handled.append(n) or n == "zoom")
    d = Dispatcher(s)
    d.run_command("zoom", [])
    assert handled == ["zoom"]
    with pytest.raises(CommandError, match="Unknown command"):
        d.run_command("bogus", [])


def test_kill(tmp_path):
    s = _session(tmp_path)
    d = Dispatcher(s)
    with pytest.raises(CommandError):
        d.run_command("kill", [])
    d.run_command("add-dummy", [])
    d.run_command("kill", [])
    assert len(s.buffers) == 1
    assert s.current == 0


def test_add_vme_missing_crate(tmp_path):
    s = _session(tmp_path, interactive=False)
    with pytest.raises(CommandError, match="Crate 2 not found"):
        Dispatcher(s).run_command("add-vme", ["2", "0"])
    assert len(s.buffers) == 1


def test_add_vme_with_rnm(tmp_path):
    (tmp_path / "card.rnm").write_text("0:STATUS\n2:CTRL:S:4\n")
    s = _session(tmp_path, interactive=False, crates={2: object()})
    Dispatcher(s).run_command("add-vme", ["2", "4096", "card.rnm"])
    view = s.buffers[s.current]
    assert view.title == "loaded VME"
    assert view.length == 65536
    assert view.address == 4096
    assert view.crate == 2
    assert view.rnm.search("CTRL") == 2


def test_add_vme_with_bad_rnm_still_adds(tmp_path):
    (tmp_path / "bad.rnm").write_text("0:X\n")
    s = _session(tmp_path, interactive=False, crates={1: object()})
    Dispatcher(s).run_command("add-vme", ["1", "0", "bad.rnm"])
    assert s.buffers[-1].rnm is None
    assert any("register offset" in w for w in s.warnings)


def test_add_vme_interactive(tmp_path):
    s = _session(tmp_path, crates={4: object()}, prompt=_prompter(["4", "256", ""]))
    Dispatcher(s).run_command("add-vme", [])
    assert s.buffers[-1].crate == 4
    assert s.buffers[-1].address == 256
    assert s.buffers[-1].rnm is None


def test_add_vme_interactive_cancel(tmp_path):
    s = _session(tmp_path, crates={4: object()}, prompt=_prompter([None]))
    Dispatcher(s).run_command("add-vme", [])
    assert len(s.buffers) == 1


def test_colon_key_runs_prompted_command(tmp_path):
    s = _session(tmp_path, prompt=_prompter(["add-dummy"]))
    d = Dispatcher(s)
    assert d.handle_key(ord(":")) is True
    assert len(s.buffers) == 2


def test_colon_key_unknown_command_warns(tmp_path):
    s = _session(tmp_path, prompt=_prompter(["nope"]))
    Dispatcher(s).handle_key(ord(":"))
    assert s.warnings == ["Unknown command"]


def test_load_file_runs_script(tmp_path):
    (tmp_path / "setup").write_text("add-dummy\n# comment\n\nquit\nbogus\nadd-dummy\n")
    s = _session(tmp_path)
    Dispatcher(s).load_file("setup", str(tmp_path), [str(tmp_path)])
    assert len(s.buffers) == 3
    assert s.running is True
    assert s.interactive is True
    assert "You cannot exit this program from a script" in s.warnings
    assert "Unknown command" in s.warnings


def test_load_file_missing(tmp_path):
    d = Dispatcher(_session(tmp_path))
    with pytest.raises(CommandError, match="Failed to load"):
        d.load_file("absent", str(tmp_path), [str(tmp_path)])


def test_load_file_command_nested(tmp_path):
    (tmp_path / "inner").write_text("add-dummy\n")
    (tmp_path / "outer").write_text("load-file inner\nadd-dummy\n")
    s = _session(tmp_path)
    Dispatcher(s).load_file("outer")
    assert len(s.buffers) == 3
    assert s.warnings == []


def test_recursive_script_terminates(tmp_path):
    (tmp_path / "loop").write_text("load-file loop\n")
    s = _session(tmp_path)
    Dispatcher(s).load_file("loop")
    assert len(s.warnings) == 1
    assert "Failed to load loop" in s.warnings[0]
    assert s.interactive is True