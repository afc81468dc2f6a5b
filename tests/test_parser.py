import pytest

from wtmux.cell import Attrs, DefaultColor, Indexed, Rgb
from wtmux.parser import Cursor, TerminalState, VtParser


def feed(state, data):
    parser = VtParser()
    for byte in data:
        parser.advance(state, byte)
    return state


class Recorder:
    def __init__(self):
        self.events = []

    def print(self, c):
        self.events.append(("print", c))

    def execute(self, byte):
        self.events.append(("execute", byte))

    def csi_dispatch(self, params, intermediates, ignore, action):
        self.events.append(("csi", [list(p) for p in params], intermediates, ignore, action))

    def esc_dispatch(self, intermediates, ignore, byte):
        self.events.append(("esc", intermediates, ignore, byte))

    def osc_dispatch(self, params, bell_terminated):
        self.events.append(("osc", list(params), bell_terminated))


def record(data):
    rec = Recorder()
    parser = VtParser()
    for byte in data:
        parser.advance(rec, byte)
    return rec.events


# --- parser ---------------------------------------------------------------

def test_parser_groups_subparams():
    assert record(b"\x1b[1;2:3m") == [("csi", [[1], [2, 3]], b"", False, "m")]


def test_parser_empty_csi_has_single_zero_param():
    assert record(b"\x1b[m") == [("csi", [[0]], b"", False, "m")]


def test_parser_private_marker_is_intermediate():
    assert record(b"\x1b[?25h") == [("csi", [[25]], b"?", False, "h")]


def test_parser_param_saturates():
    assert record(b"\x1b[99999999m") == [("csi", [[65535]], b"", False, "m")]


def test_parser_escape_with_intermediate():
    assert record(b"\x1b(B") == [("esc", b"(", False, ord("B"))]


def test_parser_too_many_intermediates_sets_ignore():
    events = record(b"\x1b[ !\"m")
    assert events[0][3] is True
    assert events[0][4] == "m"


def test_parser_osc_bell_terminated():
    assert record(b"\x1b]0;title\x07") == [("osc", [b"0", b"title"], True)]


def test_parser_osc_string_terminator():
    events = record(b"\x1b]2;t\x1b\\")
    assert events[0] == ("osc", [b"2", b"t"], False)
    assert events[1] == ("esc", b"", False, ord("\\"))


def test_parser_dcs_is_discarded():
    events = record(b"\x1bPqabc\x1b\\Z")
    assert ("print", "a") not in events
    assert events[-1] == ("print", "Z")


def test_parser_controls_and_text():
    assert record(b"a\r") == [("print", "a"), ("execute", 0x0D)]


def test_parser_decodes_utf8():
    assert record("é".encode()) == [("print", "é")]


def test_parser_rejects_out_of_range_byte():
    with pytest.raises(ValueError):
        VtParser().advance(Recorder(), 256)


# --- terminal state ---------------------------------------------------------

def test_print_simple_text():
    state = feed(TerminalState(80, 24), b"Hello")
    assert [state.grid.cell(i, 0).ch for i in range(5)] == list("Hello")
    assert (state.cursor.col, state.cursor.row) == (5, 0)


def test_newline():
    state = feed(TerminalState(80, 24), b"Hello\r\nWorld")
    assert state.grid.cell(0, 0).ch == "H"
    assert state.grid.cell(0, 1).ch == "W"


def test_cursor_position():
    state = feed(TerminalState(80, 24), b"\x1b[5;10H")
    assert (state.cursor.col, state.cursor.row) == (9, 4)


def test_csi_dispatch_accepts_flat_params():
    state = TerminalState(80, 24)
    state.csi_dispatch([5, 10], b"", False, "H")
    assert (state.cursor.col, state.cursor.row) == (9, 4)


def test_clear_screen():
    state = feed(TerminalState(80, 24), b"Hello\x1b[2J")
    assert state.grid.cell(0, 0).ch == " "


def test_sgr_basic_color():
    state = feed(TerminalState(80, 24), b"\x1b[31mRed")
    assert state.grid.cell(0, 0).fg == Indexed(1)


def test_sgr_rgb_and_indexed():
    state = feed(TerminalState(80, 24), b"\x1b[38;2;10;20;30;48;5;200mX")
    cell = state.grid.cell(0, 0)
    assert cell.fg == Rgb(10, 20, 30)
    assert cell.bg == Indexed(200)


def test_sgr_incomplete_extended_color_is_ignored():
    state = feed(TerminalState(80, 24), b"\x1b[38;5m")
    assert state.cursor.fg == DefaultColor()


def test_sgr_attrs_and_reset():
    state = feed(TerminalState(80, 24), b"\x1b[1;4m")
    assert state.cursor.attrs == Attrs(bold=True, underline=True)
    feed(state, b"\x1b[0m")
    assert state.cursor.attrs == Attrs()


def test_wrap_at_end_of_line():
    state = feed(TerminalState(3, 2), b"abcd")
    assert state.grid.row_text(0) == "abc"
    assert state.grid.cell(0, 1).ch == "d"
    assert state.cursor.row == 1


def test_scroll_at_bottom():
    state = feed(TerminalState(4, 2), b"a\r\nb\r\nc")
    assert state.grid.row_text(0) == "b"
    assert state.grid.row_text(1) == "c"


def test_wide_character_uses_two_cells():
    state = feed(TerminalState(10, 2), "中".encode())
    assert state.grid.cell(0, 0).width == 2
    assert state.grid.cell(1, 0).width == 0
    assert state.cursor.col == 2


def test_invalid_utf8_prints_replacement():
    state = feed(TerminalState(10, 2), b"\xc3A")
    assert state.grid.cell(0, 0).ch == "\ufffd"
    assert state.grid.cell(1, 0).ch == "A"


def test_cancel_aborts_sequence():
    state = feed(TerminalState(10, 2), b"\x1b[3\x18A")
    assert state.grid.cell(0, 0).ch == "A"


def test_osc_sets_title():
    state = feed(TerminalState(10, 2), b"\x1b]0;my title\x07")
    assert state.title == "my title"


def test_osc_invalid_utf8_keeps_title():
    state = TerminalState(10, 2)
    state.osc_dispatch([b"2", b"\xff"], True)
    assert state.title == ""


def test_cursor_visibility():
    state = feed(TerminalState(10, 2), b"\x1b[?25l")
    assert state.cursor.visible is False
    feed(state, b"\x1b[?25h")
    assert state.cursor.visible is True


def test_alternate_screen_round_trip():
    state = feed(TerminalState(10, 3), b"X")
    feed(state, b"\x1b[?1049h")
    assert state.using_alt_screen
    assert state.grid.cell(0, 0).is_empty()
    assert state.cursor == Cursor()
    feed(state, b"\x1b[?1049l")
    assert not state.using_alt_screen
    assert state.grid.cell(0, 0).ch == "X"
    assert state.cursor.col == len("X")


def test_esc_save_restore_cursor():
    state = feed(TerminalState(10, 10), b"ab\x1b[1m\x1b7\x1b[0m\x1b[5;5H\x1b8")
    assert (state.cursor.col, state.cursor.row) == (len("ab"), 0)
    assert state.cursor.attrs.bold is True


def test_csi_save_restore_cursor():
    state = feed(TerminalState(10, 10), b"abc\x1b[s\x1b[5;5H\x1b[u")
    assert (state.cursor.col, state.cursor.row) == (len("abc"), 0)


def test_delete_characters():
    state = feed(TerminalState(10, 1), b"abcdef\r\x1b[2P")
    assert state.grid.row_text(0) == "cdef"


def test_insert_characters():
    state = feed(TerminalState(10, 1), b"abc\r\x1b[2@")
    assert state.grid.cell(0, 0).is_empty()
    assert state.grid.row_text(0).lstrip() == "abc"
    assert state.grid.cell(2, 0).ch == "a"


def test_erase_characters():
    state = feed(TerminalState(10, 1), b"abcd\r\x1b[2X")
    assert state.grid.cell(0, 0).is_empty()
    assert state.grid.cell(1, 0).is_empty()
    assert state.grid.cell(2, 0).ch == "c"


def test_erase_in_line():
    state = feed(TerminalState(10, 1), b"abcd\x1b[3G\x1b[K")
    assert state.grid.row_text(0) == "ab"
    feed(state, b"\x1b[2K")
    assert state.grid.row_text(0) == ""


def test_cursor_movement_clamps():
    state = feed(TerminalState(10, 5), b"\x1b[3;1H\x1b[10A")
    assert state.cursor.row == 0
    feed(state, b"\x1b[100B\x1b[100C")
    assert (state.cursor.col, state.cursor.row) == (state.cols - 1, state.rows - 1)


def test_scroll_region_homes_cursor():
    state = feed(TerminalState(10, 5), b"\x1b[3;3H\x1b[2;3r")
    assert (state.scroll_top, state.scroll_bottom) == (1, 3)
    assert (state.cursor.col, state.cursor.row) == (0, 0)


def test_reverse_index_at_top_scrolls_down():
    state = feed(TerminalState(5, 3), b"a\x1b[H\x1bM")
    assert state.grid.cell(0, 0).is_empty()
    assert state.grid.cell(0, 1).ch == "a"


def test_tab_and_backspace():
    state = TerminalState(80, 24)
    state.execute(0x09)
    assert state.cursor.col == 8
    narrow = TerminalState(5, 1)
    narrow.execute(0x09)
    assert narrow.cursor.col == narrow.cols - 1
    feed(state, b"\x08")
    assert state.cursor.col == 7


def test_resize_clamps_cursor():
    state = feed(TerminalState(80, 24), b"\x1b[24;80H")
    state.resize(40, 12)
    assert (state.cursor.col, state.cursor.row) == (39, 11)
    assert state.scroll_bottom == state.rows


def test_dirty_flag():
    state = TerminalState(10, 2)
    state.dirty = False
    feed(state, b"\x1b[s")
    assert state.dirty is False
    feed(state, b"x")
    assert state.dirty is True