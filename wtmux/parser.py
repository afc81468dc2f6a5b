"""VT escape-sequence parsing and the terminal state it drives."""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Iterable, Optional, Protocol, Sequence, Tuple, Union

from wcwidth import wcwidth

from .cell import Attrs, Cell, Color, DefaultColor, Indexed, Rgb
from .grid import Grid

log = logging.getLogger(__name__)

CsiParams = Sequence[Union[int, Sequence[int]]]
SavedCursor = Tuple[int, int, Attrs, Color, Color]

_SET_ATTRS = {
    1: "bold",
    3: "italic",
    4: "underline",
    5: "blink",
    7: "reverse",
    8: "hidden",
    9: "strikethrough",
}
_RESET_ATTRS = {
    22: "bold",
    23: "italic",
    24: "underline",
    25: "blink",
    27: "reverse",
    28: "hidden",
    29: "strikethrough",
}


@dataclass
class Cursor:
    """Cursor position and the pen used for newly printed cells."""

    col: int = 0
    row: int = 0
    attrs: Attrs = field(default_factory=Attrs)
    fg: Color = field(default_factory=DefaultColor)
    bg: Color = field(default_factory=DefaultColor)
    visible: bool = True


def _char_width(c: str) -> int:
    width = wcwidth(c)
    return 1 if width < 0 else width


def _flatten(params: CsiParams) -> list[int]:
    flat: list[int] = []
    for param in params:
        if isinstance(param, int):
            flat.append(param)
        else:
            flat.extend(param)
    return flat


def _parse_color(params: list[int], idx: int) -> tuple[Optional[Color], int]:
    """Parse an extended colour (``2;r;g;b`` or ``5;n``) starting at idx."""
    if idx >= len(params):
        return None, idx
    kind = params[idx]
    if kind == 2:
        idx += 1
        if idx + 2 < len(params):
            r, g, b = (v & 0xFF for v in params[idx:idx + 3])
            return Rgb(r, g, b), idx + 3
        return None, idx
    if kind == 5:
        idx += 1
        if idx < len(params):
            return Indexed(params[idx] & 0xFF), idx + 1
        return None, idx
    return None, idx


class TerminalState:
    """Screen contents, cursor and modes, updated by VT parser callbacks."""

    def __init__(self, cols: int, rows: int) -> None:
        self.grid = Grid(cols, rows)
        self.cursor = Cursor()
        self.scroll_top = 0
        self.scroll_bottom = rows
        self.saved_cursor: Optional[SavedCursor] = None
        self.title = ""
        self.dirty = True
        self.using_alt_screen = False
        self._alt_grid: Optional[Grid] = None
        self._alt_cursor: Optional[Cursor] = None

    @property
    def cols(self) -> int:
        return self.grid.cols

    @property
    def rows(self) -> int:
        return self.grid.rows

    def resize(self, cols: int, rows: int) -> None:
        """Resize the screen, reset the scroll region and clamp the cursor."""
        self.grid.resize(cols, rows)
        self.scroll_top = 0
        self.scroll_bottom = rows
        if self.cursor.col >= cols:
            self.cursor.col = max(cols - 1, 0)
        if self.cursor.row >= rows:
            self.cursor.row = max(rows - 1, 0)
        if self._alt_grid is not None:
            self._alt_grid.resize(cols, rows)
        self.dirty = True

    def _advance_cursor(self) -> None:
        self.cursor.col += 1
        if self.cursor.col >= self.grid.cols:
            self.cursor.col = 0
            self._line_feed()

    def _line_feed(self) -> None:
        if self.cursor.row + 1 >= self.scroll_bottom:
            self.grid.scroll_up(self.scroll_top, self.scroll_bottom)
        else:
            self.cursor.row += 1

    def _enter_alt_screen(self) -> None:
        if not self.using_alt_screen:
            self._alt_grid = self.grid
            self.grid = Grid(self._alt_grid.cols, self._alt_grid.rows)
            self._alt_cursor = self.cursor
            self.cursor = Cursor()
            self.using_alt_screen = True

    def _exit_alt_screen(self) -> None:
        if self.using_alt_screen:
            if self._alt_grid is not None:
                self.grid = self._alt_grid
                self._alt_grid = None
            if self._alt_cursor is not None:
                self.cursor = self._alt_cursor
                self._alt_cursor = None
            self.using_alt_screen = False

    def _save_cursor(self) -> None:
        c = self.cursor
        self.saved_cursor = (c.col, c.row, c.attrs, c.fg, c.bg)

    def _restore_cursor(self) -> bool:
        if self.saved_cursor is None:
            return False
        c = self.cursor
        c.col, c.row, c.attrs, c.fg, c.bg = self.saved_cursor
        return True

    def _reset_pen(self) -> None:
        self.cursor.attrs = Attrs()
        self.cursor.fg = DefaultColor()
        self.cursor.bg = DefaultColor()

    def print(self, c: str) -> None:
        """Put a printable character at the cursor and advance it."""
        width = _char_width(c)
        cur = self.cursor
        if cur.col < self.grid.cols and cur.row < self.grid.rows:
            self.grid.set_cell(
                cur.col, cur.row, Cell(c, fg=cur.fg, bg=cur.bg, attrs=cur.attrs, width=width)
            )
            if width == 2 and cur.col + 1 < self.grid.cols:
                continuation = Cell(" ", fg=cur.fg, bg=cur.bg, attrs=cur.attrs, width=0)
                self.grid.set_cell(cur.col + 1, cur.row, continuation)
                cur.col += 1
        self._advance_cursor()
        self.dirty = True

    def execute(self, byte: int) -> None:
        """Handle a C0 control byte."""
        if byte == 0x07:
            return
        if byte == 0x08:
            if self.cursor.col > 0:
                self.cursor.col -= 1
        elif byte == 0x09:
            next_tab = (self.cursor.col // 8 + 1) * 8
            self.cursor.col = min(next_tab, self.grid.cols - 1)
        elif byte in (0x0A, 0x0B, 0x0C):
            self._line_feed()
            self.dirty = True
        elif byte == 0x0D:
            self.cursor.col = 0
        else:
            log.debug("unhandled execute byte: 0x%02x", byte)

    def osc_dispatch(self, params: Sequence[bytes], bell_terminated: bool) -> None:
        """Handle an operating system command; only title changes are used."""
        if len(params) >= 2 and params[0] in (b"0", b"2"):
            try:
                self.title = bytes(params[1]).decode("utf-8")
            except UnicodeDecodeError:
                pass

    def csi_dispatch(
        self, params: CsiParams, intermediates: bytes, ignore: bool, action: str
    ) -> None:
        """Handle a control sequence.

        ``params`` holds numbers or groups of sub-parameters; both are flattened.
        """
        values = _flatten(params)

        def p(idx: int, default: int) -> int:
            value = values[idx] if idx < len(values) else 0
            return value if value != 0 else default

        cur = self.cursor
        grid = self.grid
        match action:
            case "A":
                cur.row = max(cur.row - p(0, 1), 0)
                self.dirty = True
            case "B":
                cur.row = min(cur.row + p(0, 1), grid.rows - 1)
                self.dirty = True
            case "C":
                cur.col = min(cur.col + p(0, 1), grid.cols - 1)
                self.dirty = True
            case "D":
                cur.col = max(cur.col - p(0, 1), 0)
                self.dirty = True
            case "E":
                cur.row = min(cur.row + p(0, 1), grid.rows - 1)
                cur.col = 0
                self.dirty = True
            case "F":
                cur.row = max(cur.row - p(0, 1), 0)
                cur.col = 0
                self.dirty = True
            case "G":
                cur.col = min(max(p(0, 1) - 1, 0), grid.cols - 1)
                self.dirty = True
            case "H" | "f":
                cur.row = min(max(p(0, 1) - 1, 0), grid.rows - 1)
                cur.col = min(max(p(1, 1) - 1, 0), grid.cols - 1)
                self.dirty = True
            case "J":
                mode = p(0, 0)
                if mode == 0:
                    grid.erase_to_eol(cur.row, cur.col)
                    for row in range(cur.row + 1, grid.rows):
                        grid.clear_row(row)
                elif mode == 1:
                    grid.erase_to_bol(cur.row, cur.col)
                    for row in range(cur.row):
                        grid.clear_row(row)
                elif mode in (2, 3):
                    grid.clear()
                self.dirty = True
            case "K":
                mode = p(0, 0)
                if mode == 0:
                    grid.erase_to_eol(cur.row, cur.col)
                elif mode == 1:
                    grid.erase_to_bol(cur.row, cur.col)
                elif mode == 2:
                    grid.clear_row(cur.row)
                self.dirty = True
            case "L":
                grid.insert_lines(cur.row, p(0, 1), self.scroll_bottom)
                self.dirty = True
            case "M":
                grid.delete_lines(cur.row, p(0, 1), self.scroll_bottom)
                self.dirty = True
            case "P":
                cols = grid.cols
                n = min(p(0, 1), cols)
                cells = grid.row(cur.row)
                if cols - n > cur.col:
                    cells[cur.col:cols - n] = cells[cur.col + n:cols]
                cells[cols - n:cols] = [Cell()] * n
                self.dirty = True
            case "S":
                for _ in range(p(0, 1)):
                    grid.scroll_up(self.scroll_top, self.scroll_bottom)
                self.dirty = True
            case "T":
                for _ in range(p(0, 1)):
                    grid.scroll_down(self.scroll_top, self.scroll_bottom)
                self.dirty = True
            case "@":
                cols = grid.cols
                n = p(0, 1)
                cells = grid.row(cur.row)
                if cur.col + n < cols:
                    cells[cur.col + n:cols] = cells[cur.col:cols - n]
                end = min(cur.col + n, cols)
                if end > cur.col:
                    cells[cur.col:end] = [Cell()] * (end - cur.col)
                self.dirty = True
            case "X":
                for col in range(cur.col, cur.col + p(0, 1)):
                    if col < grid.cols:
                        grid.set_cell(col, cur.row, Cell())
                self.dirty = True
            case "m":
                self._select_graphic_rendition(values)
                self.dirty = True
            case "r":
                self.scroll_top = max(p(0, 1) - 1, 0)
                self.scroll_bottom = p(1, grid.rows)
                cur.col = 0
                cur.row = 0
                self.dirty = True
            case "s":
                self._save_cursor()
            case "u":
                self._restore_cursor()
                self.dirty = True
            case "h" | "l":
                if bytes(intermediates) == b"?":
                    enable = action == "h"
                    for mode in values:
                        if mode == 25:
                            self.cursor.visible = enable
                        elif mode == 1049:
                            if enable:
                                self._enter_alt_screen()
                            else:
                                self._exit_alt_screen()
                    self.dirty = True
            case "n":
                pass
            case _:
                log.debug("unhandled CSI: %r %s %r", values, action, intermediates)

    def _select_graphic_rendition(self, values: list[int]) -> None:
        cur = self.cursor
        if not values:
            self._reset_pen()
            return
        i = 0
        while i < len(values):
            code = values[i]
            if code in (38, 48):
                color, i = _parse_color(values, i + 1)
                if color is not None:
                    if code == 38:
                        cur.fg = color
                    else:
                        cur.bg = color
                continue
            if code == 0:
                self._reset_pen()
            elif code in _SET_ATTRS:
                cur.attrs = replace(cur.attrs, **{_SET_ATTRS[code]: True})
            elif code in _RESET_ATTRS:
                cur.attrs = replace(cur.attrs, **{_RESET_ATTRS[code]: False})
            elif 30 <= code <= 37:
                cur.fg = Indexed(code - 30)
            elif code == 39:
                cur.fg = DefaultColor()
            elif 40 <= code <= 47:
                cur.bg = Indexed(code - 40)
            elif code == 49:
                cur.bg = DefaultColor()
            elif 90 <= code <= 97:
                cur.fg = Indexed(code - 90 + 8)
            elif 100 <= code <= 107:
                cur.bg = Indexed(code - 100 + 8)
            i += 1

    def esc_dispatch(self, intermediates: bytes, ignore: bool, byte: int) -> None:
        """Handle an escape sequence final byte."""
        if byte == ord("7"):
            self._save_cursor()
        elif byte == ord("8"):
            if self._restore_cursor():
                self.dirty = True
        elif byte == ord("M"):
            if self.cursor.row == self.scroll_top:
                self.grid.scroll_down(self.scroll_top, self.scroll_bottom)
            elif self.cursor.row > 0:
                self.cursor.row -= 1
            self.dirty = True
        elif byte == ord("D"):
            self._line_feed()
            self.dirty = True
        elif byte == ord("E"):
            self.cursor.col = 0
            self._line_feed()
            self.dirty = True
        else:
            log.debug("unhandled ESC: %r 0x%02x", intermediates, byte)


class _Performer(Protocol):
    def print(self, c: str) -> None: ...

    def execute(self, byte: int) -> None: ...

    def csi_dispatch(
        self, params: list[list[int]], intermediates: bytes, ignore: bool, action: str
    ) -> None: ...

    def esc_dispatch(self, intermediates: bytes, ignore: bool, byte: int) -> None: ...

    def osc_dispatch(self, params: list[bytes], bell_terminated: bool) -> None: ...


class _State(Enum):
    GROUND = auto()
    ESCAPE = auto()
    ESCAPE_INTERMEDIATE = auto()
    CSI_ENTRY = auto()
    CSI_PARAM = auto()
    CSI_INTERMEDIATE = auto()
    CSI_IGNORE = auto()
    OSC_STRING = auto()
    STRING_IGNORE = auto()


_MAX_INTERMEDIATES = 2
_MAX_PARAMS = 32
_MAX_OSC_PARAMS = 16
_MAX_PARAM_VALUE = 0xFFFF


class VtParser:
    """Byte-at-a-time VT500-style parser that calls back into a performer.

    Text in the ground state is decoded as UTF-8; malformed input prints
    U+FFFD. CSI parameters reach the performer as groups of sub-parameters
    (``1;2:3`` becomes ``[[1], [2, 3]]``). DCS, SOS, PM and APC strings are
    consumed and discarded.
    """

    def __init__(self) -> None:
        self._state = _State.GROUND
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._intermediates = bytearray()
        self._ignoring = False
        self._params: list[list[int]] = []
        self._subparams: list[int] = []
        self._param = 0
        self._osc: list[bytearray] = [bytearray()]
        self._handlers = {
            _State.GROUND: self._ground,
            _State.ESCAPE: self._escape,
            _State.ESCAPE_INTERMEDIATE: self._escape_intermediate,
            _State.CSI_ENTRY: self._csi_entry,
            _State.CSI_PARAM: self._csi_param,
            _State.CSI_INTERMEDIATE: self._csi_intermediate,
            _State.CSI_IGNORE: self._csi_ignore,
            _State.OSC_STRING: self._osc_string,
            _State.STRING_IGNORE: lambda performer, byte: None,
        }

    def advance(self, performer: _Performer, byte: int) -> None:
        """Feed one byte, calling performer methods for each completed action."""
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"byte out of range: {byte}")
        if self._state is _State.GROUND and (byte >= 0x80 or self._decoder.getstate()[0]):
            for ch in self._decoder.decode(bytes((byte,))):
                if ord(ch) < 0x80:
                    self._advance_byte(performer, ord(ch))
                else:
                    performer.print(ch)
            return
        self._advance_byte(performer, byte)

    def feed(self, performer: _Performer, data: Iterable[int]) -> None:
        """Feed every byte of data."""
        for byte in data:
            self.advance(performer, byte)

    def _advance_byte(self, performer: _Performer, byte: int) -> None:
        if byte in (0x18, 0x1A):
            self._leave_string(performer)
            performer.execute(byte)
            self._state = _State.GROUND
            return
        if byte == 0x1B:
            self._leave_string(performer)
            self._clear()
            self._state = _State.ESCAPE
            return
        self._handlers[self._state](performer, byte)

    def _leave_string(self, performer: _Performer) -> None:
        if self._state is _State.OSC_STRING:
            self._osc_end(performer, bell_terminated=False)

    def _clear(self) -> None:
        self._intermediates.clear()
        self._ignoring = False
        self._params = []
        self._subparams = []
        self._param = 0

    def _collect(self, byte: int) -> None:
        if len(self._intermediates) == _MAX_INTERMEDIATES:
            self._ignoring = True
        else:
            self._intermediates.append(byte)

    def _param_count(self) -> int:
        return sum(len(group) for group in self._params) + len(self._subparams)

    def _param_byte(self, byte: int) -> None:
        if self._param_count() >= _MAX_PARAMS:
            self._ignoring = True
            return
        if byte == 0x3B:
            self._subparams.append(self._param)
            self._params.append(self._subparams)
            self._subparams = []
            self._param = 0
        elif byte == 0x3A:
            self._subparams.append(self._param)
            self._param = 0
        else:
            self._param = min(self._param * 10 + (byte - 0x30), _MAX_PARAM_VALUE)

    def _csi_dispatch(self, performer: _Performer, byte: int) -> None:
        if self._param_count() >= _MAX_PARAMS:
            self._ignoring = True
        else:
            self._subparams.append(self._param)
            self._params.append(self._subparams)
            self._subparams = []
        performer.csi_dispatch(
            self._params, bytes(self._intermediates), self._ignoring, chr(byte)
        )
        self._state = _State.GROUND

    def _esc_dispatch(self, performer: _Performer, byte: int) -> None:
        performer.esc_dispatch(bytes(self._intermediates), self._ignoring, byte)
        self._state = _State.GROUND

    def _osc_end(self, performer: _Performer, bell_terminated: bool) -> None:
        performer.osc_dispatch([bytes(part) for part in self._osc], bell_terminated)
        self._osc = [bytearray()]

    def _ground(self, performer: _Performer, byte: int) -> None:
        if byte < 0x20:
            performer.execute(byte)
        else:
            performer.print(chr(byte))

    def _escape(self, performer: _Performer, byte: int) -> None:
        if byte < 0x20:
            performer.execute(byte)
        elif byte < 0x30:
            self._collect(byte)
            self._state = _State.ESCAPE_INTERMEDIATE
        elif byte == 0x5B:
            self._clear()
            self._state = _State.CSI_ENTRY
        elif byte == 0x5D:
            self._osc = [bytearray()]
            self._state = _State.OSC_STRING
        elif byte in (0x50, 0x58, 0x5E, 0x5F):
            self._state = _State.STRING_IGNORE
        elif byte <= 0x7E:
            self._esc_dispatch(performer, byte)

    def _escape_intermediate(self, performer: _Performer, byte: int) -> None:
        if byte < 0x20:
            performer.execute(byte)
        elif byte < 0x30:
            self._collect(byte)
        elif byte <= 0x7E:
            self._esc_dispatch(performer, byte)

    def _csi_entry(self, performer: _Performer, byte: int) -> None:
        if byte < 0x20:
            performer.execute(byte)
        elif byte < 0x30:
            self._collect(byte)
            self._state = _State.CSI_INTERMEDIATE
        elif byte <= 0x3B:
            self._param_byte(byte)
            self._state = _State.CSI_PARAM
        elif byte <= 0x3F:
            self._collect(byte)
            self._state = _State.CSI_PARAM
        elif byte <= 0x7E:
            self._csi_dispatch(performer, byte)

    def _csi_param(self, performer: _Performer, byte: int) -> None:
        if byte < 0x20:
            performer.execute(byte)
        elif byte < 0x30:
            self._collect(byte)
            self._state = _State.CSI_INTERMEDIATE
        elif byte <= 0x3B:
            self._param_byte(byte)
        elif byte <= 0x3F:
            self._state = _State.CSI_IGNORE
        elif byte <= 0x7E:
            self._csi_dispatch(performer, byte)

    def _csi_intermediate(self, performer: _Performer, byte: int) -> None:
        if byte < 0x20:
            performer.execute(byte)
        elif byte < 0x30:
            self._collect(byte)
        elif byte <= 0x3F:
            self._state = _State.CSI_IGNORE
        elif byte <= 0x7E:
            self._csi_dispatch(performer, byte)

    def _csi_ignore(self, performer: _Performer, byte: int) -> None:
        if byte < 0x20:
            performer.execute(byte)
        elif 0x40 <= byte <= 0x7E:
            self._state = _State.GROUND

    def _osc_string(self, performer: _Performer, byte: int) -> None:
        if byte == 0x07:
            self._osc_end(performer, bell_terminated=True)
            self._state = _State.GROUND
        elif byte < 0x20:
            return
        elif byte == 0x3B:
            if len(self._osc) < _MAX_OSC_PARAMS:
                self._osc.append(bytearray())
        else:
            self._osc[-1].append(byte)