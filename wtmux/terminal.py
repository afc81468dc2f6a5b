"""A terminal emulator: VT parsing into a grid and rendering back to ANSI."""

from __future__ import annotations

from collections.abc import Iterable

from .cell import Attrs, Cell, Color, DefaultColor, Indexed, Rgb
from .parser import TerminalState, VtParser

_ATTR_CODES = (
    ("bold", b";1"),
    ("italic", b";3"),
    ("underline", b";4"),
    ("blink", b";5"),
    ("reverse", b";7"),
    ("hidden", b";8"),
    ("strikethrough", b";9"),
)


def _color_sgr(color: Color, is_fg: bool) -> bytes:
    if isinstance(color, Indexed):
        n = color.index
        if n < 8:
            return f";{(30 if is_fg else 40) + n}".encode()
        if n < 16:
            return f";{(90 if is_fg else 100) + n - 8}".encode()
        return f";{'38' if is_fg else '48'};5;{n}".encode()
    if isinstance(color, Rgb):
        return f";{'38' if is_fg else '48'};2;{color.r};{color.g};{color.b}".encode()
    return b""


def _attrs_sgr(attrs: Attrs) -> bytes:
    return b"".join(code for name, code in _ATTR_CODES if getattr(attrs, name))


class _Pen:
    """Tracks the last emitted SGR state so that changes are written only once."""

    def __init__(self) -> None:
        self.fg: Color = DefaultColor()
        self.bg: Color = DefaultColor()
        self.attrs = Attrs()

    def emit(self, out: bytearray, cell: Cell) -> None:
        if cell.fg != self.fg or cell.bg != self.bg or cell.attrs != self.attrs:
            out += b"\x1b[0"
            out += _color_sgr(cell.fg, True)
            out += _color_sgr(cell.bg, False)
            out += _attrs_sgr(cell.attrs)
            out += b"m"
            self.fg, self.bg, self.attrs = cell.fg, cell.bg, cell.attrs
        out += cell.ch.encode("utf-8")


class Terminal:
    """Feeds output bytes through a VT parser and renders the resulting screen."""

    def __init__(self, cols: int, rows: int) -> None:
        self.state = TerminalState(cols, rows)
        self._parser = VtParser()

    def process_bytes(self, data: Iterable[int]) -> None:
        """Process raw output bytes, updating the grid."""
        self._parser.feed(self.state, data)

    def resize(self, cols: int, rows: int) -> None:
        """Resize the terminal."""
        self.state.resize(cols, rows)

    def cursor_pos(self) -> tuple[int, int]:
        """Return the cursor position as (col, row)."""
        return self.state.cursor.col, self.state.cursor.row

    def is_dirty(self) -> bool:
        """True if the content changed since the last mark_clean()."""
        return self.state.dirty

    def mark_clean(self) -> None:
        """Mark the content as rendered."""
        self.state.dirty = False

    def render(self) -> bytes:
        """Render the whole grid as ANSI escape sequences."""
        grid = self.state.grid
        out = bytearray(b"\x1b[?25l\x1b[H")
        pen = _Pen()
        for row in range(grid.rows):
            if row > 0:
                out += b"\r\n"
            for cell in grid.row(row):
                if cell.width != 0:
                    pen.emit(out, cell)
        out += b"\x1b[0m"
        cursor = self.state.cursor
        out += f"\x1b[{cursor.row + 1};{cursor.col + 1}H".encode()
        if cursor.visible:
            out += b"\x1b[?25h"
        return bytes(out)

    def render_region(
        self, x: int, y: int, width: int, height: int, dest_x: int, dest_y: int
    ) -> bytes:
        """Render a rectangle of the grid at a destination screen position."""
        grid = self.state.grid
        out = bytearray()
        pen = _Pen()
        for offset in range(height):
            src_row = y + offset
            if src_row >= grid.rows:
                break
            out += f"\x1b[{dest_y + offset + 1};{dest_x + 1}H".encode()
            for cell in grid.row(src_row)[x:x + width]:
                if cell.width != 0:
                    pen.emit(out, cell)
        out += b"\x1b[0m"
        return bytes(out)