"""A two-dimensional grid of cells for the visible terminal area."""

from __future__ import annotations

from .cell import Cell


def _blank_row(cols: int) -> list[Cell]:
    return [Cell()] * cols


class Grid:
    """The visible screen as rows of cells."""

    def __init__(self, cols: int, rows: int) -> None:
        self.cols = cols
        self.rows = rows
        self._cells: list[list[Cell]] = [_blank_row(cols) for _ in range(rows)]

    def _check(self, col: int, row: int) -> None:
        if not (0 <= row < len(self._cells) and 0 <= col < len(self._cells[row])):
            raise IndexError(f"cell ({col}, {row}) outside {self.cols}x{self.rows} grid")

    def cell(self, col: int, row: int) -> Cell:
        """Return the cell at the given position."""
        self._check(col, row)
        return self._cells[row][col]

    def set_cell(self, col: int, row: int, cell: Cell) -> None:
        """Set a cell; positions outside the grid are ignored."""
        if 0 <= col < self.cols and 0 <= row < self.rows:
            self._cells[row][col] = cell

    def row(self, row: int) -> list[Cell]:
        """Return the live list of cells of a row."""
        if not 0 <= row < len(self._cells):
            raise IndexError(f"row {row} outside grid of {self.rows} rows")
        return self._cells[row]

    def scroll_up(self, top: int, bottom: int) -> None:
        """Scroll rows top..bottom up by one; the bottom row becomes blank."""
        if top < bottom <= self.rows:
            del self._cells[top]
            self._cells.insert(bottom - 1, _blank_row(self.cols))

    def scroll_down(self, top: int, bottom: int) -> None:
        """Scroll rows top..bottom down by one; the top row becomes blank."""
        if top < bottom <= self.rows:
            del self._cells[bottom - 1]
            self._cells.insert(top, _blank_row(self.cols))

    def clear_region(self, top: int, left: int, bottom: int, right: int) -> None:
        """Blank the inclusive rectangle, clipped to the grid."""
        last_col = min(right, self.cols - 1) + 1
        if last_col <= left:
            return
        for row in range(top, min(bottom, self.rows - 1) + 1):
            self._cells[row][left:last_col] = _blank_row(last_col - left)

    def clear(self) -> None:
        """Blank the whole grid."""
        self.clear_region(0, 0, self.rows - 1, self.cols - 1)

    def clear_row(self, row: int) -> None:
        """Blank one row; rows outside the grid are ignored."""
        if 0 <= row < len(self._cells):
            cells = self._cells[row]
            cells[:] = _blank_row(len(cells))

    def resize(self, new_cols: int, new_rows: int) -> None:
        """Resize the grid, keeping the top-left content."""
        del self._cells[new_rows:]
        while len(self._cells) < new_rows:
            self._cells.append(_blank_row(new_cols))
        for cells in self._cells:
            if len(cells) > new_cols:
                del cells[new_cols:]
            else:
                cells.extend(_blank_row(new_cols - len(cells)))
        self.cols = new_cols
        self.rows = new_rows

    def erase_to_eol(self, row: int, col: int) -> None:
        """Blank from col to the end of the row."""
        if 0 <= row < len(self._cells) and col < self.cols:
            self._cells[row][col:self.cols] = _blank_row(self.cols - col)

    def erase_to_bol(self, row: int, col: int) -> None:
        """Blank from the start of the row up to and including col."""
        if 0 <= row < len(self._cells):
            end = min(col, self.cols - 1) + 1
            if end > 0:
                self._cells[row][:end] = _blank_row(end)

    def row_text(self, row: int) -> str:
        """Text of a row without continuation cells or trailing whitespace."""
        if not 0 <= row < self.rows:
            return ""
        return "".join(c.ch for c in self._cells[row] if c.width > 0).rstrip()

    def search(
        self, query: str, start_col: int, start_row: int, forward: bool
    ) -> tuple[int, int] | None:
        """Find query case-insensitively, wrapping around the grid.

        Returns (col, row) of the match nearest to the start in the given
        direction, excluding a match at the start position itself.
        """
        if not query:
            return None
        needle = query.lower()
        last_row = min(start_row, self.rows - 1)

        if forward:
            for row in range(start_row, self.rows):
                text = self.row_text(row).lower()
                begin = min(start_col + 1, len(text)) if row == start_row else 0
                pos = text.find(needle, begin)
                if pos >= 0:
                    return pos, row
            for row in range(0, last_row + 1):
                text = self.row_text(row).lower()
                limit = start_col if row == start_row else len(text)
                pos = text[: min(limit, len(text))].find(needle)
                if pos >= 0:
                    return pos, row
        else:
            for row in range(last_row, -1, -1):
                text = self.row_text(row).lower()
                until = min(start_col, len(text)) if row == start_row else len(text)
                pos = text[:until].rfind(needle)
                if pos >= 0:
                    return pos, row
            for row in range(self.rows - 1, last_row - 1, -1):
                text = self.row_text(row).lower()
                begin = min(start_col + 1, len(text)) if row == start_row else 0
                if begin < len(text):
                    pos = text.rfind(needle, begin)
                    if pos >= 0:
                        return pos, row
        return None

    def insert_lines(self, row: int, count: int, bottom: int) -> None:
        """Insert blank lines at row, pushing lines down within the region."""
        for _ in range(count):
            if row < bottom <= self.rows:
                del self._cells[bottom - 1]
                self._cells.insert(row, _blank_row(self.cols))

    def delete_lines(self, row: int, count: int, bottom: int) -> None:
        """Delete lines at row, pulling lines up within the region."""
        for _ in range(count):
            if row < bottom <= self.rows:
                del self._cells[row]
                self._cells.insert(bottom - 1, _blank_row(self.cols))