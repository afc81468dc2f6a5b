import pytest

from wtmux.cell import Cell
from wtmux.grid import Grid


def _write(grid, row, text):
    for col, ch in enumerate(text):
        grid.set_cell(col, row, Cell(ch))


def _column(grid, col=0):
    return [grid.cell(col, row).ch for row in range(grid.rows)]


def test_new_grid():
    grid = Grid(80, 24)
    assert grid.cols == 80
    assert grid.rows == 24
    assert grid.cell(0, 0).ch == " "


def test_set_cell():
    grid = Grid(80, 24)
    grid.set_cell(5, 3, Cell("A"))
    assert grid.cell(5, 3).ch == "A"


def test_set_cell_outside_is_ignored():
    grid = Grid(4, 2)
    grid.set_cell(4, 0, Cell("A"))
    grid.set_cell(0, 2, Cell("A"))
    assert all(grid.cell(c, r).is_empty() for r in range(2) for c in range(4))


def test_cell_outside_raises():
    grid = Grid(4, 2)
    with pytest.raises(IndexError):
        grid.cell(4, 0)
    with pytest.raises(IndexError):
        grid.cell(0, -1)


def test_scroll_up():
    grid = Grid(80, 3)
    grid.set_cell(0, 0, Cell("A"))
    grid.set_cell(0, 1, Cell("B"))
    grid.set_cell(0, 2, Cell("C"))
    grid.scroll_up(0, 3)
    assert grid.cell(0, 0).ch == "B"
    assert grid.cell(0, 1).ch == "C"
    assert grid.cell(0, 2).ch == " "


def test_scroll_down():
    grid = Grid(10, 3)
    for row, ch in enumerate("ABC"):
        grid.set_cell(0, row, Cell(ch))
    grid.scroll_down(0, 3)
    assert _column(grid) == [" ", "A", "B"]


def test_scroll_with_invalid_region_does_nothing():
    grid = Grid(10, 3)
    for row, ch in enumerate("ABC"):
        grid.set_cell(0, row, Cell(ch))
    grid.scroll_up(2, 2)
    grid.scroll_down(0, 4)
    assert _column(grid) == ["A", "B", "C"]


def test_resize():
    grid = Grid(80, 24)
    grid.set_cell(0, 0, Cell("X"))
    grid.resize(40, 12)
    assert grid.cols == 40
    assert grid.rows == 12
    assert grid.cell(0, 0).ch == "X"


def test_resize_grow_adds_blank_cells():
    grid = Grid(2, 2)
    grid.set_cell(1, 1, Cell("Z"))
    grid.resize(5, 4)
    assert len(grid.row(3)) == 5
    assert grid.cell(1, 1).ch == "Z"
    assert grid.cell(4, 3).is_empty()


def test_clear_and_clear_row():
    grid = Grid(5, 3)
    for row in range(3):
        _write(grid, row, "abcde")
    grid.clear_row(1)
    assert grid.row_text(1) == ""
    assert grid.row_text(0) == "abcde"
    grid.clear()
    assert all(grid.row_text(r) == "" for r in range(3))


def test_clear_region_is_inclusive_and_clipped():
    grid = Grid(5, 3)
    for row in range(3):
        _write(grid, row, "abcde")
    grid.clear_region(0, 1, 1, 99)
    assert grid.row_text(0) == "a"
    assert grid.row_text(1) == "a"
    assert grid.row_text(2) == "abcde"


def test_erase_to_eol_and_bol():
    grid = Grid(6, 2)
    _write(grid, 0, "abcdef")
    _write(grid, 1, "abcdef")
    grid.erase_to_eol(0, 2)
    grid.erase_to_bol(1, 2)
    assert grid.row_text(0) == "ab"
    assert grid.row_text(1) == "   def"


def test_row_text_skips_continuation_and_trims():
    grid = Grid(6, 1)
    grid.set_cell(0, 0, Cell("漢", width=2))
    grid.set_cell(1, 0, Cell(" ", width=0))
    grid.set_cell(2, 0, Cell("x"))
    assert grid.row_text(0) == "漢x"
    assert grid.row_text(5) == ""


def test_insert_lines():
    grid = Grid(4, 3)
    for row, ch in enumerate("ABC"):
        grid.set_cell(0, row, Cell(ch))
    grid.insert_lines(0, 1, 3)
    assert _column(grid) == [" ", "A", "B"]


def test_delete_lines():
    grid = Grid(4, 3)
    for row, ch in enumerate("ABC"):
        grid.set_cell(0, row, Cell(ch))
    grid.delete_lines(0, 2, 3)
    assert _column(grid) == ["C", " ", " "]


def _search_grid():
    grid = Grid(20, 3)
    _write(grid, 0, "Hello world")
    _write(grid, 1, "say hello")
    return grid


def test_search_forward_skips_start_position():
    grid = _search_grid()
    assert grid.search("hello", 0, 0, True) == (4, 1)


def test_search_forward_wraps_around():
    grid = _search_grid()
    assert grid.search("world", 0, 1, True) == (6, 0)


def test_search_backward():
    grid = _search_grid()
    assert grid.search("HELLO", 0, 1, False) == (0, 0)


def test_search_backward_wraps_around():
    grid = _search_grid()
    assert grid.search("hello", 0, 0, False) == (4, 1)


def test_search_missing_and_empty():
    grid = _search_grid()
    assert grid.search("absent", 0, 0, True) is None
    assert grid.search("", 0, 0, True) is None