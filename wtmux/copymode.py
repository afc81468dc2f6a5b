"""Copy mode: cursor navigation, search and text selection over a pane."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from .terminal import Terminal


class ActionKind(Enum):
    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()
    PAGE_UP = auto()
    PAGE_DOWN = auto()
    HALF_PAGE_UP = auto()
    HALF_PAGE_DOWN = auto()
    TOP = auto()
    BOTTOM = auto()
    START_OF_LINE = auto()
    END_OF_LINE = auto()
    START_SELECTION = auto()
    COPY_SELECTION = auto()
    CANCEL_SELECTION = auto()
    SEARCH_FORWARD = auto()
    SEARCH_BACKWARD = auto()
    SEARCH_NEXT = auto()
    SEARCH_PREV = auto()
    EXIT = auto()


@dataclass(frozen=True)
class CopyModeAction:
    """A copy mode command; ``query`` is used by the two search-start kinds."""

    kind: ActionKind
    query: str = ""


class CopyMode:
    """Copy mode state for one pane."""

    def __init__(self, cursor_x: int, cursor_y: int) -> None:
        self.active = True
        self.cursor_x = cursor_x
        self.cursor_y = cursor_y
        self.scroll_offset = 0
        self.selection_start: tuple[int, int] | None = None
        self.selection_end: tuple[int, int] | None = None
        self.search_query = ""
        self.search_direction_forward = True

    def handle_action(self, action: CopyModeAction, terminal: Terminal) -> str | None:
        """Apply an action; return the copied text when a selection is copied."""
        cols = terminal.state.grid.cols
        rows = terminal.state.grid.rows

        match action.kind:
            case ActionKind.UP:
                if self.cursor_y > 0:
                    self.cursor_y -= 1
                else:
                    self.scroll_offset += 1
            case ActionKind.DOWN:
                if self.cursor_y < rows - 1:
                    self.cursor_y += 1
                elif self.scroll_offset > 0:
                    self.scroll_offset -= 1
            case ActionKind.LEFT:
                if self.cursor_x > 0:
                    self.cursor_x -= 1
            case ActionKind.RIGHT:
                if self.cursor_x < cols - 1:
                    self.cursor_x += 1
            case ActionKind.PAGE_UP:
                self.scroll_offset += rows
            case ActionKind.PAGE_DOWN:
                self.scroll_offset = max(self.scroll_offset - rows, 0)
            case ActionKind.HALF_PAGE_UP:
                self.scroll_offset += rows // 2
            case ActionKind.HALF_PAGE_DOWN:
                self.scroll_offset = max(self.scroll_offset - rows // 2, 0)
            case ActionKind.TOP:
                self.cursor_y = 0
            case ActionKind.BOTTOM:
                self.cursor_y = rows - 1
                self.scroll_offset = 0
            case ActionKind.START_OF_LINE:
                self.cursor_x = 0
            case ActionKind.END_OF_LINE:
                self.cursor_x = cols - 1
            case ActionKind.START_SELECTION:
                self.selection_start = (self.cursor_x, self.cursor_y)
                self.selection_end = None
            case ActionKind.COPY_SELECTION:
                if self.selection_start is not None:
                    end = (self.cursor_x, self.cursor_y)
                    self.selection_end = end
                    text = self._extract_selection(terminal, self.selection_start, end)
                    self.active = False
                    return text
            case ActionKind.CANCEL_SELECTION:
                self.selection_start = None
                self.selection_end = None
            case ActionKind.SEARCH_FORWARD:
                self.search_query = action.query
                self.search_direction_forward = True
                self._do_search(terminal)
            case ActionKind.SEARCH_BACKWARD:
                self.search_query = action.query
                self.search_direction_forward = False
                self._do_search(terminal)
            case ActionKind.SEARCH_NEXT:
                self._do_search(terminal)
            case ActionKind.SEARCH_PREV:
                self.search_direction_forward = not self.search_direction_forward
                self._do_search(terminal)
                self.search_direction_forward = not self.search_direction_forward
            case ActionKind.EXIT:
                self.active = False
        return None

    @staticmethod
    def _extract_selection(
        terminal: Terminal, start: tuple[int, int], end: tuple[int, int]
    ) -> str:
        grid = terminal.state.grid
        cols = grid.cols
        (start_col, start_row), (end_col, end_row) = sorted(
            (start, end), key=lambda pos: (pos[1], pos[0])
        )

        text = ""
        for row in range(start_row, end_row + 1):
            if row >= grid.rows:
                break
            first = start_col if row == start_row else 0
            last = end_col if row == end_row else cols - 1
            text += "".join(
                cell.ch for cell in grid.row(row)[first:min(last, cols - 1) + 1] if cell.width > 0
            )
            if row != end_row:
                text = text.rstrip() + "\n"
        return text

    def _do_search(self, terminal: Terminal) -> None:
        if not self.search_query:
            return
        found = terminal.state.grid.search(
            self.search_query, self.cursor_x, self.cursor_y, self.search_direction_forward
        )
        if found is not None:
            self.cursor_x, self.cursor_y = found

    def render_indicator(self) -> bytes:
        """Render the copy mode indicator at the top-left corner."""
        label = (
            "[Copy mode - selecting]" if self.selection_start is not None else "[Copy mode]"
        )
        return f"\x1b[1;1H\x1b[43;30m{label}\x1b[0m".encode()