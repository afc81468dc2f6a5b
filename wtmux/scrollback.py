"""Bounded history of lines scrolled off the screen."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

from .cell import Cell


class Scrollback:
    """Keeps at most ``max_lines`` lines, dropping the oldest first."""

    def __init__(self, max_lines: int) -> None:
        self.max_lines = max_lines
        self._lines: deque[list[Cell]] = deque()

    def push_line(self, line: list[Cell]) -> None:
        """Append a line, discarding the oldest one when full."""
        if self._lines and len(self._lines) >= self.max_lines:
            self._lines.popleft()
        self._lines.append(line)

    def get_line(self, offset: int) -> list[Cell] | None:
        """Return a line counted back from the newest (0), or None."""
        if 0 <= offset < len(self._lines):
            return self._lines[len(self._lines) - 1 - offset]
        return None

    def clear(self) -> None:
        """Drop all lines."""
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[list[Cell]]:
        """Iterate over lines, oldest first."""
        return iter(self._lines)