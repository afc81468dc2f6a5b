"""Status bar layout and rendering into a row of cells."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace

from .cell import Cell, Color, Indexed

_MONTH_DAYS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


@dataclass
class WindowStatus:
    """One window entry in the status bar."""

    index: int
    name: str
    active: bool


@dataclass
class StatusBarContext:
    """What the status bar shows and how wide it is."""

    session_name: str
    windows: list[WindowStatus]
    cols: int


@dataclass
class StatusBar:
    """Status bar formats and colours."""

    left_format: str = "[#{session_name}] "
    right_format: str = " %H:%M %Y-%m-%d"
    style_fg: Color = field(default_factory=lambda: Indexed(0))
    style_bg: Color = field(default_factory=lambda: Indexed(2))
    active_window_fg: Color = field(default_factory=lambda: Indexed(0))
    active_window_bg: Color = field(default_factory=lambda: Indexed(3))

    def render(self, ctx: StatusBarContext) -> list[Cell]:
        """Render the bar as exactly ``ctx.cols`` cells."""
        cols = ctx.cols
        now = int(time.time())
        base = Cell(" ", fg=self.style_fg, bg=self.style_bg)
        cells = [base] * cols

        pos = 0
        for ch in self.expand_format(self.left_format, ctx, now):
            if pos >= cols:
                break
            cells[pos] = replace(cells[pos], ch=ch)
            pos += 1

        for win in ctx.windows:
            label = f"{win.index}:{win.name}{'* ' if win.active else ' '}"
            for ch in label:
                if pos >= cols:
                    break
                if win.active:
                    cells[pos] = replace(
                        cells[pos], ch=ch, fg=self.active_window_fg, bg=self.active_window_bg
                    )
                else:
                    cells[pos] = replace(cells[pos], ch=ch)
                pos += 1

        right = self.expand_format(self.right_format, ctx, now)
        pos = max(0, cols - len(right))
        for ch in right:
            if pos >= cols:
                break
            cells[pos] = replace(cells[pos], ch=ch)
            pos += 1

        return cells

    def expand_format(
        self, fmt: str, ctx: StatusBarContext, now: int | None = None
    ) -> str:
        """Substitute the session name and UTC time fields into fmt.

        ``now`` is seconds since the Unix epoch; the current time when None.
        """
        secs = int(time.time()) if now is None else int(now)
        hours = (secs % 86400) // 3600
        minutes = (secs % 3600) // 60
        year, month, day = days_to_ymd(secs // 86400)
        return (
            fmt.replace("#{session_name}", ctx.session_name)
            .replace("%H", f"{hours:02}")
            .replace("%M", f"{minutes:02}")
            .replace("%Y", f"{year:04}")
            .replace("%m", f"{month:02}")
            .replace("%d", f"{day:02}")
        )


def is_leap_year(year: int) -> bool:
    """True for Gregorian leap years."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_to_ymd(days: int) -> tuple[int, int, int]:
    """Convert days since 1970-01-01 to (year, month, day)."""
    year = 1970
    remaining = days
    while True:
        in_year = 366 if is_leap_year(year) else 365
        if remaining < in_year:
            break
        remaining -= in_year
        year += 1

    month = 1
    for index, in_month in enumerate(_MONTH_DAYS):
        if index == 1 and is_leap_year(year):
            in_month += 1
        if remaining < in_month:
            break
        remaining -= in_month
        month += 1

    return year, month, remaining + 1