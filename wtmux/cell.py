"""Terminal cell contents: colours, text attributes and single cells."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Union


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be in 0..255, got {value}")


@dataclass(frozen=True)
class DefaultColor:
    """The terminal's default colour."""


@dataclass(frozen=True)
class Indexed:
    """A colour from the 256-colour palette."""

    index: int

    def __post_init__(self) -> None:
        _check_byte("index", self.index)


@dataclass(frozen=True)
class Rgb:
    """A 24-bit true colour."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            _check_byte(name, getattr(self, name))


Color = Union[DefaultColor, Indexed, Rgb]


@dataclass(frozen=True)
class Attrs:
    """Text attributes of a cell."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    blink: bool = False
    reverse: bool = False
    hidden: bool = False
    strikethrough: bool = False


@dataclass(frozen=True)
class Cell:
    """A single character cell of the terminal grid.

    ``width`` is 1 for normal characters, 2 for wide characters and 0 for the
    continuation cell that follows a wide character.
    """

    ch: str = " "
    fg: Color = field(default_factory=DefaultColor)
    bg: Color = field(default_factory=DefaultColor)
    attrs: Attrs = field(default_factory=Attrs)
    width: int = 1

    def with_fg(self, fg: Color) -> Cell:
        """Return a copy with the given foreground colour."""
        return replace(self, fg=fg)

    def with_bg(self, bg: Color) -> Cell:
        """Return a copy with the given background colour."""
        return replace(self, bg=bg)

    def with_attrs(self, attrs: Attrs) -> Cell:
        """Return a copy with the given attributes."""
        return replace(self, attrs=attrs)

    def is_empty(self) -> bool:
        """True if the cell is a blank space with default colours and attributes."""
        return (
            self.ch == " "
            and self.fg == DefaultColor()
            and self.bg == DefaultColor()
            and self.attrs == Attrs()
        )