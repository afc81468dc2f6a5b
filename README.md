# wtmux

The terminal-emulation core of a terminal multiplexer, as a plain Python
library. It takes the byte stream a program writes to its terminal, keeps
the screen that stream describes, and turns that screen back into ANSI
escape sequences so it can be drawn inside a larger display.

## What it provides

- `wtmux.cell`: `Cell`, `Attrs` and the colour values `DefaultColor`,
  `Indexed` and `Rgb`. Cells are immutable; `with_fg`, `with_bg` and
  `with_attrs` return changed copies, and `is_empty` tells a blank cell.
- `wtmux.grid`: `Grid`, a fixed-size block of cells. It scrolls a region up
  or down, clears regions, rows and parts of rows, inserts and deletes
  lines, resizes while keeping the top-left content, gives a row back as
  text (`row_text`), and runs a case-insensitive `search` that wraps past
  either end of the screen.
- `wtmux.scrollback`: `Scrollback`, a bounded history of lines that drops
  the oldest line once full. `get_line(0)` is the newest line; iterating
  goes oldest first.
- `wtmux.parser`: `VtParser` and `TerminalState`. The parser decodes UTF-8
  text and splits out control bytes, ESC, CSI and OSC sequences; DCS, SOS,
  PM and APC strings are read and dropped. The state handles cursor
  movement, erasing, inserting and deleting characters and lines, scroll
  regions, SGR colours (16, 256 and 24-bit) and attributes, cursor
  visibility, the alternate screen (mode 1049), saved cursors and OSC 0/2
  window titles. Wide characters take two cells, measured with `wcwidth`.
- `wtmux.terminal`: `Terminal`, which joins the parser to the state. It
  tracks whether the screen changed (`is_dirty`, `mark_clean`) and renders
  the whole screen (`render`) or a rectangle of it at another position
  (`render_region`) as ANSI bytes, writing SGR codes only when they change.
- `wtmux.statusbar`: `StatusBar`, `StatusBarContext` and `WindowStatus`.
  `render` lays out one line of cells with the session name, the window
  list (the active window highlighted and marked `*`) and a clock.
  `expand_format` fills in `#{session_name}`, `%H`, `%M`, `%Y`, `%m` and
  `%d`; times are UTC. `days_to_ymd` and `is_leap_year` are the calendar
  helpers behind it.
- `wtmux.copymode`: `CopyMode`, `CopyModeAction` and `ActionKind`, for
  moving a cursor over a pane, searching forward and backward, and copying
  a selection as text. `render_indicator` gives the ANSI bytes of the
  `[Copy mode]` label.
- `wtmux.pastebuffer`: `PasteBuffer`, a bounded stack of copied text.

## Installing

```
pip install .
```

To also install what the test suite needs:

```
pip install .[test]
```

## Example

```python
from wtmux.terminal import Terminal

term = Terminal(80, 24)
term.process_bytes(b"Hello\r\n\x1b[31mWorld")

print(term.state.grid.row_text(0))       # Hello
print(term.cursor_pos())                  # (5, 1)

screen = term.render()                    # bytes of ANSI escape sequences
pane = term.render_region(0, 0, 40, 12, 10, 5)
```

Copying text from a pane and keeping it in a paste buffer:

```python
from wtmux.copymode import ActionKind, CopyMode, CopyModeAction
from wtmux.pastebuffer import PasteBuffer

buffers = PasteBuffer(50)
mode = CopyMode(0, 0)
mode.handle_action(CopyModeAction(ActionKind.START_SELECTION), term)
mode.handle_action(CopyModeAction(ActionKind.END_OF_LINE), term)
text = mode.handle_action(CopyModeAction(ActionKind.COPY_SELECTION), term)
if text is not None:
    buffers.push(text)
print(buffers.top())
```

Searching starts with `CopyModeAction(ActionKind.SEARCH_FORWARD, "query")`
or `SEARCH_BACKWARD`; `SEARCH_NEXT` and `SEARCH_PREV` repeat it.

## What it does not do

This is a library of building blocks, not a multiplexer you can run. It
starts no shells or pseudo-terminals, has no server or client, no
sessions, windows or pane layouts, no key bindings or command language,
and no configuration files; there is no command to run. `Scrollback` is a
standalone store: the terminal does not push lines that scroll off the
screen into it, and copy mode's `scroll_offset` is only a counter. Device
status reports (`CSI n`) are accepted but not answered.

## Running the tests

```
pytest
```