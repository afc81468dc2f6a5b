"""Terminal emulation core: VT parsing, cell grids, scrollback, status bar, copy mode and paste buffers."""

__version__ = "0.1.0"