"""A bounded stack of copied text."""

from __future__ import annotations


class PasteBuffer:
    """Holds up to ``max_buffers`` texts, dropping the oldest first."""

    def __init__(self, max_buffers: int) -> None:
        if max_buffers < 1:
            raise ValueError("max_buffers must be at least 1")
        self.max_buffers = max_buffers
        self._buffers: list[str] = []

    def push(self, text: str) -> None:
        """Add text as the most recent buffer."""
        if len(self._buffers) >= self.max_buffers:
            del self._buffers[0]
        self._buffers.append(text)

    def top(self) -> str | None:
        """Return the most recent buffer, or None when empty."""
        return self._buffers[-1] if self._buffers else None

    def get(self, index: int) -> str | None:
        """Return a buffer counted back from the most recent (0), or None."""
        if 0 <= index < len(self._buffers):
            return self._buffers[len(self._buffers) - 1 - index]
        return None

    def __len__(self) -> int:
        return len(self._buffers)