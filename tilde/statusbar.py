"""Status bar and message bar text."""

import time
from dataclasses import dataclass
from typing import Callable

from wcwidth import wcwidth

from .constants import EditorConstants


def _display_width(text: str) -> int:
    return sum(max(wcwidth(ch), 0) for ch in text)


def _truncate(text: str, width: int) -> str:
    """Longest prefix of ``text`` that fits in ``width`` columns."""
    used = 0
    for i, ch in enumerate(text):
        used += max(wcwidth(ch), 0)
        if used > width:
            return text[:i]
    return text


@dataclass
class DocumentStatus:
    """What the status bar shows about the document."""
    total_lines: int = 0
    current_line_idx: int = 0
    is_modified: bool = False
    filename: str = EditorConstants.NO_NAME

    def modified_indicator(self) -> str:
        return "(modified)" if self.is_modified else ""

    def line_count_text(self) -> str:
        return f"{self.total_lines} lines"

    def position_indicator(self) -> str:
        return f"{self.current_line_idx + 1}/{self.total_lines}"


class StatusBar:
    def __init__(self):
        self.current_status = DocumentStatus()
        self.needs_redraw = True

    def update_status(self, status: DocumentStatus) -> None:
        if status != self.current_status:
            self.current_status = status
            self.needs_redraw = True

    def render(self, width: int) -> str:
        """Lay out the status line for a terminal ``width`` columns wide.

        File name, line count and modified flag go on the left, the
        current line on the right. When both halves don't fit, only the
        (possibly truncated) left half is shown.
        """
        status = self.current_status
        left = f"{status.filename} - {status.line_count_text()}"
        if status.is_modified:
            left += f" {status.modified_indicator()}"
        right = status.position_indicator()

        self.needs_redraw = False
        left_width = _display_width(left)
        if left_width + len(right) > width:
            clipped = _truncate(left, width)
            return clipped + " " * (width - _display_width(clipped))
        return left + " " * (width - left_width - len(right)) + right


class MessageBar:
    """A single message that disappears after ``duration`` seconds."""

    def __init__(self, duration: float = EditorConstants.DEFAULT_MESSAGE_DURATION,
                 clock: Callable[[], float] = time.monotonic):
        self.duration = duration
        self._clock = clock
        self._message = ""
        self._set_at = clock()

    def update_message(self, message: str) -> None:
        self._message = message
        self._set_at = self._clock()

    def is_expired(self) -> bool:
        return self._clock() - self._set_at > self.duration

    def text(self) -> str:
        """The current message, or "" once it has expired."""
        if self.is_expired():
            return ""
        return self._message

    def render(self, width: int) -> str:
        return _truncate(self.text(), width)
