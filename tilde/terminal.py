"""Terminal interface using Blessed for display and Curtsies for input."""

import select
import sys
from typing import Optional, Sequence, Union

import blessed
from curtsies import Input

from .annotated_text import AnnotatedText, AnnotationType
from .constants import EditorConstants
from .location import Position, Size

Row = Union[AnnotatedText, str]


class TerminalInterface:
    """Handles terminal I/O using Blessed.

    The screen is laid out as the document rows, then the status bar, then
    one row shared by messages and prompts.
    """

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._input: Optional[Input] = None
        # Virtual screen state for minimal updates
        self._last_rows: Optional[list[str]] = None
        self._last_status: Optional[str] = None
        self._last_bottom: Optional[str] = None
        self._last_width: Optional[int] = None

    def setup(self):
        """Enter fullscreen mode and prepare terminal."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.hide_cursor, end='')
        print(self.term.clear, end='', flush=True)
        self.is_fullscreen = True
        if self._input is None:
            # Enter raw mode immediately so reads work
            self._input = Input(keynames='curtsies')
            self._input.__enter__()

    def cleanup(self):
        """Exit fullscreen mode and restore terminal."""
        if self._input is not None:
            try:
                self._input.__exit__(None, None, None)
            finally:
                self._input = None
        if self.is_fullscreen:
            print(self.term.exit_fullscreen, end='')
            print(self.term.normal_cursor, end='', flush=True)
            self.is_fullscreen = False

    def size(self) -> Size:
        """Size available to the document, excluding the bottom rows."""
        return Size(max(self.term.height - EditorConstants.STATUS_ROWS, 0), self.term.width)

    def invalidate_frame(self) -> None:
        """Forget the last frame so the next update repaints everything."""
        self._last_rows = None
        self._last_status = None
        self._last_bottom = None
        self._last_width = None

    def render_annotated(self, text: AnnotatedText) -> str:
        """Compose an annotated row, highlighting search matches."""
        out = []
        for part in text:
            if part.kind is AnnotationType.SELECTED_MATCH:
                out.append(self.term.black_on_green(part.text))
            elif part.kind is AnnotationType.MATCH:
                out.append(self.term.black_on_yellow(part.text))
            else:
                out.append(part.text)
        return ''.join(out)

    def _compose_row(self, row: Row, width: int) -> str:
        if isinstance(row, AnnotatedText):
            styled = self.render_annotated(row)
        else:
            styled = row
        # blessed measures wide characters and escape sequences
        return self.term.ljust(styled, width)

    def update_frame(
        self,
        rows: Sequence[Row],
        status_text: str,
        bottom_text: str,
        caret: Position,
    ) -> None:
        """Diff against last frame and write only changes.

        Falls back to a full clear on first paint or when geometry changes.

        Args:
            rows: One entry per document row.
            status_text: Text of the status bar, drawn in reverse video.
            bottom_text: Message or prompt shown on the last row.
            caret: Screen position for the terminal caret.
        """
        width = self.term.width
        need_full_clear = (
            self._last_rows is None
            or self._last_width != width
            or len(self._last_rows) != len(rows)
        )
        if need_full_clear:
            print(self.term.home + self.term.clear, end='')
            self._last_rows = ["" for _ in rows]
            self._last_status = None
            self._last_bottom = None
            self._last_width = width

        out = [self.term.hide_cursor]
        for y, row in enumerate(rows):
            display = self._compose_row(row, width)
            if display != self._last_rows[y]:
                out.append(self.term.move(y, 0) + display)
                self._last_rows[y] = display

        status_y = len(rows)
        status = self.term.reverse(self.term.ljust(status_text, width))
        if status != self._last_status:
            out.append(self.term.move(status_y, 0) + status)
            self._last_status = status

        bottom = self.term.ljust(bottom_text, width)
        if bottom != self._last_bottom:
            out.append(self.term.move(status_y + 1, 0) + bottom)
            self._last_bottom = bottom

        out.append(self.term.move(caret.row, caret.col) + self.term.normal_cursor)
        print(''.join(out), end='', flush=True)

    def get_key(self, timeout=None) -> Optional[str]:
        """Get a single keypress from the user.

        Args:
            timeout: Timeout in seconds (None for blocking, 0 for non-blocking)

        Returns:
            The curtsies key name, or None if nothing arrived in time.
        """
        if self._input is None:
            return None
        if timeout is not None:
            r, _, _ = select.select([sys.stdin], [], [], float(timeout))
            if not r:
                return None
        return str(next(self._input))

    @property
    def width(self):
        """Terminal width in columns."""
        return self.term.width

    @property
    def height(self):
        """Terminal height in rows."""
        return self.term.height
