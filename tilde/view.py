"""The document view: caret, scrolling, editing and search over a buffer."""

import logging
from typing import Optional, Union

from .annotated_text import AnnotatedText
from .buffer import Buffer
from .commands import Edit, EditAction, Move
from .constants import EditorConstants
from .line import Line
from .location import Location, Position, Size
from .search import SearchDirection, SearchInfo
from .statusbar import DocumentStatus
from .version import get_version

logger = logging.getLogger(__name__)


class View:
    """Caret and viewport over a ``Buffer``.

    ``location`` is the caret in lines and graphemes. ``scroll_offset``
    is the rendered row and column shown in the top-left cell; it is
    recomputed after every movement, edit and resize so the caret stays
    inside the viewport.
    """

    def __init__(self, buffer: Optional[Buffer] = None, size: Optional[Size] = None):
        self.buffer = buffer if buffer is not None else Buffer()
        self.needs_redraw = True
        self.size = size if size is not None else Size()
        self.location = Location()
        self.scroll_offset = Position()
        self.search_info: Optional[SearchInfo] = None

    # File handling

    def load(self, filename: str) -> None:
        self.buffer = Buffer.load(filename)
        self.location = Location()
        self.scroll_offset = Position()
        self.needs_redraw = True

    def is_file_loaded(self) -> bool:
        return self.buffer.is_file_loaded()

    def save(self) -> None:
        self.buffer.save()

    def save_as(self, filename: str) -> None:
        self.buffer.save_as(filename)

    def resize(self, size: Size) -> None:
        self.size = size
        self.scroll_location_into_view()
        self.needs_redraw = True

    # Search

    def is_searching(self) -> bool:
        return self.search_info is not None

    def enter_search(self) -> None:
        self.search_info = SearchInfo(previous_location=self.location)

    def dismiss_search(self) -> None:
        """Leave the search and put the caret back where it started."""
        if self.search_info is None:
            return
        self.location = self.search_info.previous_location
        self.search_info = None
        # The terminal may have been resized during the search
        self.scroll_location_into_view()
        self.needs_redraw = True

    def confirm_search(self) -> None:
        """Leave the search, keeping the caret on the current match."""
        self.search_info = None
        self.needs_redraw = True

    def update_query(self, text: str) -> None:
        """Replace the query and search again from the pre-search location."""
        if self.search_info is None:
            return
        self.search_info.query = Line(text)
        self._search_in_direction(self.search_info.previous_location, SearchDirection.FORWARD)

    def find_next(self) -> bool:
        """Move to the next match; False if there is no query to look for."""
        if not self._has_query():
            return False
        step = self.search_info.step()
        start = Location(self.location.line_idx, self.location.grapheme_idx + step)
        self._search_in_direction(start, SearchDirection.FORWARD)
        return True

    def find_previous(self) -> bool:
        """Move to the previous match; False if there is no query to look for."""
        if not self._has_query():
            return False
        self._search_in_direction(self.location, SearchDirection.BACKWARD)
        return True

    def _has_query(self) -> bool:
        return self.search_info is not None and bool(self.search_info.query_text())

    def _search_in_direction(self, start: Location, direction: SearchDirection) -> None:
        query = self.search_info.query_text()
        if query:
            if direction is SearchDirection.FORWARD:
                found = self.buffer.search_forward(query, start)
            else:
                found = self.buffer.search_backward(query, start)
            if found is not None:
                self.location = found
                self.scroll_location_into_view()
            else:
                logger.debug(f"No match for {query!r} {direction.value} of {start}")
        # Match highlighting changes with every query
        self.needs_redraw = True

    # Movement

    def handle_move(self, command: Move) -> None:
        step = max(self.size.height - 1, 0)
        if command is Move.UP:
            self.move_up(1)
        elif command is Move.DOWN:
            self.move_down(1)
        elif command is Move.LEFT:
            self.move_left()
        elif command is Move.RIGHT:
            self.move_right()
        elif command is Move.PAGE_UP:
            self.move_up(step)
        elif command is Move.PAGE_DOWN:
            self.move_down(step)
        elif command is Move.START_OF_LINE:
            self.move_to_start_of_line()
        elif command is Move.END_OF_LINE:
            self.move_to_end_of_line()
        self.scroll_location_into_view()

    def move_up(self, step: int) -> None:
        self.location = Location(max(self.location.line_idx - step, 0),
                                 self.location.grapheme_idx)
        self._snap_to_valid_grapheme()

    def move_down(self, step: int) -> None:
        self.location = Location(self.location.line_idx + step, self.location.grapheme_idx)
        self._snap_to_valid_line()
        self._snap_to_valid_grapheme()

    def move_left(self) -> None:
        if self.location.grapheme_idx > 0:
            self.location = Location(self.location.line_idx, self.location.grapheme_idx - 1)
        elif self.location.line_idx > 0:
            self.move_up(1)
            self.move_to_end_of_line()

    def move_right(self) -> None:
        line_idx, grapheme_idx = self.location.line_idx, self.location.grapheme_idx
        if grapheme_idx < self.buffer.grapheme_count(line_idx):
            self.location = Location(line_idx, grapheme_idx + 1)
        elif line_idx + 1 < self.buffer.height:
            self.location = Location(line_idx + 1, 0)
        else:
            self._snap_to_valid_grapheme()

    def move_to_start_of_line(self) -> None:
        self.location = Location(self.location.line_idx, 0)

    def move_to_end_of_line(self) -> None:
        line_idx = self.location.line_idx
        self.location = Location(line_idx, self.buffer.grapheme_count(line_idx))

    def _snap_to_valid_grapheme(self) -> None:
        count = self.buffer.grapheme_count(self.location.line_idx)
        if self.location.grapheme_idx > count:
            self.location = Location(self.location.line_idx, count)

    def _snap_to_valid_line(self) -> None:
        # The caret may sit one line below the last line
        if self.location.line_idx > self.buffer.height:
            self.location = Location(self.buffer.height, self.location.grapheme_idx)

    # Scrolling

    def caret_to_text_position(self) -> Position:
        """Rendered position of the caret in the whole document."""
        return Position(self.location.line_idx, self.buffer.width_until(self.location))

    def caret_position(self) -> Position:
        """Position of the caret on screen, relative to the viewport."""
        return self.caret_to_text_position().saturating_sub(self.scroll_offset)

    def scroll_location_into_view(self) -> None:
        position = self.caret_to_text_position()
        self._scroll_vertically(position.row)
        self._scroll_horizontally(position.col)

    def _scroll_vertically(self, to: int) -> None:
        height = self.size.height
        offset = self.scroll_offset.row
        if to < offset:
            new_offset = to
        elif height > 0 and to >= offset + height:
            new_offset = to - height + 1
        else:
            return
        self.scroll_offset = Position(new_offset, self.scroll_offset.col)
        self.needs_redraw = True

    def _scroll_horizontally(self, to: int) -> None:
        width = self.size.width
        offset = self.scroll_offset.col
        if to < offset:
            new_offset = to
        elif width > 0 and to >= offset + width:
            new_offset = to - width + 1
        else:
            return
        self.scroll_offset = Position(self.scroll_offset.row, new_offset)
        self.needs_redraw = True

    # Editing

    def handle_edit(self, command: Edit) -> None:
        action = command.action
        if action is EditAction.INSERT:
            self.insert_char(command.char)
        elif action is EditAction.INSERT_TAB:
            self.insert_char('\t')
        elif action is EditAction.INSERT_NEWLINE:
            self.insert_newline()
        elif action is EditAction.DELETE:
            self.delete()
        elif action is EditAction.DELETE_BACKWARD:
            self.delete_backward()

    def insert_char(self, ch: str) -> None:
        old_count = self.buffer.grapheme_count(self.location.line_idx)
        self.buffer.insert_char(ch, self.location)
        new_count = self.buffer.grapheme_count(self.location.line_idx)
        # A combining mark joins the previous grapheme and doesn't advance
        if new_count > old_count:
            self.handle_move(Move.RIGHT)
        self.needs_redraw = True

    def insert_newline(self) -> None:
        self.buffer.insert_newline(self.location)
        self.location = Location(self.location.line_idx + 1, 0)
        self.scroll_location_into_view()
        self.needs_redraw = True

    def delete(self) -> None:
        self.buffer.delete(self.location)
        self.needs_redraw = True

    def delete_backward(self) -> None:
        if self.location == Location(0, 0):
            return
        self.handle_move(Move.LEFT)
        self.delete()

    # Rendering

    def get_visible_row(self, row: int) -> Optional[AnnotatedText]:
        """Text to draw on screen row ``row``, or None below the document."""
        line_idx = self.scroll_offset.row + row
        line = self.buffer.line(line_idx)
        if line is None:
            return None

        left = self.scroll_offset.col
        query = self.search_info.query_text() if self.search_info is not None else ""
        selected_match = None
        if query and line_idx == self.location.line_idx:
            selected_match = self.location.grapheme_idx
        return line.get_annotated_visible_substr(
            range(left, left + self.size.width), query or None, selected_match)

    def welcome_row(self) -> int:
        return -(-self.size.height // 3)

    def render_rows(self) -> list[Union[AnnotatedText, str]]:
        """One entry per screen row: annotated line text or a plain string."""
        rows: list[Union[AnnotatedText, str]] = []
        for row in range(self.size.height):
            text = self.get_visible_row(row)
            if text is not None:
                rows.append(text)
            elif row == self.welcome_row() and self.buffer.is_empty():
                rows.append(self.welcome_message(self.size.width))
            else:
                rows.append(EditorConstants.EMPTY_ROW)
        self.needs_redraw = False
        return rows

    @staticmethod
    def welcome_message(width: int) -> str:
        if width == 0:
            return ""
        message = f"{EditorConstants.NAME} editor -- version {get_version()}"
        remaining = width - 1
        if remaining <= len(message):
            return EditorConstants.EMPTY_ROW
        padding = remaining - len(message)
        left = padding // 2
        return EditorConstants.EMPTY_ROW + " " * left + message + " " * (padding - left)

    def get_status(self) -> DocumentStatus:
        return DocumentStatus(
            total_lines=self.buffer.height,
            current_line_idx=self.location.line_idx,
            is_modified=self.buffer.dirty,
            filename=str(self.buffer.file_info),
        )
