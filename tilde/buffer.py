"""Document storage: lines of text plus file association and dirty state."""

from __future__ import annotations

import contextlib
import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from typing import Iterable, Optional

from .constants import EditorConstants
from .line import Line
from .location import Location

logger = logging.getLogger(__name__)


class NoFileNameError(Exception):
    """Raised when saving a buffer that has no file associated with it."""


@dataclass
class FileInfo:
    path: Optional[str] = None

    def has_path(self) -> bool:
        return self.path is not None

    def __str__(self) -> str:
        if self.path is None:
            return EditorConstants.NO_NAME
        return os.path.basename(self.path) or self.path


def split_lines(content: str) -> list[str]:
    """Split file content on ``\\n`` / ``\\r\\n`` terminators.

    A trailing terminator does not start another line, so an empty file
    has no lines at all.
    """
    lines = content.split('\n')
    if lines[-1] == '':
        lines.pop()
    return [line[:-1] if line.endswith('\r') else line for line in lines]


class Buffer:
    """An ordered list of lines, optionally tied to a file."""

    def __init__(
        self,
        lines: Optional[Iterable[Line]] = None,
        file_info: Optional[FileInfo] = None,
        dirty: bool = False,
    ):
        self.lines: list[Line] = list(lines) if lines is not None else []
        self.file_info = file_info or FileInfo()
        self.dirty = dirty

    @classmethod
    def from_text(cls, text: str) -> "Buffer":
        return cls(Line(line) for line in split_lines(text))

    @classmethod
    def load(cls, filename: str) -> "Buffer":
        """Load ``filename``, or start a new file there if it can't be read.

        A missing or unreadable file gives a single empty, dirty line that
        remembers ``filename`` so the first save creates it.
        """
        file_info = FileInfo(filename)
        try:
            with open(filename, 'r', encoding='utf-8', newline='') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {filename}, starting a new file: {e}")
            return cls([Line()], file_info, dirty=True)

        lines = [Line(text) for text in split_lines(content)]
        logger.info(f"Loaded {len(lines)} lines from {filename}")
        return cls(lines, file_info)

    @property
    def height(self) -> int:
        return len(self.lines)

    def is_empty(self) -> bool:
        return not self.lines

    def is_file_loaded(self) -> bool:
        return self.file_info.has_path()

    def line(self, line_idx: int) -> Optional[Line]:
        if 0 <= line_idx < self.height:
            return self.lines[line_idx]
        return None

    def grapheme_count(self, line_idx: int) -> int:
        """Grapheme count of line ``line_idx``, 0 for a line past the end."""
        if line_idx < self.height:
            return self.lines[line_idx].grapheme_count()
        return 0

    def width_until(self, location: Location) -> int:
        if location.line_idx < self.height:
            return self.lines[location.line_idx].width_until(location.grapheme_idx)
        return 0

    # Saving

    def save(self) -> None:
        """Write the buffer to its associated file.

        Raises:
            NoFileNameError: If no file is associated yet.
            OSError: If the file can't be written; the buffer is unchanged.
        """
        if not self.file_info.has_path():
            raise NoFileNameError("No file name associated with the buffer")
        self._save_to_file(self.file_info.path)
        self.dirty = False

    def save_as(self, filename: str) -> None:
        """Write the buffer to ``filename`` and associate it on success.

        Raises:
            OSError: If the file can't be written; the buffer is unchanged.
        """
        self._save_to_file(filename)
        self.file_info = FileInfo(filename)
        self.dirty = False

    def _save_to_file(self, filename: str) -> None:
        """Write every line plus a newline, atomically."""
        content = "".join(f"{line.text}\n" for line in self.lines)

        # The temporary file must live on the same filesystem for os.replace
        dir_name = os.path.dirname(filename) or '.'
        temp_filename = None
        try:
            with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', newline='',
                                             dir=dir_name,
                                             suffix=EditorConstants.ATOMIC_SAVE_SUFFIX,
                                             delete=False) as temp_file:
                temp_filename = temp_file.name
                temp_file.write(content)
                temp_file.flush()
                os.fsync(temp_file.fileno())

            # Keep the permissions of a file we overwrite
            if os.path.exists(filename):
                os.chmod(temp_filename, stat.S_IMODE(os.stat(filename).st_mode))
            os.replace(temp_filename, filename)
        except OSError as e:
            logger.error(f"Could not save {filename}: {e}")
            if temp_filename is not None:
                with contextlib.suppress(OSError):
                    os.remove(temp_filename)
            raise

        logger.info(f"Saved {len(self.lines)} lines to {filename}")

    # Editing

    def insert_char(self, ch: str, at: Location) -> None:
        """Insert ``ch`` at ``at``; a location below the last line adds a line."""
        assert at.line_idx <= self.height, f"Invalid line index {at.line_idx}"
        if at.line_idx < self.height:
            self.lines[at.line_idx].insert_char(ch, at.grapheme_idx)
        else:
            self.lines.append(Line(ch))
        self.dirty = True

    def insert_newline(self, at: Location) -> None:
        """Split the line at ``at``, or add an empty line below the last one."""
        if at.line_idx < self.height:
            new_line = self.lines[at.line_idx].split(at.grapheme_idx)
            self.lines.insert(at.line_idx + 1, new_line)
        else:
            self.lines.append(Line())
        self.dirty = True

    def delete(self, at: Location) -> None:
        """Delete the grapheme at ``at``.

        At the end of a line the next line is joined onto it. Deleting at
        the end of the last line, or below it, does nothing.
        """
        if at.line_idx >= self.height:
            return
        line = self.lines[at.line_idx]
        if at.grapheme_idx < line.grapheme_count():
            line.delete(at.grapheme_idx)
        elif at.line_idx + 1 < self.height:
            next_line = self.lines.pop(at.line_idx + 1)
            line.append(next_line)
        else:
            return
        self.dirty = True

    # Search

    def search_forward(self, query: str, from_location: Location) -> Optional[Location]:
        """First match at or after ``from_location``, scanning down."""
        if not query:
            return None
        for line_idx in range(from_location.line_idx, self.height):
            start = from_location.grapheme_idx if line_idx == from_location.line_idx else 0
            grapheme_idx = self.lines[line_idx].search_forward(query, start)
            if grapheme_idx is not None:
                return Location(line_idx, grapheme_idx)
        return None

    def search_backward(self, query: str, from_location: Location) -> Optional[Location]:
        """Last match ending before ``from_location``, scanning up."""
        if not query:
            return None
        for line_idx in range(min(from_location.line_idx, self.height - 1), -1, -1):
            line = self.lines[line_idx]
            end = line.grapheme_count()
            if line_idx == from_location.line_idx:
                end = min(from_location.grapheme_idx, end)
            grapheme_idx = line.search_backward(query, end)
            if grapheme_idx is not None:
                return Location(line_idx, grapheme_idx)
        return None
