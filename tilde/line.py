"""A single line of text, segmented into grapheme clusters.

Three index spaces meet here: string offsets into the raw text, grapheme
indices (what the caret counts in) and rendered columns (what the
terminal counts in). A ``Line`` keeps one ``TextFragment`` per grapheme
cluster so it can convert between them.
"""

import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import grapheme
from wcwidth import wcswidth

from .annotated_text import AnnotatedText, AnnotationType
from .constants import EditorConstants


class GraphemeWidth(Enum):
    """Number of terminal columns a grapheme occupies."""
    HALF = 1
    FULL = 2


@dataclass
class TextFragment:
    start: int  # Offset of the cluster in the line's text
    grapheme: str
    rendered_width: GraphemeWidth
    replacement: Optional[str] = None  # Display-only substitute glyph

    @property
    def end(self) -> int:
        return self.start + len(self.grapheme)


def _replacement_for(cluster: str, width: int) -> Optional[str]:
    """Return the glyph to draw instead of ``cluster``, if any."""
    if cluster == " ":
        return None
    if cluster == "\t":
        return EditorConstants.TAB_REPLACEMENT
    if all(unicodedata.category(ch) == "Cc" for ch in cluster):
        return EditorConstants.CONTROL_REPLACEMENT
    if width > 0 and not cluster.strip():
        return EditorConstants.WHITESPACE_REPLACEMENT
    if width == 0:
        return EditorConstants.ZERO_WIDTH_REPLACEMENT
    return None


def _build_fragments(text: str) -> list[TextFragment]:
    fragments = []
    offset = 0
    for cluster in grapheme.graphemes(text):
        # wcswidth reports -1 for clusters containing control characters
        width = max(wcswidth(cluster), 0)
        replacement = _replacement_for(cluster, width)
        if replacement is not None or width <= 1:
            rendered_width = GraphemeWidth.HALF
        else:
            rendered_width = GraphemeWidth.FULL
        fragments.append(TextFragment(offset, cluster, rendered_width, replacement))
        offset += len(cluster)
    return fragments


class Line:
    """One line of a document, without its line terminator."""

    def __init__(self, text: str = ""):
        assert "\n" not in text, "A line cannot contain a newline"
        self._text = text
        self._fragments = _build_fragments(text)

    @property
    def text(self) -> str:
        return self._text

    @property
    def fragments(self) -> tuple[TextFragment, ...]:
        return tuple(self._fragments)

    def is_empty(self) -> bool:
        return not self._text

    def grapheme_count(self) -> int:
        return len(self._fragments)

    def width(self) -> int:
        """Rendered width of the whole line in columns."""
        return self.width_until(self.grapheme_count())

    def width_until(self, grapheme_idx: int) -> int:
        """Rendered width of the first ``grapheme_idx`` graphemes."""
        return sum(f.rendered_width.value for f in self._fragments[:grapheme_idx])

    # Editing

    def _rebuild_fragments(self) -> None:
        self._fragments = _build_fragments(self._text)

    def insert_char(self, ch: str, at: int) -> None:
        """Insert ``ch`` before grapheme ``at``, or append it past the end."""
        assert at <= self.grapheme_count() + 1, f"Invalid grapheme index {at}"
        if at < self.grapheme_count():
            offset = self._fragments[at].start
            self._text = self._text[:offset] + ch + self._text[offset:]
        else:
            self._text += ch
        self._rebuild_fragments()

    def delete(self, at: int) -> None:
        """Delete grapheme ``at``; does nothing past the end of the line."""
        assert at <= self.grapheme_count(), f"Invalid grapheme index {at}"
        if at < self.grapheme_count():
            fragment = self._fragments[at]
            self._text = self._text[:fragment.start] + self._text[fragment.end:]
        self._rebuild_fragments()

    def append(self, other: "Line") -> None:
        self._text += other.text
        self._rebuild_fragments()

    def split(self, at: int) -> "Line":
        """Cut the line before grapheme ``at`` and return the right part."""
        offset = self._grapheme_to_offset(at)
        remainder = Line(self._text[offset:])
        self._text = self._text[:offset]
        self._rebuild_fragments()
        return remainder

    # Index conversion

    def _grapheme_to_offset(self, grapheme_idx: int) -> int:
        assert grapheme_idx <= self.grapheme_count(), (
            f"Invalid grapheme index {grapheme_idx}"
        )
        if grapheme_idx < self.grapheme_count():
            return self._fragments[grapheme_idx].start
        if grapheme_idx == self.grapheme_count():
            return len(self._text)
        return 0

    def _offset_to_grapheme(self, offset: int) -> Optional[int]:
        """Index of the first grapheme starting at or after ``offset``."""
        assert 0 <= offset <= len(self._text), f"Invalid offset {offset}"
        for idx, fragment in enumerate(self._fragments):
            if fragment.start >= offset:
                return idx
        return None

    # Search

    def _find_all(self, query: str, start: int, end: int) -> list[tuple[int, int]]:
        """Non-overlapping matches of ``query`` inside ``text[start:end]``.

        Returns:
            (offset, grapheme index) pairs, left to right.
        """
        if not query:
            return []
        haystack = self._text[:end]
        matches = []
        offset = haystack.find(query, start)
        while offset != -1:
            grapheme_idx = self._offset_to_grapheme(offset)
            if grapheme_idx is not None:
                matches.append((offset, grapheme_idx))
            offset = haystack.find(query, offset + len(query))
        return matches

    def search_forward(self, query: str, from_grapheme_idx: int) -> Optional[int]:
        """Grapheme index of the first match at or after ``from_grapheme_idx``."""
        if self.is_empty() or from_grapheme_idx >= self.grapheme_count():
            return None
        start = self._grapheme_to_offset(from_grapheme_idx)
        matches = self._find_all(query, start, len(self._text))
        return matches[0][1] if matches else None

    def search_backward(self, query: str, from_grapheme_idx: int) -> Optional[int]:
        """Grapheme index of the last match ending before ``from_grapheme_idx``."""
        assert from_grapheme_idx <= self.grapheme_count(), (
            f"Invalid grapheme index {from_grapheme_idx}"
        )
        if self.is_empty() or from_grapheme_idx == 0:
            return None
        end = self._grapheme_to_offset(min(from_grapheme_idx, self.grapheme_count()))
        matches = self._find_all(query, 0, end)
        return matches[-1][1] if matches else None

    # Rendering

    def get_visible_graphemes(self, col_range: range) -> str:
        """Plain text visible in the columns ``col_range``."""
        start, end = col_range.start, col_range.stop
        result = []
        current = 0
        for fragment in self._fragments:
            fragment_end = current + fragment.rendered_width.value
            if current >= end:
                break
            if fragment_end > start:
                if fragment_end > end or current < start:
                    result.append(EditorConstants.ELLIPSIS)
                elif fragment.replacement is not None:
                    result.append(fragment.replacement)
                else:
                    result.append(fragment.grapheme)
            current = fragment_end
        return "".join(result)

    def get_annotated_visible_substr(
        self,
        col_range: range,
        query: Optional[str] = None,
        selected_match: Optional[int] = None,
    ) -> AnnotatedText:
        """Build the text to draw for the columns ``col_range``.

        Fragments left of the range are dropped and so is everything right
        of it. A grapheme cut by either edge becomes an ellipsis, and
        graphemes with a replacement glyph are drawn as that glyph. Every
        occurrence of ``query`` is annotated as a match; the one starting
        at grapheme ``selected_match`` is annotated as the selected match.

        Args:
            col_range: Half-open range of rendered columns.
            query: Search query to highlight, if any.
            selected_match: Grapheme index of the current match.

        Returns:
            AnnotatedText holding exactly the visible text.
        """
        result = AnnotatedText(self._text)

        if query:
            for offset, grapheme_idx in self._find_all(query, 0, len(self._text)):
                if selected_match is not None and grapheme_idx == selected_match:
                    kind = AnnotationType.SELECTED_MATCH
                else:
                    kind = AnnotationType.MATCH
                result.add_annotation(kind, offset, offset + len(query))

        # Work right to left so offsets of fragments not yet visited stay valid
        left, right = col_range.start, col_range.stop
        fragment_start = self.width()
        for fragment in reversed(self._fragments):
            fragment_end = fragment_start
            fragment_start -= fragment.rendered_width.value

            if fragment_start >= right:
                result.truncate_right_from(fragment.start)
                continue
            if fragment_end > right:
                result.replace(fragment.start, len(result.text), EditorConstants.ELLIPSIS)
                continue

            if fragment_end <= left:
                result.truncate_left_until(fragment.end)
                break
            if fragment_start < left:
                # Annotations wholly left of this fragment must not reach the ellipsis
                result.truncate_left_until(fragment.start)
                result.replace(0, len(fragment.grapheme), EditorConstants.ELLIPSIS)
                break

            if fragment.replacement is not None:
                result.replace(fragment.start, fragment.end, fragment.replacement)

        return result

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Line({self._text!r})"

    def __eq__(self, other) -> bool:
        if isinstance(other, Line):
            return self._text == other._text
        return NotImplemented
