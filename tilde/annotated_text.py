"""Strings decorated with half-open offset ranges.

An ``AnnotatedText`` is what a ``Line`` hands to the renderer: the exact
text to draw for one screen row plus the spans that need highlighting.
Offsets are Python string indices.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


class AnnotationType(Enum):
    """Kinds of highlight a span of text can carry."""
    MATCH = "match"
    SELECTED_MATCH = "selected_match"


@dataclass
class Annotation:
    kind: AnnotationType
    start: int
    end: int


@dataclass
class AnnotatedTextPart:
    """A run of text sharing a single annotation (or none)."""
    text: str
    kind: Optional[AnnotationType] = None


def _remap(idx: int, start: int, end: int, delta: int, inside: int) -> int:
    if idx <= start:
        return idx
    if idx >= end:
        return idx + delta
    return inside


class AnnotatedText:
    """A string plus a list of annotations over it."""

    def __init__(self, text: str = ""):
        self.text = text
        self.annotations: list[Annotation] = []

    def add_annotation(self, kind: AnnotationType, start: int, end: int) -> None:
        """Tag ``text[start:end]`` with ``kind``."""
        assert 0 <= start <= end, f"Invalid annotation range {start}..{end}"
        self.annotations.append(Annotation(kind, start, end))

    def replace(self, start: int, end: int, new_text: str) -> None:
        """Replace ``text[start:end]`` with ``new_text``, keeping annotations.

        Annotations before the range are untouched and annotations after it
        shift by the length difference. An endpoint strictly inside the
        replaced range is clamped to the replacement: a start endpoint to
        its beginning, an end endpoint to its end. Annotations left empty
        are dropped.

        Args:
            start: First offset to replace.
            end: Offset one past the last replaced character; clipped to
                the text length.
            new_text: Replacement text.
        """
        end = min(end, len(self.text))
        assert start <= end, f"Invalid replace range {start}..{end}"
        if start > end:
            return

        self.text = self.text[:start] + new_text + self.text[end:]
        new_end = start + len(new_text)
        delta = new_end - end

        kept = []
        for annotation in self.annotations:
            annotation.start = _remap(annotation.start, start, end, delta, start)
            annotation.end = _remap(annotation.end, start, end, delta, new_end)
            if annotation.start < annotation.end:
                kept.append(annotation)
        self.annotations = kept

    def truncate_left_until(self, idx: int) -> None:
        """Drop everything before ``idx``."""
        self.replace(0, idx, "")

    def truncate_right_from(self, idx: int) -> None:
        """Drop everything from ``idx`` on."""
        self.replace(idx, len(self.text), "")

    def __iter__(self) -> Iterator[AnnotatedTextPart]:
        """Yield consecutive parts of the text in order.

        Where annotations overlap, the one added last wins.
        """
        idx = 0
        length = len(self.text)
        while idx < length:
            active_idx = None
            for i in range(len(self.annotations) - 1, -1, -1):
                annotation = self.annotations[i]
                if annotation.start <= idx < annotation.end:
                    active_idx = i
                    break
            if active_idx is not None:
                active = self.annotations[active_idx]
                end = min(active.end, length)
                # A later annotation starting inside takes over from there
                for later in self.annotations[active_idx + 1:]:
                    if idx < later.start < end:
                        end = later.start
                yield AnnotatedTextPart(self.text[idx:end], active.kind)
                idx = end
                continue

            # Plain run up to the next annotation start
            end = length
            for annotation in self.annotations:
                if idx < annotation.start < end:
                    end = annotation.start
            yield AnnotatedTextPart(self.text[idx:end])
            idx = end

    def __str__(self) -> str:
        return self.text

    def __len__(self) -> int:
        return len(self.text)

    def __repr__(self) -> str:
        return f"AnnotatedText({self.text!r}, {self.annotations!r})"
