"""Addresses used by the editor: text locations and screen geometry."""

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Location:
    """Caret address in a document, counted in lines and graphemes."""
    line_idx: int = 0
    grapheme_idx: int = 0


@dataclass(frozen=True)
class Position:
    """A cell on screen or in the rendered document."""
    row: int = 0
    col: int = 0

    def saturating_sub(self, other: "Position") -> "Position":
        return Position(max(self.row - other.row, 0), max(self.col - other.col, 0))


@dataclass(frozen=True)
class Size:
    height: int = 0
    width: int = 0
