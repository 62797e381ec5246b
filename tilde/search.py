"""State of an incremental search attached to a document view."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .line import Line
from .location import Location


class SearchDirection(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass
class SearchInfo:
    """Exists from entering a search until it is confirmed or dismissed."""
    previous_location: Location
    query: Optional[Line] = None

    def query_text(self) -> str:
        return self.query.text if self.query is not None else ""

    def step(self) -> int:
        """Graphemes to skip so "find next" moves past the current match."""
        if self.query is None:
            return 1
        return max(self.query.grapheme_count(), 1)
