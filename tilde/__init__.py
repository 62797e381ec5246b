"""tilde - the text-editing core of a small terminal editor."""

from .annotated_text import AnnotatedText, AnnotationType
from .buffer import Buffer
from .line import Line
from .location import Location, Position, Size
from .version import __version__
from .view import View

__all__ = [
    'AnnotatedText',
    'AnnotationType',
    'Buffer',
    'Line',
    'Location',
    'Position',
    'Size',
    'View',
    '__version__',
]
