"""Keyboard input handling using curtsies-style tokens."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    CTRL = "ctrl"
    ALT = "alt"
    SPECIAL = "special"


@dataclass
class KeyEvent:
    """Represents a parsed keyboard event."""
    key_type: KeyType
    value: str  # The base key (e.g., 'a', 'left', 'backspace')
    raw: str  # The key string as received


# Named keys, keyed by their lower-cased curtsies spelling
_SPECIAL_NAMES = {
    'up': 'up',
    'down': 'down',
    'left': 'left',
    'right': 'right',
    'home': 'home',
    'end': 'end',
    'pageup': 'page_up',
    'page_up': 'page_up',
    'pagedown': 'page_down',
    'page_down': 'page_down',
    'delete': 'delete',
    'backspace': 'backspace',
    'enter': 'enter',
    'return': 'enter',
    'tab': 'tab',
    'esc': 'escape',
    'escape': 'escape',
    'insert': 'insert',
}

# Control characters that terminals send for named keys
_CONTROL_KEYS = {
    '\t': 'tab',
    '\r': 'enter',
    '\n': 'enter',
    '\x08': 'backspace',
    '\x7f': 'backspace',
    '\x1b': 'escape',
}


def _split_modifiers(name: str) -> tuple[set[str], str]:
    """Split 'Ctrl-x' / 'Esc+u' style names into (modifiers, base)."""
    parts = name.lower().replace('+', '-').split('-')
    base = parts[-1]
    mods = set(parts[:-1])
    if base == '' and len(parts) > 1:
        # A literal '-' as the base key, e.g. '<Ctrl-->'
        base = '-'
        mods.discard('')
    if mods & {'meta', 'esc'}:
        mods.add('alt')
    return mods, base


class KeyboardHandler:
    """Turns keys read from the terminal into ``KeyEvent`` objects."""

    def __init__(self, terminal_interface):
        """Initialize with a terminal interface."""
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        """Read the next key and parse it, or return None on timeout."""
        key = self.terminal.get_key(timeout)
        if not key:
            return None
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Parse a key string (curtsies name or raw character).

        Args:
            key: A curtsies key name such as '<UP>' or '<Ctrl-s>', or a
                single raw character.

        Returns:
            Parsed KeyEvent
        """
        key_str = str(key)

        if len(key_str) > 2 and key_str.startswith('<') and key_str.endswith('>'):
            return self._parse_token(key_str)

        if key_str in _CONTROL_KEYS:
            return KeyEvent(KeyType.SPECIAL, _CONTROL_KEYS[key_str], key_str)

        # Ctrl-A .. Ctrl-Z as raw bytes
        if len(key_str) == 1 and 1 <= ord(key_str) <= 26:
            return KeyEvent(KeyType.CTRL, chr(ord('a') + ord(key_str) - 1), key_str)

        return KeyEvent(KeyType.REGULAR, key_str, key_str)

    def _parse_token(self, key_str: str) -> KeyEvent:
        mods, base = _split_modifiers(key_str[1:-1])

        if not mods:
            if base in ('space', 'spacebar', 'spc'):
                return KeyEvent(KeyType.REGULAR, ' ', key_str)
            if base in _SPECIAL_NAMES:
                return KeyEvent(KeyType.SPECIAL, _SPECIAL_NAMES[base], key_str)

        if 'ctrl' in mods and len(base) == 1:
            # Terminals send Ctrl-J/Ctrl-M for Enter, Ctrl-I for Tab and Ctrl-H for Backspace
            named = {'j': 'enter', 'm': 'enter', 'i': 'tab', 'h': 'backspace'}.get(base)
            if named is not None:
                return KeyEvent(KeyType.SPECIAL, named, key_str)
            return KeyEvent(KeyType.CTRL, base, key_str)

        if 'alt' in mods:
            return KeyEvent(KeyType.ALT, _SPECIAL_NAMES.get(base, base), key_str)

        # Unknown token, or a special key with modifiers we don't bind
        return KeyEvent(KeyType.SPECIAL, _SPECIAL_NAMES.get(base, base), key_str)
