"""Editor commands and the registry that maps key events to them.

Commands are plain values. The editor decides what a command means in
the current mode; the registry only knows which key produces which
command.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .keyboard import KeyEvent, KeyType
from .location import Size


class Move(Enum):
    """Caret movements."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    START_OF_LINE = "start_of_line"
    END_OF_LINE = "end_of_line"


class EditAction(Enum):
    INSERT = "insert"
    INSERT_TAB = "insert_tab"
    INSERT_NEWLINE = "insert_newline"
    DELETE = "delete"
    DELETE_BACKWARD = "delete_backward"


@dataclass(frozen=True)
class Edit:
    """A change to the text; ``char`` is only set for ``INSERT``."""
    action: EditAction
    char: Optional[str] = None

    @classmethod
    def insert(cls, char: str) -> "Edit":
        return cls(EditAction.INSERT, char)


class SystemAction(Enum):
    SAVE = "save"
    SEARCH = "search"
    SEARCH_NEXT = "search_next"
    SEARCH_PREVIOUS = "search_previous"
    DISMISS = "dismiss"
    RESIZE = "resize"
    QUIT = "quit"


@dataclass(frozen=True)
class System:
    """Editor-level request; ``size`` is only set for ``RESIZE``."""
    action: SystemAction
    size: Optional[Size] = None

    @classmethod
    def resize(cls, size: Size) -> "System":
        return cls(SystemAction.RESIZE, size)


Command = Union[Move, Edit, System]

INSERT_TAB = Edit(EditAction.INSERT_TAB)
INSERT_NEWLINE = Edit(EditAction.INSERT_NEWLINE)
DELETE = Edit(EditAction.DELETE)
DELETE_BACKWARD = Edit(EditAction.DELETE_BACKWARD)

SAVE = System(SystemAction.SAVE)
SEARCH = System(SystemAction.SEARCH)
SEARCH_NEXT = System(SystemAction.SEARCH_NEXT)
SEARCH_PREVIOUS = System(SystemAction.SEARCH_PREVIOUS)
DISMISS = System(SystemAction.DISMISS)
QUIT = System(SystemAction.QUIT)


def is_system(command: Command, action: SystemAction) -> bool:
    return isinstance(command, System) and command.action is action


def is_edit(command: Command, action: EditAction) -> bool:
    return isinstance(command, Edit) and command.action is action


class CommandRegistry:
    """Registry for mapping key combinations to commands."""

    def __init__(self):
        self._commands: Dict[Tuple[KeyType, str], Command] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        """Set up the default key bindings."""
        # Movement
        self.register((KeyType.SPECIAL, 'up'), Move.UP)
        self.register((KeyType.SPECIAL, 'down'), Move.DOWN)
        self.register((KeyType.SPECIAL, 'left'), Move.LEFT)
        self.register((KeyType.SPECIAL, 'right'), Move.RIGHT)
        self.register((KeyType.SPECIAL, 'page_up'), Move.PAGE_UP)
        self.register((KeyType.SPECIAL, 'page_down'), Move.PAGE_DOWN)
        self.register((KeyType.SPECIAL, 'home'), Move.START_OF_LINE)
        self.register((KeyType.SPECIAL, 'end'), Move.END_OF_LINE)

        # Editing
        self.register((KeyType.SPECIAL, 'enter'), INSERT_NEWLINE)
        self.register((KeyType.SPECIAL, 'tab'), INSERT_TAB)
        self.register((KeyType.SPECIAL, 'backspace'), DELETE_BACKWARD)
        self.register((KeyType.SPECIAL, 'delete'), DELETE)

        # System
        self.register((KeyType.SPECIAL, 'escape'), DISMISS)
        self.register((KeyType.CTRL, 's'), SAVE)
        self.register((KeyType.CTRL, 'f'), SEARCH)
        self.register((KeyType.CTRL, 'n'), SEARCH_NEXT)
        self.register((KeyType.CTRL, 'p'), SEARCH_PREVIOUS)
        self.register((KeyType.CTRL, 'q'), QUIT)

    def register(self, key: Tuple[KeyType, str], command: Command):
        """Bind a key combination to a command."""
        self._commands[key] = command

    def get_command(self, key_type: KeyType, value: str) -> Optional[Command]:
        return self._commands.get((key_type, value))

    def resolve(self, key_event: KeyEvent) -> Optional[Command]:
        """Translate a key event into a command.

        Returns:
            The bound command, an insert for printable characters, or None
            for keys that mean nothing to the editor.
        """
        command = self.get_command(key_event.key_type, key_event.value)
        if command is not None:
            return command

        if key_event.key_type == KeyType.REGULAR:
            char = key_event.value
            if len(char) == 1 and ord(char) >= 32 and char != '\x7f':
                return Edit.insert(char)
        return None
