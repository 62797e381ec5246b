"""One-line input used by the save and search prompts."""

from .commands import Edit, EditAction, Move
from .line import Line


class CommandBar:
    """A prompt followed by an editable value with its own caret."""

    def __init__(self):
        self.prompt = ""
        self.value = Line()
        self.caret = 0  # Grapheme index into value

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    def clear_value(self) -> None:
        self.value = Line()
        self.caret = 0

    def value_text(self) -> str:
        return self.value.text

    def handle_edit(self, command: Edit) -> None:
        action = command.action
        if action is EditAction.INSERT:
            self._insert(command.char)
        elif action is EditAction.INSERT_TAB:
            self._insert('\t')
        elif action is EditAction.DELETE:
            self.value.delete(self.caret)
        elif action is EditAction.DELETE_BACKWARD:
            if self.caret > 0:
                self.caret -= 1
                self.value.delete(self.caret)
        # INSERT_NEWLINE is handled by the editor

    def _insert(self, ch: str) -> None:
        old_count = self.value.grapheme_count()
        self.value.insert_char(ch, self.caret)
        # A combining mark merges into the previous grapheme
        if self.value.grapheme_count() > old_count:
            self.caret += 1

    def handle_move(self, command: Move) -> None:
        if command is Move.LEFT:
            self.caret = max(self.caret - 1, 0)
        elif command is Move.RIGHT:
            self.caret = min(self.caret + 1, self.value.grapheme_count())
        elif command is Move.START_OF_LINE:
            self.caret = 0
        elif command is Move.END_OF_LINE:
            self.caret = self.value.grapheme_count()

    def _visible_start(self, width: int) -> int:
        """First value column shown, chosen so the caret stays on screen."""
        area = max(width - len(self.prompt), 1)
        caret_col = self.value.width_until(self.caret)
        return max(caret_col - area + 1, 0)

    def render(self, width: int) -> str:
        area = max(width - len(self.prompt), 0)
        start = self._visible_start(width)
        visible = self.value.get_visible_graphemes(range(start, start + area))
        return (self.prompt + visible)[:width]

    def caret_col(self, width: int) -> int:
        """Screen column of the caret when rendered ``width`` columns wide."""
        col = len(self.prompt) + self.value.width_until(self.caret) - self._visible_start(width)
        return min(col, max(width - 1, 0))
