"""Main editor controller: modes, prompts and the event loop."""

import logging
import os
import select
import signal
import sys
import termios
import time
from enum import Enum
from typing import Optional

from .commandbar import CommandBar
from .commands import (
    Command,
    CommandRegistry,
    Edit,
    EditAction,
    Move,
    System,
    SystemAction,
    is_edit,
    is_system,
)
from .config import EditorConfig
from .constants import EditorConstants
from .keyboard import KeyboardHandler, KeyEvent
from .location import Position, Size
from .statusbar import MessageBar, StatusBar
from .terminal import TerminalInterface
from .view import View

logger = logging.getLogger(__name__)


class Mode(Enum):
    NORMAL = "normal"
    SAVE_PROMPT = "save_prompt"
    SEARCH_PROMPT = "search_prompt"


class Editor:
    """Routes commands to the document view or the prompt, by mode."""

    def __init__(self, terminal=None, config: Optional[EditorConfig] = None,
                 clock=time.monotonic):
        self.config = config or EditorConfig()
        self.terminal = terminal if terminal is not None else TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.command_registry = CommandRegistry()
        self.view = View(size=self.terminal.size())
        self.status_bar = StatusBar()
        self.message_bar = MessageBar(self.config.message_duration, clock)
        self.command_bar = CommandBar()
        self.mode = Mode.NORMAL
        self.quit_times = 0  # Quit requests seen while the buffer was dirty
        self.running = False
        self._resize_pipe_r: Optional[int] = None
        self._resize_pipe_w: Optional[int] = None
        # Last rendered document rows and status line
        self._rows = None
        self._status_text: Optional[str] = None
        self.message_bar.update_message(EditorConstants.HELP_MESSAGE)

    def load_file(self, filename: str) -> None:
        self.view.load(filename)
        self.view.resize(self.terminal.size())

    # Command processing

    def handle_key_event(self, key_event: KeyEvent) -> None:
        command = self.command_registry.resolve(key_event)
        if command is None:
            logger.debug(f"Ignoring unbound key {key_event.raw!r}")
            return
        self.process_command(command)

    def process_command(self, command: Command) -> None:
        if is_system(command, SystemAction.RESIZE):
            self.resize(command.size)
        elif self.mode is Mode.NORMAL:
            self._process_command_normal(command)
        elif self.mode is Mode.SAVE_PROMPT:
            self._process_command_save_prompt(command)
        elif self.mode is Mode.SEARCH_PROMPT:
            self._process_command_search_prompt(command)

    def resize(self, size: Size) -> None:
        self.view.resize(size)
        self.status_bar.needs_redraw = True
        # Terminals reflow old content on resize
        self.terminal.invalidate_frame()

    def _process_command_normal(self, command: Command) -> None:
        if is_system(command, SystemAction.QUIT):
            self._handle_quit()
            return
        self._reset_quit_times()

        if isinstance(command, Move):
            self.view.handle_move(command)
        elif isinstance(command, Edit):
            self.view.handle_edit(command)
        elif isinstance(command, System):
            if command.action is SystemAction.SAVE:
                self._handle_save()
            elif command.action is SystemAction.SEARCH:
                self._set_mode(Mode.SEARCH_PROMPT)
            elif command.action in (SystemAction.SEARCH_NEXT, SystemAction.SEARCH_PREVIOUS):
                self.message_bar.update_message(EditorConstants.NOTHING_TO_SEARCH_MESSAGE)
            # Dismiss has nothing to dismiss in normal mode

    def _process_command_save_prompt(self, command: Command) -> None:
        if isinstance(command, System):
            if command.action is SystemAction.DISMISS:
                self._set_mode(Mode.NORMAL)
                self.message_bar.update_message(EditorConstants.SAVE_ABORTED_MESSAGE)
        elif is_edit(command, EditAction.INSERT_NEWLINE):
            filename = self.command_bar.value_text()
            self._set_mode(Mode.NORMAL)
            if filename:
                self._save(filename)
            else:
                self.message_bar.update_message(EditorConstants.SAVE_ABORTED_MESSAGE)
        elif isinstance(command, Edit):
            self.command_bar.handle_edit(command)
        elif isinstance(command, Move):
            self.command_bar.handle_move(command)

    def _process_command_search_prompt(self, command: Command) -> None:
        if isinstance(command, System):
            if command.action is SystemAction.DISMISS:
                self.view.dismiss_search()
                self._set_mode(Mode.NORMAL)
            elif command.action is SystemAction.SEARCH_NEXT:
                if not self.view.find_next():
                    self.message_bar.update_message(EditorConstants.NOTHING_TO_SEARCH_MESSAGE)
            elif command.action is SystemAction.SEARCH_PREVIOUS:
                if not self.view.find_previous():
                    self.message_bar.update_message(EditorConstants.NOTHING_TO_SEARCH_MESSAGE)
        elif is_edit(command, EditAction.INSERT_NEWLINE):
            self.view.confirm_search()
            self._set_mode(Mode.NORMAL)
        elif isinstance(command, Edit):
            self.command_bar.handle_edit(command)
            self.view.update_query(self.command_bar.value_text())
        elif isinstance(command, Move):
            self.command_bar.handle_move(command)

    def _set_mode(self, mode: Mode) -> None:
        if mode is Mode.SAVE_PROMPT:
            self.command_bar.set_prompt(EditorConstants.SAVE_PROMPT)
            self.command_bar.clear_value()
        elif mode is Mode.SEARCH_PROMPT:
            self.command_bar.set_prompt(EditorConstants.SEARCH_PROMPT)
            self.command_bar.clear_value()
            self.view.enter_search()
        self.mode = mode

    # Saving and quitting

    def _handle_save(self) -> None:
        if self.view.is_file_loaded():
            self._save(None)
        else:
            self._set_mode(Mode.SAVE_PROMPT)

    def _save(self, filename: Optional[str]) -> None:
        """Save to ``filename``, or to the associated file if it's None."""
        try:
            if filename is None:
                self.view.save()
            else:
                self.view.save_as(filename)
        except OSError:
            # Buffer logged the details and left its state unchanged
            self.message_bar.update_message(EditorConstants.SAVE_ERROR_MESSAGE)
        else:
            self.message_bar.update_message(EditorConstants.SAVED_MESSAGE)

    def _handle_quit(self) -> None:
        if not self.view.buffer.dirty or self.quit_times + 1 >= self.config.quit_times:
            self.running = False
            return
        self.quit_times += 1
        remaining = self.config.quit_times - self.quit_times
        self.message_bar.update_message(
            EditorConstants.UNSAVED_CHANGES_MESSAGE.format(remaining))

    def _reset_quit_times(self) -> None:
        if self.quit_times > 0:
            self.quit_times = 0
            self.message_bar.update_message("")

    # Drawing

    def _draw(self) -> None:
        size = self.view.size
        width = self.terminal.width
        if self._rows is None or self.view.needs_redraw:
            self._rows = self.view.render_rows()

        self.status_bar.update_status(self.view.get_status())
        if self._status_text is None or self.status_bar.needs_redraw:
            self._status_text = self.status_bar.render(width)

        if self.mode is Mode.NORMAL:
            bottom_text = self.message_bar.render(width)
            caret = self.view.caret_position()
        else:
            bottom_text = self.command_bar.render(width)
            caret = Position(size.height + 1, self.command_bar.caret_col(width))

        self.terminal.update_frame(self._rows, self._status_text, bottom_text, caret)

    # Event loop

    def _handle_resize(self, signum, frame):
        """Handle terminal resize signal."""
        del signum, frame  # Unused
        # Write to pipe to wake up select()
        os.write(self._resize_pipe_w, EditorConstants.RESIZE_PIPE_MARKER)

    def _disable_tty_signals(self):
        """Let Ctrl-S, Ctrl-Q and friends reach the editor as keys.

        Returns:
            The previous termios settings, or None if they couldn't be changed.
        """
        try:
            old_settings = termios.tcgetattr(sys.stdin)
            new_settings = list(old_settings)  # Make it mutable
            # Flow control would swallow Ctrl-S and Ctrl-Q
            new_settings[0] &= ~(termios.IXON | termios.IXOFF)
            new_settings[3] &= ~(termios.ISIG | termios.IEXTEN)
            termios.tcsetattr(sys.stdin, termios.TCSANOW, new_settings)
        except (termios.error, OSError) as e:
            logger.warning(f"Could not adjust terminal settings: {e}")
            return None
        return old_settings

    def _wait_timeout(self) -> Optional[float]:
        # Wake up to clear a message once it expires
        if self.mode is Mode.NORMAL and not self.message_bar.is_expired():
            return self.message_bar.duration
        return None

    def run(self):
        """Run the main editor loop."""
        self._resize_pipe_r, self._resize_pipe_w = os.pipe()
        self.terminal.setup()
        self.running = True

        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)
        try:
            with self.terminal.term.cbreak():
                old_settings = self._disable_tty_signals()
                try:
                    self.resize(self.terminal.size())
                    while self.running:
                        self._draw()
                        ready, _, _ = select.select(
                            [sys.stdin, self._resize_pipe_r], [], [], self._wait_timeout())

                        if self._resize_pipe_r in ready:
                            # Clear the pipe
                            os.read(self._resize_pipe_r, 1024)
                            self.process_command(System.resize(self.terminal.size()))
                        if sys.stdin in ready:
                            key_event = self.keyboard.get_key_event(timeout=0)
                            if key_event:
                                self.handle_key_event(key_event)
                finally:
                    if old_settings is not None:
                        termios.tcsetattr(sys.stdin, termios.TCSANOW, old_settings)
        finally:
            signal.signal(signal.SIGWINCH, original_winch_handler)
            os.close(self._resize_pipe_r)
            os.close(self._resize_pipe_w)
            self._resize_pipe_r = self._resize_pipe_w = None
            self.terminal.cleanup()
