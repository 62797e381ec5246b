"""Constants and configuration defaults for the tilde editor."""


class EditorConstants:
    """Central configuration constants for the editor."""

    NAME = "tilde"

    # Display glyphs
    ELLIPSIS = "⋯"  # Stands in for a grapheme cut by the viewport edge
    TAB_REPLACEMENT = " "
    CONTROL_REPLACEMENT = "▯"
    ZERO_WIDTH_REPLACEMENT = "·"
    WHITESPACE_REPLACEMENT = "␣"
    EMPTY_ROW = "~"

    # Quit confirmation
    DEFAULT_QUIT_TIMES = 3  # Ctrl-Q presses needed to leave a modified buffer

    # Message bar
    DEFAULT_MESSAGE_DURATION = 5.0  # Seconds a message stays visible

    # Screen layout: status bar plus message/prompt row
    STATUS_ROWS = 2

    # File operations
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files

    # Resize handling
    RESIZE_PIPE_MARKER = b'R'  # Byte written to pipe to signal resize

    # Prompts
    SAVE_PROMPT = "Save as: "
    SEARCH_PROMPT = "Search (Esc to cancel, Ctrl-N/Ctrl-P to navigate): "

    # Status messages
    HELP_MESSAGE = "HELP: Ctrl-F = find | Ctrl-S = save | Ctrl-Q = quit"
    SAVED_MESSAGE = "File saved successfully."
    SAVE_ERROR_MESSAGE = "Error writing file!"
    SAVE_ABORTED_MESSAGE = "Save aborted."
    NOTHING_TO_SEARCH_MESSAGE = "Nothing to search for"
    UNSAVED_CHANGES_MESSAGE = (
        "WARNING! File has unsaved changes. Press Ctrl-Q {} more times to quit."
    )
    NO_NAME = "[No Name]"
