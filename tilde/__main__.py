"""tilde CLI entry point.

Allows running via `python -m tilde` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import sys
from typing import Optional

from .version import get_version_string


def _escape_bytes(s: str) -> str:
    """Return a printable representation of raw key string."""
    return s.encode('unicode_escape').decode('ascii')


def run_keyboard_test() -> None:
    """Print parsed key events and the commands they resolve to.

    Quit with ESC.
    """
    from .commands import CommandRegistry
    from .keyboard import KeyboardHandler, KeyType
    from .terminal import TerminalInterface

    print("Keyboard test mode: press keys to see parsed events.")
    print("Quit with ESC.")

    term = TerminalInterface()
    registry = CommandRegistry()
    kb = KeyboardHandler(term)
    term.setup()
    try:
        with term.term.cbreak():
            while True:
                ev = kb.get_key_event(timeout=None)
                if not ev:
                    continue
                if ev.key_type == KeyType.SPECIAL and ev.value == 'escape':
                    break
                command = registry.resolve(ev)
                print(f"type={ev.key_type.value} value={ev.value} "
                      f"raw='{_escape_bytes(ev.raw)}' command={command}\r")
    finally:
        term.cleanup()
    print("Exiting keyboard test.")


def main(argv: Optional[list[str]] = None) -> None:
    # Very small arg parsing: version, keyboard test mode and optional filename
    args = sys.argv[1:] if argv is None else argv
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return
    if args and args[0] in ('--keytest', '--keyboard-test'):
        run_keyboard_test()
        return

    # Lazy import to avoid importing UI deps for --version
    from .config import load_config
    from .editor import Editor
    from .logs import configure_logging

    config = load_config()
    try:
        configure_logging(config)
    except OSError as e:
        print(f"tilde: logging disabled: {e}", file=sys.stderr)

    editor = Editor(config=config)
    if args:
        editor.load_file(args[0])
    editor.run()


if __name__ == "__main__":  # pragma: no cover
    main()
