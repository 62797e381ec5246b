"""Tests for the one-line prompt input."""

from tilde.commandbar import CommandBar
from tilde.commands import DELETE, DELETE_BACKWARD, INSERT_TAB, Edit, Move


def make_bar(prompt="Find: ", value=""):
    bar = CommandBar()
    bar.set_prompt(prompt)
    for ch in value:
        bar.handle_edit(Edit.insert(ch))
    return bar


def test_typing_appends_and_moves_caret():
    bar = make_bar(value="abc")
    assert bar.value_text() == "abc"
    assert bar.caret == 3
    assert bar.render(40) == "Find: abc"
    assert bar.caret_col(40) == 9


def test_editing_in_the_middle():
    bar = make_bar(value="abc")
    bar.handle_move(Move.LEFT)
    bar.handle_edit(DELETE_BACKWARD)
    assert bar.value_text() == "ac"
    assert bar.caret == 1

    bar.handle_move(Move.START_OF_LINE)
    bar.handle_edit(DELETE)
    assert bar.value_text() == "c"
    assert bar.caret == 0

    bar.handle_move(Move.END_OF_LINE)
    assert bar.caret == 1


def test_backspace_at_start_is_noop():
    bar = make_bar(value="ab")
    bar.handle_move(Move.START_OF_LINE)
    bar.handle_edit(DELETE_BACKWARD)
    assert bar.value_text() == "ab"


def test_caret_stays_in_bounds():
    bar = make_bar(value="ab")
    bar.handle_move(Move.RIGHT)
    assert bar.caret == 2
    for _ in range(5):
        bar.handle_move(Move.LEFT)
    assert bar.caret == 0


def test_vertical_moves_are_ignored():
    bar = make_bar(value="ab")
    for move in (Move.UP, Move.DOWN, Move.PAGE_UP, Move.PAGE_DOWN):
        bar.handle_move(move)
    assert bar.caret == 2


def test_tab_is_shown_as_space():
    bar = make_bar(value="a")
    bar.handle_edit(INSERT_TAB)
    assert bar.value_text() == "a\t"
    assert bar.render(40) == "Find: a "


def test_long_value_scrolls_to_keep_caret_visible():
    bar = make_bar(prompt="P: ", value="abcdef")
    assert bar.render(6) == "P: ef"
    assert bar.caret_col(6) == 5


def test_clear_value():
    bar = make_bar(value="abc")
    bar.clear_value()
    assert bar.value_text() == ""
    assert bar.caret == 0
    assert bar.render(40) == "Find: "
