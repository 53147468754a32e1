"""
Test suite for jiraflow text_input and layout modules.

Covers editing keys, the character limit, cursor rendering and list scrolling.

Run with:
    pytest tests/
"""

from jiraflow.events import KeyPress
from jiraflow.keys import KeyMap
from jiraflow.layout import scroll_offset, truncate
from jiraflow.text_input import CURSOR, TextField


def test_typing_and_editing(type_text):
    """
    Test insertion, cursor movement, backspace and delete.
    """
    keymap = KeyMap()
    field = TextField()
    type_text(lambda event: field.handle_key(event, keymap) and None, "helo")
    assert field.value == "helo"
    field.handle_key(KeyPress("left"), keymap)
    field.handle_key(KeyPress("l", "l"), keymap)
    assert field.value == "hello"
    field.handle_key(KeyPress("home"), keymap)
    field.handle_key(KeyPress("delete"), keymap)
    assert field.value == "ello"
    field.handle_key(KeyPress("end"), keymap)
    field.handle_key(KeyPress("backspace"), keymap)
    assert field.value == "ell"
    assert field.cursor == 3


def test_clear_and_non_editing_keys():
    """
    Test ctrl+u clears and unknown keys are not consumed.
    """
    keymap = KeyMap()
    field = TextField(value="abc")
    assert field.handle_key(KeyPress("ctrl+u"), keymap)
    assert field.value == ""
    assert not field.handle_key(KeyPress("f5"), keymap)
    assert not field.handle_key(KeyPress("enter"), keymap)


def test_char_limit():
    """
    Test that input beyond the limit is dropped.
    """
    field = TextField(char_limit=3, value="abcdef")
    assert field.value == "abc"
    field.insert("x")
    assert field.value == "abc"


def test_render():
    """
    Test the placeholder and the cursor.
    """
    field = TextField(placeholder="PROJ-123")
    assert field.render() == "PROJ-123"
    assert field.render(focused=True) == CURSOR
    field.set_value("ab")
    field.cursor = 1
    assert field.render(focused=True) == "a" + CURSOR + "b"
    assert field.render() == "ab"


def test_scroll_offset():
    """
    Test that the window follows the highlighted row.
    """
    assert scroll_offset(0, 2, 5) == 0
    assert scroll_offset(0, 7, 5) == 3
    assert scroll_offset(3, 1, 5) == 1
    assert scroll_offset(4, 0, 0) == 0


def test_truncate():
    """
    Test cutting long lines with an ellipsis.
    """
    assert truncate("short", 10) == "short"
    assert truncate("a long line", 6) == "a lon…"
    assert truncate("abc", 1) == "…"
    assert truncate("abc", 0) == "abc"
